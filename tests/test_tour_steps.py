import pytest

from tourguide.design.tour_steps import (
    ActionOverride,
    Animation,
    Dependency,
    ResponsiveVariant,
    TourPath,
    TourStep,
    create_step,
    create_tour_path,
)


def test_create_step_defaults():
    step = create_step("welcome", "main_toolbar", "Welcome", "Start here")
    assert step.position == "bottom"
    assert step.condition is None
    assert step.dependencies == ()
    assert step.extensions == ()
    assert step.optional is False


def test_step_rejects_unknown_position():
    with pytest.raises(ValueError):
        create_step("a", "x", "A", "a", position="middle")


def test_step_rejects_empty_id():
    with pytest.raises(ValueError):
        TourStep(id="", element_id="x", title="t", content="c")


def test_dependency_kind_validated():
    with pytest.raises(ValueError):
        Dependency("a", kind="optional")


def test_action_override_direction_validated():
    with pytest.raises(ValueError):
        ActionOverride("sideways")


def test_with_extension_replaces_same_kind():
    step = create_step("a", "x", "A", "a")
    step = step.with_extension(Animation(entry="fade")).with_extension(Animation(entry="slide"))
    assert len(step.extensions) == 1
    assert step.extension(Animation).entry == "slide"


def test_responsive_variants_are_distinct_kinds():
    step = create_step("a", "x", "A", "a")
    step = step.with_extension(ResponsiveVariant("content", "c")).with_extension(
        ResponsiveVariant("position", "top")
    )
    assert step.extension_by_kind("responsive:content") is not None
    assert step.extension_by_kind("responsive:position") is not None


def test_responsive_variant_value_for_falls_back_to_default():
    variant = ResponsiveVariant("content", "desk", mobile="phone")
    assert variant.value_for("mobile") == "phone"
    assert variant.value_for("tablet") == "desk"
    assert variant.value_for("watch") == "desk"


def test_path_lookup_helpers():
    steps = [create_step(s, s + "_el", s.upper(), s) for s in ("a", "b", "c")]
    path = create_tour_path("onboarding", "Onboarding", steps, route="/dashboard")
    assert isinstance(path.steps, tuple)
    assert path.step_ids() == ["a", "b", "c"]
    assert path.get_step(1).id == "b"
    assert path.get_step(5) is None
    assert path.get_step_by_id("c").element_id == "c_el"
    assert path.index_of("zzz") == -1
    assert path.allow_skip is True


def test_path_coerces_list_steps():
    path = TourPath(id="p", steps=[create_step("a", "x", "A", "a")])  # type: ignore[arg-type]
    assert isinstance(path.steps, tuple)


def test_action_lookup():
    step = TourStep(
        id="a",
        element_id="x",
        title="A",
        content="a",
        actions=(ActionOverride("next", label="Continue"),),
    )
    assert step.action("next").label == "Continue"
    assert step.action("prev") is None
