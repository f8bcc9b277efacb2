import pytest

from tourguide.design.step_enhancers import branching_step, compose, dependent_step
from tourguide.design.tour_dependencies import TourDependencyModel
from tourguide.design.tour_steps import create_step, create_tour_path
from tourguide.services.error_handling import TourConfigurationError


def _step(step_id, *enhancers):
    return compose(create_step(step_id, step_id + "_el", step_id.upper(), step_id), *enhancers)


def test_acyclic_graph_has_no_cycles():
    path = create_tour_path(
        "p", "P", [_step("a"), _step("b", dependent_step("a")), _step("c", dependent_step(["a", "b"]))]
    )
    report = TourDependencyModel.from_path(path).validate_dependencies()
    assert report.has_cycles is False
    assert report.cycles == ()


def test_two_step_cycle_detected():
    model = TourDependencyModel(["a", "b"])
    model.add_dependency("a", "b")
    model.add_dependency("b", "a")
    report = model.validate_dependencies()
    assert report.cycles == (("a", "b", "a"),)
    assert report.steps_in_cycles() == {"a", "b"}


def test_cycle_reported_once_regardless_of_entry():
    model = TourDependencyModel(["c", "a", "b"])
    model.add_dependency("a", "b")
    model.add_dependency("b", "c")
    model.add_dependency("c", "a")
    report = model.validate_dependencies()
    assert len(report.cycles) == 1
    assert report.cycles[0][0] == "a"
    assert report.cycles[0][-1] == "a"


def test_self_dependency_is_a_cycle():
    model = TourDependencyModel(["a"])
    model.add_dependency("a", "a")
    assert model.validate_dependencies().cycles == (("a", "a"),)


def test_hard_dependencies_gate_access():
    model = TourDependencyModel(["a", "b", "c"])
    model.add_dependency("c", "a")
    model.add_dependency("c", "b")
    assert model.can_access_step("a", set()) is True
    assert model.can_access_step("c", {"a"}) is False
    assert model.can_access_step("c", {"a", "b"}) is True


def test_soft_dependency_without_condition_passes():
    model = TourDependencyModel(["a", "b"])
    model.add_dependency("b", "a", kind="soft")
    assert model.can_access_step("b", set()) is True


def test_soft_dependency_never_blocks():
    flag = {"on": False}
    model = TourDependencyModel(["a", "b"])
    model.add_dependency("b", "a", kind="soft", condition=lambda: flag["on"])
    assert model.can_access_step("b", set()) is True
    flag["on"] = True
    assert model.can_access_step("b", set()) is True
    assert model.can_access_step("b", {"a"}) is True


def test_raising_soft_condition_does_not_block():
    def boom():
        raise RuntimeError("boom")

    model = TourDependencyModel(["a", "b"])
    model.add_dependency("b", "a", kind="soft", condition=boom)
    assert model.can_access_step("b", set()) is True


def test_hard_dependency_condition_decides_whether_it_applies():
    flag = {"on": False}
    model = TourDependencyModel(["a", "b"])
    model.add_dependency("b", "a", kind="hard", condition=lambda: flag["on"])
    assert model.can_access_step("b", set()) is True
    flag["on"] = True
    assert model.can_access_step("b", set()) is False
    assert model.can_access_step("b", {"a"}) is True


def test_raising_hard_condition_drops_the_dependency():
    def boom():
        raise RuntimeError("boom")

    model = TourDependencyModel(["a", "b"])
    model.add_dependency("b", "a", condition=boom)
    assert model.can_access_step("b", set()) is True


def test_hard_dependency_on_missing_step_never_accessible():
    path = create_tour_path("p", "P", [_step("a"), _step("b", dependent_step("ghost"))])
    model = TourDependencyModel.from_path(path)
    assert model.dangling_dependencies() == [("b", "ghost")]
    assert model.can_access_step("b", {"a"}) is False


def test_lookups_both_directions():
    path = create_tour_path(
        "p", "P", [_step("a"), _step("b", dependent_step("a")), _step("c", dependent_step("a"))]
    )
    model = TourDependencyModel.from_path(path)
    assert model.get_dependencies("b") == ["a"]
    assert model.get_dependent_steps("a") == ["b", "c"]
    node = model.node("a")
    assert node.dependencies == ()
    assert node.dependents == ("b", "c")


def test_next_available_steps_preserve_order():
    steps = [_step("a"), _step("b", dependent_step("a")), _step("c")]
    path = create_tour_path("p", "P", steps)
    model = TourDependencyModel.from_path(path)
    available = model.get_next_available_steps(set(), path.steps)
    assert [s.id for s in available] == ["a", "c"]
    available = model.get_next_available_steps({"a"}, path.steps)
    assert [s.id for s in available] == ["b", "c"]


def test_validate_aggregates_problems():
    steps = [
        _step("a", dependent_step("b")),
        _step("b", dependent_step("a")),
        _step("c", dependent_step("ghost"), branching_step([(lambda: True, "nowhere")])),
    ]
    report = TourDependencyModel.from_path(create_tour_path("p", "P", steps)).validate()
    assert report.ok is False
    assert report.dangling_dependencies == (("c", "ghost"),)
    assert report.dangling_branch_targets == (("c", "nowhere"),)
    assert len(report.problems()) == 3
    with pytest.raises(TourConfigurationError) as exc:
        report.raise_for_errors()
    assert exc.value.path_id == "p"
    assert len(exc.value.problems) == 3


def test_valid_path_report_ok():
    steps = [_step("a"), _step("b", dependent_step("a"), branching_step([(lambda: True, "a")]))]
    report = TourDependencyModel.from_path(create_tour_path("p", "P", steps)).validate()
    assert report.ok is True
    report.raise_for_errors()
