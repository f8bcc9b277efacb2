"""Step enhancers: pure functions decorating a base ``TourStep``.

Every enhancer factory takes its options and returns ``(TourStep) -> TourStep``.
The input step is never mutated; a new frozen value is returned, so one base
step can be shared by several paths and controllers.

Compose with ``compose(step, *enhancers)`` (left to right). When two enhancers
write the same extension kind, the one applied last wins.

Example::

    step = compose(
        create_step("pay", "checkout_pay_button", "Pay", "Finish your order"),
        dependent_step(["cart"]),
        feature_flag_step("new_checkout"),
        animated_step(entry="fade-in"),
    )
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

from tourguide.services.key_value_store import KeyValueStore
from tourguide.services.service_locator import KEY_VALUE_STORE, services
from tourguide.services.tour_persistence import TourProgressStore

from .tour_steps import (
    ActionOverride,
    Animation,
    Branch,
    BranchRules,
    Condition,
    ContentProvider,
    Dependency,
    DynamicContent,
    KeyboardShortcuts,
    PathDecoration,
    ReEntryPoint,
    ResponsiveVariant,
    RoleRestriction,
    Section,
    TourStep,
)

__all__ = [
    "StepEnhancer",
    "compose",
    "conditional_step",
    "feature_flag_step",
    "progress_based_step",
    "role_restricted_step",
    "dependent_step",
    "with_dependencies",
    "branching_step",
    "section_step",
    "re_entry_point",
    "dynamic_content_step",
    "animated_step",
    "path_step",
    "position_step",
    "optional_step",
    "prioritized_step",
    "action_step",
    "responsive_content_step",
    "responsive_position_step",
    "responsive_selector_step",
    "resolve_for_device",
    "keyboard_shortcut_step",
]

StepEnhancer = Callable[[TourStep], TourStep]


def compose(step: TourStep, *enhancers: StepEnhancer) -> TourStep:
    for enhance in enhancers:
        step = enhance(step)
    return step


def _progress_store(store: Optional[KeyValueStore]) -> Optional[TourProgressStore]:
    # Resolved lazily so steps can be built before the store is registered.
    backing = store if store is not None else services.lookup(KEY_VALUE_STORE)
    return TourProgressStore(backing) if backing is not None else None


# Condition / role gating --------------------------------------------------------


def conditional_step(condition: Condition) -> StepEnhancer:
    """Show the step only while ``condition()`` is true."""

    def enhance(step: TourStep) -> TourStep:
        return replace(step, condition=condition)

    return enhance


def feature_flag_step(flag: str, store: Optional[KeyValueStore] = None) -> StepEnhancer:
    """Show the step only when ``flag`` is enabled in ``enabledFeatureFlags``."""

    def condition() -> bool:
        progress = _progress_store(store)
        return progress is not None and progress.is_feature_enabled(flag)

    return conditional_step(condition)


def progress_based_step(
    required_tours: Sequence[str], store: Optional[KeyValueStore] = None
) -> StepEnhancer:
    """Show the step only after every tour in ``required_tours`` was completed."""
    required = tuple(required_tours)

    def condition() -> bool:
        progress = _progress_store(store)
        if progress is None:
            return False
        completed = progress.completed_tours()
        return all(tour_id in completed for tour_id in required)

    return conditional_step(condition)


def role_restricted_step(roles: Iterable[str]) -> StepEnhancer:
    restriction = RoleRestriction(roles=frozenset(roles))

    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(restriction)

    return enhance


# Dependencies / branching ------------------------------------------------------


def dependent_step(
    dependencies: Union[str, Sequence[str]],
    kind: str = "hard",
    condition: Optional[Condition] = None,
) -> StepEnhancer:
    """Replace the step's dependencies with ``dependencies``."""
    ids = (dependencies,) if isinstance(dependencies, str) else tuple(dependencies)
    deps = tuple(Dependency(step_id=i, kind=kind, condition=condition) for i in ids)

    def enhance(step: TourStep) -> TourStep:
        return replace(step, dependencies=deps)

    return enhance


def with_dependencies(dependencies: Sequence[str], kind: str = "hard") -> StepEnhancer:
    """Append ``dependencies`` to the ones already declared (ids de-duplicated)."""

    def enhance(step: TourStep) -> TourStep:
        existing = step.dependency_ids()
        added = tuple(
            Dependency(step_id=i, kind=kind) for i in dependencies if i not in existing
        )
        return replace(step, dependencies=step.dependencies + added)

    return enhance


def branching_step(branches: Sequence[Union[Branch, Tuple[Condition, str]]]) -> StepEnhancer:
    """Attach ordered branch rules; the first branch whose condition holds wins."""
    rules = BranchRules(
        branches=tuple(b if isinstance(b, Branch) else Branch(b[0], b[1]) for b in branches)
    )

    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(rules)

    return enhance


def section_step(section_id: str) -> StepEnhancer:
    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(Section(section_id))

    return enhance


def re_entry_point() -> StepEnhancer:
    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(ReEntryPoint())

    return enhance


# Content ----------------------------------------------------------------------


def dynamic_content_step(
    provider: ContentProvider, placeholder: Optional[str] = None
) -> StepEnhancer:
    """Load the step's content from ``provider`` when the step becomes current.

    ``provider`` may return a string or a ``concurrent.futures.Future``
    resolving to one.
    """
    ext = DynamicContent(provider=provider, placeholder=placeholder)

    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(ext)

    return enhance


# Visual -------------------------------------------------------------------------


def animated_step(
    entry: Optional[str] = None, highlight: Optional[str] = None, exit: Optional[str] = None
) -> StepEnhancer:
    ext = Animation(entry=entry, highlight=highlight, exit=exit)

    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(ext)

    return enhance


def path_step(
    target_element_id: str,
    *,
    style: str = "dashed",
    color: Optional[str] = None,
    animation_duration_ms: int = 1000,
    show_arrow: bool = True,
    waypoints: Sequence[Tuple[int, int]] = (),
) -> StepEnhancer:
    """Draw a connector from the step target to ``target_element_id``."""
    if animation_duration_ms < 0:
        raise ValueError("animation_duration_ms must be >= 0")
    ext = PathDecoration(
        target_element_id=target_element_id,
        style=style,
        color=color,
        animation_duration_ms=animation_duration_ms,
        show_arrow=show_arrow,
        waypoints=tuple(waypoints),
    )

    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(ext)

    return enhance


def position_step(position: str) -> StepEnhancer:
    def enhance(step: TourStep) -> TourStep:
        return replace(step, position=position)

    return enhance


def optional_step() -> StepEnhancer:
    def enhance(step: TourStep) -> TourStep:
        return replace(step, optional=True)

    return enhance


def prioritized_step(priority: int) -> StepEnhancer:
    def enhance(step: TourStep) -> TourStep:
        return replace(step, priority=priority)

    return enhance


def action_step(*overrides: ActionOverride) -> StepEnhancer:
    """Override button labels/callbacks; one override per direction, later ones win."""

    def enhance(step: TourStep) -> TourStep:
        directions = {o.direction for o in overrides}
        kept = tuple(a for a in step.actions if a.direction not in directions)
        return replace(step, actions=kept + tuple(overrides))

    return enhance


# Responsive ---------------------------------------------------------------------


def _responsive(attribute: str, default: str, **variants: Optional[str]) -> StepEnhancer:
    ext = ResponsiveVariant(attribute=attribute, default=default, **variants)

    def enhance(step: TourStep) -> TourStep:
        return replace(step.with_extension(ext), **{attribute: default})

    return enhance


def responsive_content_step(
    default: str,
    *,
    mobile: Optional[str] = None,
    tablet: Optional[str] = None,
    desktop: Optional[str] = None,
) -> StepEnhancer:
    return _responsive("content", default, mobile=mobile, tablet=tablet, desktop=desktop)


def responsive_position_step(
    default: str,
    *,
    mobile: Optional[str] = None,
    tablet: Optional[str] = None,
    desktop: Optional[str] = None,
) -> StepEnhancer:
    return _responsive("position", default, mobile=mobile, tablet=tablet, desktop=desktop)


def responsive_selector_step(
    default: str,
    *,
    mobile: Optional[str] = None,
    tablet: Optional[str] = None,
    desktop: Optional[str] = None,
) -> StepEnhancer:
    return _responsive("element_id", default, mobile=mobile, tablet=tablet, desktop=desktop)


def resolve_for_device(step: TourStep, device_class: str) -> TourStep:
    """Apply every responsive variant of ``step`` for ``device_class``."""
    changes = {
        ext.attribute: ext.value_for(device_class)
        for ext in step.extensions
        if isinstance(ext, ResponsiveVariant)
    }
    return replace(step, **changes) if changes else step


# Interactivity --------------------------------------------------------------------


def keyboard_shortcut_step(
    *,
    next_key: str = "ArrowRight",
    prev_key: str = "ArrowLeft",
    skip_key: str = "s",
    help_key: str = "?",
) -> StepEnhancer:
    ext = KeyboardShortcuts(
        next_key=next_key, prev_key=prev_key, skip_key=skip_key, help_key=help_key
    )

    def enhance(step: TourStep) -> TourStep:
        return step.with_extension(ext)

    return enhance
