"""Tour step and path data model.

Steps are frozen dataclasses. Cross-cutting behaviour (branching, dynamic
content, role gating, path drawing, responsive variants ...) is attached as
typed extension records instead of an open metadata dict; each record class
has a ``kind`` and a step holds at most one extension per kind
(``with_extension`` replaces, so the last enhancer applied wins).
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from typing import (
    Callable,
    FrozenSet,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

__all__ = [
    "POSITIONS",
    "DIRECTIONS",
    "Condition",
    "ContentProvider",
    "Dependency",
    "Branch",
    "ActionOverride",
    "BranchRules",
    "DynamicContent",
    "RoleRestriction",
    "PathDecoration",
    "Animation",
    "ResponsiveVariant",
    "Section",
    "ReEntryPoint",
    "KeyboardShortcuts",
    "StepExtension",
    "TourStep",
    "TourPath",
    "create_step",
    "create_tour_path",
]

POSITIONS: Tuple[str, ...] = (
    "top",
    "right",
    "bottom",
    "left",
    "top-right",
    "top-left",
    "bottom-right",
    "bottom-left",
)
DIRECTIONS: Tuple[str, ...] = ("next", "prev", "skip", "finish")
DEVICE_CLASSES: Tuple[str, ...] = ("mobile", "tablet", "desktop")

Condition = Callable[[], bool]
ContentProvider = Callable[[], Union[str, "Future[str]", None]]


@dataclass(frozen=True)
class Dependency:
    """Prerequisite on another step of the same path.

    ``hard`` dependencies require completion, ``soft`` ones never block.
    A false ``condition`` means the dependency does not apply.
    """

    step_id: str
    kind: str = "hard"
    condition: Optional[Condition] = None

    def __post_init__(self) -> None:
        if self.kind not in ("hard", "soft"):
            raise ValueError(f"Dependency kind must be 'hard' or 'soft', got {self.kind!r}")


@dataclass(frozen=True)
class Branch:
    condition: Condition
    target_step_id: str
    label: str = ""


@dataclass(frozen=True)
class ActionOverride:
    direction: str
    label: Optional[str] = None
    callback: Optional[Callable[[], None]] = None

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Unknown action direction: {self.direction!r}")


# Extensions -------------------------------------------------------------------


@dataclass(frozen=True)
class BranchRules:
    branches: Tuple[Branch, ...]

    @property
    def kind(self) -> str:
        return "branches"


@dataclass(frozen=True)
class DynamicContent:
    provider: ContentProvider
    placeholder: Optional[str] = None

    @property
    def kind(self) -> str:
        return "dynamic_content"


@dataclass(frozen=True)
class RoleRestriction:
    roles: FrozenSet[str]

    @property
    def kind(self) -> str:
        return "roles"

    def allows(self, user_type: Optional[str]) -> bool:
        return user_type is not None and user_type in self.roles


@dataclass(frozen=True)
class PathDecoration:
    """Connector drawn from the step's target to another element."""

    target_element_id: str
    style: str = "dashed"
    color: Optional[str] = None
    animation_duration_ms: int = 1000
    show_arrow: bool = True
    waypoints: Tuple[Tuple[int, int], ...] = ()

    @property
    def kind(self) -> str:
        return "path"


@dataclass(frozen=True)
class Animation:
    entry: Optional[str] = None
    highlight: Optional[str] = None
    exit: Optional[str] = None

    @property
    def kind(self) -> str:
        return "animation"


@dataclass(frozen=True)
class ResponsiveVariant:
    """Per-device override of one step attribute (content, position or element_id)."""

    attribute: str
    default: str
    mobile: Optional[str] = None
    tablet: Optional[str] = None
    desktop: Optional[str] = None

    def __post_init__(self) -> None:
        if self.attribute not in ("content", "position", "element_id"):
            raise ValueError(f"Unsupported responsive attribute: {self.attribute!r}")
        if self.attribute == "position":
            for value in (self.default, self.mobile, self.tablet, self.desktop):
                if value is not None and value not in POSITIONS:
                    raise ValueError(f"Unknown position {value!r} in responsive variant")

    @property
    def kind(self) -> str:
        return f"responsive:{self.attribute}"

    def value_for(self, device_class: str) -> str:
        value = getattr(self, device_class, None) if device_class in DEVICE_CLASSES else None
        return value if value is not None else self.default


@dataclass(frozen=True)
class Section:
    section_id: str

    @property
    def kind(self) -> str:
        return "section"


@dataclass(frozen=True)
class ReEntryPoint:
    @property
    def kind(self) -> str:
        return "re_entry"


@dataclass(frozen=True)
class KeyboardShortcuts:
    next_key: str = "ArrowRight"
    prev_key: str = "ArrowLeft"
    skip_key: str = "s"
    help_key: str = "?"

    @property
    def kind(self) -> str:
        return "keyboard"


StepExtension = Union[
    BranchRules,
    DynamicContent,
    RoleRestriction,
    PathDecoration,
    Animation,
    ResponsiveVariant,
    Section,
    ReEntryPoint,
    KeyboardShortcuts,
]

E = TypeVar("E")


@dataclass(frozen=True)
class TourStep:
    id: str
    element_id: str
    title: str
    content: str
    position: str = "bottom"
    condition: Optional[Condition] = None
    dependencies: Tuple[Dependency, ...] = ()
    extensions: Tuple[StepExtension, ...] = ()
    actions: Tuple[ActionOverride, ...] = ()
    optional: bool = False
    priority: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Step id must not be empty")
        if self.position not in POSITIONS:
            raise ValueError(f"Unknown position {self.position!r} for step {self.id}")

    # Extensions -------------------------------------------------------
    def with_extension(self, ext: StepExtension) -> "TourStep":
        kept = tuple(e for e in self.extensions if e.kind != ext.kind)
        return replace(self, extensions=kept + (ext,))

    def extension(self, ext_type: Type[E]) -> Optional[E]:
        for ext in reversed(self.extensions):
            if isinstance(ext, ext_type):
                return ext
        return None

    def extension_by_kind(self, kind: str) -> Optional[StepExtension]:
        for ext in self.extensions:
            if ext.kind == kind:
                return ext
        return None

    @property
    def branches(self) -> Tuple[Branch, ...]:
        rules = self.extension(BranchRules)
        return rules.branches if rules else ()

    # Actions / dependencies --------------------------------------------------
    def action(self, direction: str) -> Optional[ActionOverride]:
        for override in self.actions:
            if override.direction == direction:
                return override
        return None

    def dependency_ids(self) -> List[str]:
        return [d.step_id for d in self.dependencies]


@dataclass(frozen=True)
class TourPath:
    """Named ordered walkthrough bound to a route (``*`` wildcards allowed)."""

    id: str
    name: str = ""
    steps: Tuple[TourStep, ...] = field(default_factory=tuple)
    route: Optional[str] = None
    allow_skip: bool = True
    show_progress: bool = True
    auto_start: bool = False
    description: str = ""
    version: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, "steps", tuple(self.steps))

    def step_ids(self) -> List[str]:
        return [s.id for s in self.steps]

    def get_step(self, index: int) -> Optional[TourStep]:
        if 0 <= index < len(self.steps):
            return self.steps[index]
        return None

    def get_step_by_id(self, step_id: str) -> Optional[TourStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def index_of(self, step_id: str) -> int:
        for i, step in enumerate(self.steps):
            if step.id == step_id:
                return i
        return -1


def create_step(
    id: str, element_id: str, title: str, content: str, position: str = "bottom"
) -> TourStep:
    return TourStep(id=id, element_id=element_id, title=title, content=content, position=position)


def create_tour_path(
    id: str, name: str, steps: Sequence[TourStep], **options: object
) -> TourPath:
    """Build a ``TourPath``; ``options`` accepts any other TourPath field."""
    return TourPath(id=id, name=name, steps=tuple(steps), **options)  # type: ignore[arg-type]
