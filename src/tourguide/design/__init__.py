"""Tour authoring package.

Step/path data model, step enhancers, dependency graph, path and step-group
registries and the pure (Qt-free) decision helpers for view mode, keyboard
and swipe mapping.
"""

from .tour_steps import (  # noqa: F401
    ActionOverride,
    Branch,
    Dependency,
    TourPath,
    TourStep,
    create_step,
    create_tour_path,
)
from .tour_dependencies import (  # noqa: F401
    CycleReport,
    DependencyReport,
    TourDependencyModel,
)
from .tour_registry import (  # noqa: F401
    clear_tours,
    get_tour,
    list_tours,
    register_tour,
    tours_for_route,
    unregister_tour,
)
from .tour_step_groups import (  # noqa: F401
    StepGroup,
    compose_step_groups,
    create_step_group,
    get_step_group,
)
from .step_enhancers import compose  # noqa: F401
from .responsive_view import (  # noqa: F401
    ResponsiveViewSelector,
    classify_device,
    select_view_mode,
)
from .keyboard_navigation import NavigationAction, map_key  # noqa: F401
from .gesture_navigation import SwipeDirection, classify_swipe, map_swipe  # noqa: F401

__all__ = [
    "ActionOverride",
    "Branch",
    "Dependency",
    "TourPath",
    "TourStep",
    "create_step",
    "create_tour_path",
    "CycleReport",
    "DependencyReport",
    "TourDependencyModel",
    "clear_tours",
    "get_tour",
    "list_tours",
    "register_tour",
    "tours_for_route",
    "unregister_tour",
    "StepGroup",
    "compose_step_groups",
    "create_step_group",
    "get_step_group",
    "compose",
    "ResponsiveViewSelector",
    "classify_device",
    "select_view_mode",
    "NavigationAction",
    "map_key",
    "SwipeDirection",
    "classify_swipe",
    "map_swipe",
]
