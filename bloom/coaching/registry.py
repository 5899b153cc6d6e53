"""
Two-level lookup: module_id -> component_id -> exercise class
"""
from typing import Any, Dict, Optional, Type, Union

from bloom.coaching import week1, week2, week3, week4, week5
from bloom.coaching.descriptors import (COMING_SOON_VIEW, ComponentView,
                                        component_id_of, not_found_view)
from bloom.coaching.exercises import Exercise, OnClose, OnComplete
from bloom.core.clock import Clock
from bloom.core.logging_config import LoggingConfig
from bloom.core.metrics import coaching_resolutions_total

logger = LoggingConfig.get_logger(__name__)

Resolution = Union[Exercise, ComponentView]


class WeekModule:
    """One week's table of exercises plus its not-found fallback"""

    def __init__(self, name: str, week_number: int, label: str, components: Dict[str, Type[Exercise]]):
        self.name = name
        self.week_number = week_number
        self.label = label
        self.components = components

    def __contains__(self, component_id: str) -> bool:
        return component_id in self.components

    def exercise_class(self, component_id: Optional[str]) -> Optional[Type[Exercise]]:
        if component_id is None:
            return None
        return self.components.get(component_id)

    def resolve(
        self,
        component: Any,
        on_complete: OnComplete,
        on_close: OnClose,
        saved: Optional[Dict[str, Any]] = None,
        clock: Optional[Clock] = None,
    ) -> Resolution:
        component_id = component_id_of(component)
        exercise_class = self.exercise_class(component_id)
        if exercise_class is None:
            logger.info(
                "Component not found",
                extra={"module_id": self.name, "component_id": component_id},
            )
            coaching_resolutions_total.labels(module_id=self.name, outcome="not_found").inc()
            return not_found_view(self.label, component_id)

        coaching_resolutions_total.labels(module_id=self.name, outcome="exercise").inc()
        return exercise_class(on_complete, on_close, saved=saved, clock=clock)

    def __repr__(self):
        return f"<WeekModule(name={self.name}, components={len(self.components)})>"


WEEK1 = WeekModule("week1", 1, week1.LABEL, week1.COMPONENTS)
WEEK2 = WeekModule("week2", 2, week2.LABEL, week2.COMPONENTS)
WEEK3 = WeekModule("week3", 3, week3.LABEL, week3.COMPONENTS)
WEEK4 = WeekModule("week4", 4, week4.LABEL, week4.COMPONENTS)
WEEK5 = WeekModule("week5", 5, week5.LABEL, week5.COMPONENTS)

MODULE_REGISTRY: Dict[str, WeekModule] = {
    "week1": WEEK1,
    "week2": WEEK2,
    "week3": WEEK3,
    "week4": WEEK4,
    "week5": WEEK5,
    "week6": WEEK5,
}


def get_module(module_id: Any) -> Optional[WeekModule]:
    if not isinstance(module_id, str):
        return None
    return MODULE_REGISTRY.get(module_id)


def resolve(
    module_id: Any,
    component: Any,
    on_complete: OnComplete,
    on_close: OnClose,
    saved: Optional[Dict[str, Any]] = None,
    clock: Optional[Clock] = None,
) -> Resolution:
    """Resolve without the loading delay; unknown modules get the coming-soon view"""
    module = get_module(module_id)
    if module is None:
        coaching_resolutions_total.labels(module_id=str(module_id), outcome="coming_soon").inc()
        return COMING_SOON_VIEW
    return module.resolve(component, on_complete, on_close, saved=saved, clock=clock)
