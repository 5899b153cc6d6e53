"""
Component loader: holds a loading state briefly, then dispatches by module
"""
import asyncio
from typing import Any, Dict, Optional

from bloom.coaching import registry
from bloom.coaching.descriptors import (LOADING_VIEW, ComponentView, ViewKind,
                                        find_component)
from bloom.coaching.exercises import Exercise, OnClose, OnComplete
from bloom.core.clock import Clock
from bloom.core.config import get_settings
from bloom.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


class ComponentLoader:
    """
    Entry point of the coaching registry.

    ``is_loading`` stays True until ``load()`` has waited out the loading
    delay. Cancelling the ``load()`` task tears the loader down; it then
    never becomes ready.
    """

    def __init__(
        self,
        component: Any,
        module_id: Any,
        on_complete: OnComplete,
        on_close: OnClose,
        saved: Optional[Dict[str, Any]] = None,
        clock: Optional[Clock] = None,
        loading_delay_ms: Optional[int] = None,
    ):
        self.component = component
        self.module_id = module_id
        self.on_complete = on_complete
        self.on_close = on_close
        self.saved = saved
        self.clock = clock
        if loading_delay_ms is None:
            loading_delay_ms = get_settings().coaching_loading_delay_ms
        self.loading_delay_ms = loading_delay_ms
        self.is_loading = True
        self._resolution: Optional[registry.Resolution] = None

    async def load(self) -> registry.Resolution:
        if self.is_loading:
            await asyncio.sleep(self.loading_delay_ms / 1000)
            self.is_loading = False
        return self.resolve()

    def resolve(self) -> registry.Resolution:
        """Dispatch once ready; the same instance is returned on later calls"""
        if self.is_loading:
            return LOADING_VIEW
        if self._resolution is None:
            self._resolution = registry.resolve(
                self.module_id,
                self.component,
                self.on_complete,
                self.on_close,
                saved=self.saved,
                clock=self.clock,
            )
            logger.debug(
                "Component resolved",
                extra={"module_id": self.module_id, "resolution": repr(self._resolution)},
            )
        return self._resolution

    def view(self) -> ComponentView:
        """The current state as a view descriptor, wrapping an exercise when one resolved"""
        resolution = self.resolve()
        if isinstance(resolution, Exercise):
            module = registry.get_module(self.module_id)
            descriptor = find_component(module.name, resolution.component_id)
            return ComponentView(
                kind=ViewKind.EXERCISE,
                title=descriptor.title if descriptor else resolution.component_id,
                actions=("update", "advance", "complete", "close"),
                component_id=resolution.component_id,
                exercise=resolution.snapshot(),
            )
        return resolution
