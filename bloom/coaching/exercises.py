"""
Interactive coaching exercises

Every exercise is a small state machine: it owns its form fields, walks an
ordered tuple of phases and hands an accumulated payload to ``on_complete``
when the member finishes. Subclasses only declare their phases, field
defaults, gates and derived values.
"""
import copy
from typing import Any, Callable, Dict, Optional, Tuple

from bloom.core.clock import Clock
from bloom.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

OnComplete = Callable[[str, Dict[str, Any]], None]
OnClose = Callable[[], None]


class ExerciseError(Exception):
    """Base class for exercise state errors"""


class UnknownField(ExerciseError, ValueError):
    """Raised when update() is given a field the exercise does not own"""


class InvalidFieldValue(ExerciseError, ValueError):
    """Raised when update() is given a value of the wrong type for a field"""


class PhaseBlocked(ExerciseError):
    """Raised when the current phase's requirement does not hold"""

    def __init__(self, component_id: str, phase: str, reason: str):
        self.component_id = component_id
        self.phase = phase
        self.reason = reason
        super().__init__(f"{component_id}: cannot leave phase '{phase}': {reason}")


def _matches_default(default: Any, value: Any) -> bool:
    """A value may replace a field when it has the same JSON type as the field's default"""
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(default, str):
        return isinstance(value, str)
    if isinstance(default, list):
        return isinstance(value, list)
    if isinstance(default, dict):
        return isinstance(value, dict)
    return True


def _is_filled(value: Any) -> bool:
    # Likert ratings start at 0, lists and text start empty
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


class Exercise:
    """Base exercise; subclasses override the class attributes below"""

    component_id: str = ""
    phases: Tuple[str, ...] = ("practice",)
    defaults: Dict[str, Any] = {}
    # phase -> field that must be filled before that phase can be left
    gates: Dict[str, str] = {}
    # stamp completedAt on the payload
    timestamped: bool = False

    def __init__(
        self,
        on_complete: OnComplete,
        on_close: OnClose,
        saved: Optional[Dict[str, Any]] = None,
        clock: Optional[Clock] = None,
    ):
        self.on_complete = on_complete
        self.on_close = on_close
        self.clock = clock or Clock()
        self.fields: Dict[str, Any] = copy.deepcopy(self.defaults)
        self.phase_index = 0
        self._payload: Optional[Dict[str, Any]] = None
        if saved:
            self._resume(saved)

    def _resume(self, saved: Dict[str, Any]):
        """Take saved values for known fields when they match the default's type and are filled"""
        for name, default in self.defaults.items():
            value = saved.get(name)
            if value is None or not _is_filled(value):
                continue
            if not _matches_default(default, value):
                continue
            self.fields[name] = copy.deepcopy(value)

    @property
    def phase(self) -> str:
        return self.phases[self.phase_index]

    @property
    def is_last_phase(self) -> bool:
        return self.phase_index == len(self.phases) - 1

    @property
    def completed(self) -> bool:
        return self._payload is not None

    def update(self, **fields) -> Dict[str, Any]:
        unknown = sorted(set(fields) - set(self.defaults))
        if unknown:
            raise UnknownField(f"{self.component_id}: unknown field(s): {', '.join(unknown)}")
        invalid = sorted(name for name, value in fields.items() if not _matches_default(self.defaults[name], value))
        if invalid:
            raise InvalidFieldValue(f"{self.component_id}: invalid value for field(s): {', '.join(invalid)}")
        self.fields.update(copy.deepcopy(fields))
        return self.fields

    def requirement(self, phase: str) -> Optional[str]:
        """Return why ``phase`` cannot be left yet, or None when it can"""
        field = self.gates.get(phase)
        if field and not _is_filled(self.fields.get(field)):
            return f"'{field}' is required"
        return None

    def advance(self) -> str:
        if self.is_last_phase:
            raise PhaseBlocked(self.component_id, self.phase, "already in the last phase")
        reason = self.requirement(self.phase)
        if reason:
            raise PhaseBlocked(self.component_id, self.phase, reason)
        self.phase_index += 1
        return self.phase

    def derive(self) -> Dict[str, Any]:
        """Values computed from the fields and added to the completion payload"""
        return {}

    def complete(self) -> Dict[str, Any]:
        """
        Build the payload and hand it to on_complete.

        A second call returns the first payload without notifying again.
        """
        if self._payload is not None:
            logger.debug(f"Exercise {self.component_id} already completed")
            return self._payload
        if not self.is_last_phase:
            raise PhaseBlocked(self.component_id, self.phase, "exercise is not in its last phase")
        reason = self.requirement(self.phase)
        if reason:
            raise PhaseBlocked(self.component_id, self.phase, reason)

        payload = copy.deepcopy(self.fields)
        payload.update(self.derive())
        if self.timestamped:
            payload["completedAt"] = self.clock.now().isoformat()
        # Only a delivered payload counts; a failing sink leaves the exercise completable
        self.on_complete(self.component_id, payload)
        self._payload = payload
        return payload

    def close(self):
        self.on_close()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "component_id": self.component_id,
            "phase": self.phase,
            "phases": list(self.phases),
            "fields": copy.deepcopy(self.fields),
            "completed": self.completed,
            "payload": copy.deepcopy(self._payload),
        }

    def __repr__(self):
        return f"<{type(self).__name__}(component_id={self.component_id}, phase={self.phase})>"
