"""
Coaching component registry
"""
from bloom.coaching.descriptors import (CATALOG, ComponentDescriptor,  # noqa: F401
                                        ComponentType, ComponentView,
                                        ViewKind)
from bloom.coaching.exercises import (Exercise, ExerciseError,  # noqa: F401
                                      PhaseBlocked, UnknownField)
from bloom.coaching.loader import ComponentLoader  # noqa: F401
from bloom.coaching.registry import MODULE_REGISTRY, resolve  # noqa: F401
