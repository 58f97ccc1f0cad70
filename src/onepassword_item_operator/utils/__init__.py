"""Utility functions for the OnePassword Item Operator."""

from .conditions import Condition, compute_ready_condition, find_condition, set_ready_condition
from .errors import (
    OperatorError,
    OwnerRefResolutionError,
    StorePersistError,
    VaultFetchError,
    sanitize_exception,
)
from .events import emit_event
from .finalizers import FinalizerState, get_finalizer_state, is_being_deleted

__all__ = [
    "Condition",
    "compute_ready_condition",
    "find_condition",
    "set_ready_condition",
    "OperatorError",
    "OwnerRefResolutionError",
    "StorePersistError",
    "VaultFetchError",
    "sanitize_exception",
    "emit_event",
    "FinalizerState",
    "get_finalizer_state",
    "is_being_deleted",
]
