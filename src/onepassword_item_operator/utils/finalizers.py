"""Finalizer lifecycle for OnePasswordItem resources."""

from __future__ import annotations

import copy
import enum
from typing import Any

from ..constants import FINALIZER


class FinalizerState(str, enum.Enum):
    """Lifecycle of the cleanup finalizer on a source resource."""

    ABSENT = "absent"
    PRESENT = "present"
    REMOVED = "removed"


def is_being_deleted(meta: dict[str, Any]) -> bool:
    """Check whether the resource carries a deletion timestamp."""
    return bool(meta.get("deletionTimestamp"))


def get_finalizer_state(meta: dict[str, Any]) -> FinalizerState:
    """Read the finalizer state from resource metadata."""
    if FINALIZER in (meta.get("finalizers") or []):
        return FinalizerState.PRESENT
    return FinalizerState.ABSENT


def with_finalizer(body: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the resource with the finalizer attached.

    Raises:
        ValueError: If the resource is being deleted
    """
    meta = body.get("metadata", {})
    if is_being_deleted(meta):
        raise ValueError(f"refusing to add finalizer to {meta.get('name')}: resource is being deleted")

    updated = copy.deepcopy(body)
    finalizers = list(updated["metadata"].get("finalizers") or [])
    if FINALIZER not in finalizers:
        finalizers.append(FINALIZER)
    updated["metadata"]["finalizers"] = finalizers
    return updated


def without_finalizer(body: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the resource with the finalizer detached."""
    updated = copy.deepcopy(body)
    finalizers = [f for f in updated["metadata"].get("finalizers") or [] if f != FINALIZER]
    updated["metadata"]["finalizers"] = finalizers
    return updated
