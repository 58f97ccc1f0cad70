"""Utilities for managing the Ready condition of OnePasswordItem resources."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from ..constants import COND_READY, STATUS_FALSE, STATUS_TRUE, STATUS_UNKNOWN
from .errors import sanitize_exception


@dataclass(frozen=True)
class Condition:
    """A single status condition."""

    type: str
    status: str = STATUS_UNKNOWN
    message: str = ""
    last_transition_time: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            type=data.get("type", COND_READY),
            status=data.get("status", STATUS_UNKNOWN),
            message=data.get("message", "") or "",
            last_transition_time=data.get("lastTransitionTime"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type,
            "status": self.status,
            "message": self.message,
        }
        if self.last_transition_time is not None:
            result["lastTransitionTime"] = self.last_transition_time
        return result


def now_timestamp() -> str:
    """Return the current time formatted like a Kubernetes metav1.Time."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def find_condition(conditions: list[dict[str, Any]] | None, condition_type: str) -> Condition:
    """Find a condition by type.

    Args:
        conditions: Conditions as stored in the resource status
        condition_type: Type of condition to look up

    Returns:
        The stored condition, or an Unknown condition with an empty
        message when none has been recorded yet
    """
    for cond in conditions or []:
        if cond.get("type") == condition_type:
            return Condition.from_dict(cond)
    return Condition(type=condition_type)


def compute_ready_condition(
    existing: Condition,
    error: Exception | None,
    now: str | None = None,
) -> Condition:
    """Compute the Ready condition that follows a sync attempt.

    The transition time is only stamped when the status value changes. The
    error text is sanitized before it is recorded.

    Args:
        existing: Currently recorded Ready condition
        error: Error of the sync attempt, None on success
        now: Timestamp to use for a transition (defaults to the current time)

    Returns:
        The replacement condition
    """
    if error is not None:
        updated = replace(existing, status=STATUS_FALSE, message=sanitize_exception(error))
    else:
        updated = replace(existing, status=STATUS_TRUE, message="")

    if updated.status != existing.status:
        updated = replace(updated, last_transition_time=now or now_timestamp())

    return updated


def set_ready_condition(status: dict[str, Any] | None, error: Exception | None) -> list[dict[str, Any]]:
    """Return the conditions list holding only the updated Ready condition."""
    existing = find_condition((status or {}).get("conditions"), COND_READY)
    return [compute_ready_condition(existing, error).to_dict()]
