"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_ITEM_SYNC_FAILED,
    EVENT_REASON_ITEM_SYNCED,
    EVENT_REASON_SECRET_DELETED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_item_synced(body: dict[str, Any], secret_name: str) -> None:
    """Emit item synced event."""
    emit_event(body, EVENT_REASON_ITEM_SYNCED, f"Secret {secret_name} synced from vault item")


def emit_item_sync_failed(body: dict[str, Any], message: str) -> None:
    """Emit item sync failed event."""
    emit_event(body, EVENT_REASON_ITEM_SYNC_FAILED, message, type_="Warning")


def emit_secret_deleted(body: dict[str, Any], secret_name: str) -> None:
    """Emit secret deleted event."""
    emit_event(body, EVENT_REASON_SECRET_DELETED, f"Secret {secret_name} deleted")
