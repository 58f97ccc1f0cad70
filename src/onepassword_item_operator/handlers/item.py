"""Handler for OnePasswordItem CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_ONEPASSWORD_ITEM
from ..reconciler import (
    ACTION_CLEANED_UP,
    ACTION_SYNCED,
    ItemReconciler,
    ReconcileResult,
    ResourceKey,
)
from ..utils.errors import OperatorError, sanitize_exception
from ..utils.events import emit_item_sync_failed, emit_item_synced, emit_secret_deleted
from .base import BaseHandler


class ItemHandler(BaseHandler):
    """Handler for OnePasswordItem resources."""

    def __init__(self, reconciler: ItemReconciler, retry_delay: float = 15.0):
        """Initialize item handler.

        Args:
            reconciler: Reconciler with the store and vault clients wired in
            retry_delay: Seconds kopf waits before retrying a failed attempt
        """
        super().__init__(KIND_ONEPASSWORD_ITEM)
        self.reconciler = reconciler
        self.retry_delay = retry_delay

    def handle(self, body: dict[str, Any], meta: dict[str, Any]) -> ReconcileResult:
        """Reconcile the resource and translate failures into kopf retries.

        Raises:
            kopf.TemporaryError: If the attempt failed and should be redelivered
        """
        key = ResourceKey(namespace=meta["namespace"], name=meta["name"])
        try:
            result = self.reconcile_with_metrics(meta, lambda: self.reconciler.reconcile(key))
        except OperatorError as e:
            message = sanitize_exception(e)
            emit_item_sync_failed(body, message)
            raise kopf.TemporaryError(message, delay=self.retry_delay) from e

        if result.action == ACTION_SYNCED and result.secret_changed:
            emit_item_synced(body, key.name)
        elif result.action == ACTION_CLEANED_UP:
            emit_secret_deleted(body, key.name)

        self.log_info(meta, f"Reconciled: {result.action}", event="reconcile", reason="Reconciled")
        return result


@kopf.on.create(API_GROUP_VERSION, KIND_ONEPASSWORD_ITEM)
@kopf.on.update(API_GROUP_VERSION, KIND_ONEPASSWORD_ITEM)
@kopf.on.resume(API_GROUP_VERSION, KIND_ONEPASSWORD_ITEM)
def handle_item(
    body: kopf.Body,
    meta: kopf.Meta,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """Handle OnePasswordItem resource reconciliation."""
    memo.item_handler.handle(dict(body), dict(meta))


@kopf.on.delete(API_GROUP_VERSION, KIND_ONEPASSWORD_ITEM)
def handle_item_delete(
    body: kopf.Body,
    meta: kopf.Meta,
    memo: kopf.Memo,
    **kwargs: Any,
) -> None:
    """Handle OnePasswordItem resource deletion."""
    memo.item_handler.handle(dict(body), dict(meta))
