"""Reconciliation of OnePasswordItem resources into Kubernetes secrets."""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

from kubernetes import client

from . import metrics
from .builders.secret import (
    build_owner_reference,
    build_secret_from_item,
    merge_managed_fields,
    secret_matches,
)
from .constants import ANNOTATION_AUTO_RESTART, DEFAULT_SECRET_TYPE, KIND_ONEPASSWORD_ITEM
from .logging import log_resource_event
from .services.connect.models import Item
from .services.vault.base import VaultClient
from .utils.conditions import set_ready_condition
from .utils.errors import OperatorError, StorePersistError, VaultFetchError, sanitize_exception
from .utils.finalizers import (
    FinalizerState,
    get_finalizer_state,
    is_being_deleted,
    with_finalizer,
    without_finalizer,
)

logger = logging.getLogger(__name__)

ACTION_ABSENT = "absent"
ACTION_SYNCED = "synced"
ACTION_CLEANED_UP = "cleaned_up"
ACTION_NOOP = "noop"


@dataclass(frozen=True)
class ResourceKey:
    """Namespace and name identifying a OnePasswordItem."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a successful reconciliation attempt."""

    action: str
    finalizer: FinalizerState | None = None
    secret_changed: bool = False


class ItemStore(Protocol):
    """Store operations the reconciler depends on."""

    def get_item(self, namespace: str, name: str) -> dict[str, Any] | None: ...

    def update_item(self, body: dict[str, Any]) -> dict[str, Any]: ...

    def update_item_status(self, body: dict[str, Any]) -> dict[str, Any]: ...

    def get_secret(self, namespace: str, name: str) -> client.V1Secret | None: ...

    def create_secret(self, secret: client.V1Secret) -> client.V1Secret: ...

    def replace_secret(self, secret: client.V1Secret) -> client.V1Secret: ...

    def delete_secret(self, namespace: str, name: str) -> bool: ...


class ItemReconciler:
    """Converge a OnePasswordItem and its derived secret.

    The reconciler keeps no state between calls: everything it needs is read
    from the store on each attempt, and failures are raised for the caller to
    retry. It never sleeps or retries on its own.
    """

    def __init__(self, store: ItemStore, vault: VaultClient) -> None:
        self.store = store
        self.vault = vault

    def _log(
        self,
        meta: dict[str, Any],
        event: str,
        reason: str,
        message: str,
        level: int = logging.INFO,
        **kwargs: Any,
    ) -> None:
        log_resource_event(
            logger,
            controller="onepassword-item-operator",
            resource_kind=KIND_ONEPASSWORD_ITEM,
            resource_name=meta.get("name", "unknown"),
            namespace=meta.get("namespace", "default"),
            uid=meta.get("uid", "unknown"),
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def reconcile(self, key: ResourceKey) -> ReconcileResult:
        """Reconcile the resource identified by key.

        Raises:
            OperatorError: If any step fails; the attempt should be retried
        """
        resource = self.store.get_item(key.namespace, key.name)
        if resource is None:
            logger.debug(f"OnePasswordItem {key} not found, nothing to reconcile")
            return ReconcileResult(action=ACTION_ABSENT)

        meta = resource.get("metadata", {})

        if not is_being_deleted(meta):
            if get_finalizer_state(meta) is FinalizerState.ABSENT:
                resource = self.store.update_item(with_finalizer(resource))
                self._log(meta, "finalizer", "FinalizerAdded", "Cleanup finalizer added")

            sync_error: OperatorError | None = None
            secret_changed = False
            try:
                secret_changed = self.sync(resource)
            except OperatorError as e:
                sync_error = e
                self._log(
                    meta,
                    "sync",
                    "SyncFailed",
                    sanitize_exception(e),
                    level=logging.ERROR,
                    error_type=type(e).__name__,
                )

            try:
                self.update_status(resource, sync_error)
            except StorePersistError as e:
                raise StorePersistError(f"cannot update status: {e}", status=e.status) from e

            if sync_error is not None:
                raise sync_error
            return ReconcileResult(
                action=ACTION_SYNCED,
                finalizer=FinalizerState.PRESENT,
                secret_changed=secret_changed,
            )

        if get_finalizer_state(meta) is FinalizerState.PRESENT:
            self.cleanup(resource)
            self.store.update_item(without_finalizer(resource))
            self._log(meta, "finalizer", "FinalizerRemoved", "Cleanup complete, finalizer removed")
            return ReconcileResult(action=ACTION_CLEANED_UP, finalizer=FinalizerState.REMOVED)

        return ReconcileResult(action=ACTION_NOOP, finalizer=FinalizerState.ABSENT)

    def fetch_item(self, item_path: str | None) -> Item:
        """Fetch the vault item, wrapping any failure in VaultFetchError."""
        if not item_path:
            metrics.vault_fetch_total.labels(result="invalid").inc()
            raise VaultFetchError("Failed to retrieve item: spec.itemPath is not set")

        start_time = time.time()
        try:
            item = self.vault.get_item_by_path(item_path)
        except Exception as e:
            metrics.vault_fetch_total.labels(result="error").inc()
            raise VaultFetchError(f"Failed to retrieve item: {e}") from e
        finally:
            metrics.vault_fetch_duration_seconds.observe(time.time() - start_time)

        metrics.vault_fetch_total.labels(result="success").inc()
        return item

    def sync(self, resource: dict[str, Any]) -> bool:
        """Create or update the secret derived from the resource's vault item.

        Returns:
            True if the secret was written, False if it was already up to date
        """
        meta = resource["metadata"]
        item_path = (resource.get("spec") or {}).get("itemPath")

        item = self.fetch_item(item_path)
        owner_reference = build_owner_reference(resource)

        desired = build_secret_from_item(
            name=meta["name"],
            namespace=meta["namespace"],
            item=item,
            item_path=item_path,
            owner_reference=owner_reference,
            labels=meta.get("labels"),
            secret_type=resource.get("type"),
            auto_restart=(meta.get("annotations") or {}).get(ANNOTATION_AUTO_RESTART),
        )
        return self.apply_secret(desired)

    def apply_secret(self, desired: client.V1Secret) -> bool:
        """Create the secret, or overwrite its managed fields if it exists.

        Returns:
            True if the secret was written
        """
        namespace = desired.metadata.namespace
        name = desired.metadata.name

        existing = self.store.get_secret(namespace, name)
        if existing is None:
            logger.info(f"Creating secret {namespace}/{name}")
            self.store.create_secret(desired)
            return True

        if secret_matches(existing, desired):
            logger.debug(f"Secret {namespace}/{name} is up to date")
            return False

        if (existing.type or DEFAULT_SECRET_TYPE) != desired.type:
            # Secret type is immutable
            logger.info(f"Recreating secret {namespace}/{name} with type {desired.type}")
            self.store.delete_secret(namespace, name)
            self.store.create_secret(desired)
            return True

        logger.info(f"Updating secret {namespace}/{name}")
        self.store.replace_secret(merge_managed_fields(existing, desired))
        return True

    def update_status(self, resource: dict[str, Any], error: Exception | None) -> None:
        """Record the outcome of a sync attempt in the Ready condition."""
        status = resource.get("status") or {}
        conditions = set_ready_condition(status, error)
        if conditions == status.get("conditions"):
            return

        body = copy.deepcopy(resource)
        body["status"] = {**status, "conditions": conditions}
        self.store.update_item_status(body)
        metrics.resource_status_total.labels(
            kind=KIND_ONEPASSWORD_ITEM,
            status="ready" if error is None else "not_ready",
        ).inc()

    def cleanup(self, resource: dict[str, Any]) -> None:
        """Delete the derived secret; an already absent secret is fine."""
        meta = resource["metadata"]
        deleted = self.store.delete_secret(meta["namespace"], meta["name"])
        if deleted:
            self._log(meta, "deletion", "SecretDeleted", f"Secret {meta['name']} deleted")
        else:
            logger.debug(f"Secret {meta['namespace']}/{meta['name']} already absent")
