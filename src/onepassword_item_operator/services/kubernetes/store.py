"""Typed access to OnePasswordItem resources and their derived secrets."""

from __future__ import annotations

import logging
from typing import Any

from kubernetes import client

from ... import metrics
from ...constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    PLURAL_ONEPASSWORD_ITEMS,
)
from ...utils.errors import StorePersistError

logger = logging.getLogger(__name__)


def _persist_error(action: str, e: client.exceptions.ApiException) -> StorePersistError:
    return StorePersistError(f"failed to {action}: ({e.status}) {e.reason}", status=e.status)


class KubernetesStore:
    """Kubernetes-backed store for source resources and derived secrets.

    Writes send the resourceVersion of the object they were built from, so
    a write racing with another modification fails with a conflict.
    """

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        core_api: client.CoreV1Api,
    ) -> None:
        self.custom_api = custom_api
        self.core_api = core_api

    def get_item(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Get a OnePasswordItem, or None when it does not exist."""
        try:
            return self.custom_api.get_namespaced_custom_object(
                group=API_GROUP,
                version=API_VERSION,
                namespace=namespace,
                plural=PLURAL_ONEPASSWORD_ITEMS,
                name=name,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return None
            raise _persist_error(f"get OnePasswordItem {namespace}/{name}", e) from e

    def update_item(self, body: dict[str, Any]) -> dict[str, Any]:
        """Replace a OnePasswordItem's spec and metadata."""
        meta = body["metadata"]
        try:
            return self.custom_api.replace_namespaced_custom_object(
                group=API_GROUP,
                version=API_VERSION,
                namespace=meta["namespace"],
                plural=PLURAL_ONEPASSWORD_ITEMS,
                name=meta["name"],
                body=body,
            )
        except client.exceptions.ApiException as e:
            raise _persist_error(f"update OnePasswordItem {meta['namespace']}/{meta['name']}", e) from e

    def update_item_status(self, body: dict[str, Any]) -> dict[str, Any]:
        """Replace a OnePasswordItem's status subresource."""
        meta = body["metadata"]
        try:
            return self.custom_api.replace_namespaced_custom_object_status(
                group=API_GROUP,
                version=API_VERSION,
                namespace=meta["namespace"],
                plural=PLURAL_ONEPASSWORD_ITEMS,
                name=meta["name"],
                body=body,
            )
        except client.exceptions.ApiException as e:
            raise _persist_error(f"update status of OnePasswordItem {meta['namespace']}/{meta['name']}", e) from e

    def get_secret(self, namespace: str, name: str) -> client.V1Secret | None:
        """Get a secret, or None when it does not exist."""
        try:
            return self.core_api.read_namespaced_secret(name=name, namespace=namespace)
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return None
            raise _persist_error(f"get secret {namespace}/{name}", e) from e

    def create_secret(self, secret: client.V1Secret) -> client.V1Secret:
        """Create a secret."""
        namespace = secret.metadata.namespace
        try:
            created = self.core_api.create_namespaced_secret(
                namespace=namespace,
                body=secret,
                field_manager=FIELD_MANAGER,
            )
            metrics.secret_operations_total.labels(operation="create", result="success").inc()
            return created
        except client.exceptions.ApiException as e:
            metrics.secret_operations_total.labels(operation="create", result="error").inc()
            raise _persist_error(f"create secret {namespace}/{secret.metadata.name}", e) from e

    def replace_secret(self, secret: client.V1Secret) -> client.V1Secret:
        """Replace a secret in full."""
        namespace = secret.metadata.namespace
        name = secret.metadata.name
        try:
            replaced = self.core_api.replace_namespaced_secret(
                name=name,
                namespace=namespace,
                body=secret,
                field_manager=FIELD_MANAGER,
            )
            metrics.secret_operations_total.labels(operation="replace", result="success").inc()
            return replaced
        except client.exceptions.ApiException as e:
            metrics.secret_operations_total.labels(operation="replace", result="error").inc()
            raise _persist_error(f"replace secret {namespace}/{name}", e) from e

    def delete_secret(self, namespace: str, name: str) -> bool:
        """Delete a secret.

        Returns:
            True if the secret was deleted, False if it was already absent
        """
        try:
            self.core_api.delete_namespaced_secret(name=name, namespace=namespace)
        except client.exceptions.ApiException as e:
            if e.status == 404:
                metrics.secret_operations_total.labels(operation="delete", result="absent").inc()
                return False
            metrics.secret_operations_total.labels(operation="delete", result="error").inc()
            raise _persist_error(f"delete secret {namespace}/{name}", e) from e
        metrics.secret_operations_total.labels(operation="delete", result="success").inc()
        return True


def create_kubernetes_store() -> KubernetesStore:
    """Create a store from in-cluster or local kubeconfig credentials."""
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return KubernetesStore(client.CustomObjectsApi(), client.CoreV1Api())
