"""Shared fixtures: in-memory store and vault fakes."""

from __future__ import annotations

import copy
from typing import Any

import pytest
from kubernetes import client

from onepassword_item_operator.constants import API_GROUP_VERSION, KIND_ONEPASSWORD_ITEM
from onepassword_item_operator.reconciler import ItemReconciler
from onepassword_item_operator.services.connect.models import Item, ItemField
from onepassword_item_operator.services.vault.base import ItemNotFoundError
from onepassword_item_operator.utils.errors import StorePersistError


class FakeStore:
    """In-memory store with resourceVersion conflict checks.

    Items whose deletionTimestamp is set are purged once their last
    finalizer is removed, as the API server does.
    """

    def __init__(self) -> None:
        self.items: dict[tuple[str, str], dict[str, Any]] = {}
        self.secrets: dict[tuple[str, str], client.V1Secret] = {}
        self.calls: list[tuple[str, ...]] = []
        self._version = 0
        self.fail_status_update: StorePersistError | None = None

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def add_item(self, body: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(body)
        stored["metadata"]["resourceVersion"] = self._next_version()
        meta = stored["metadata"]
        self.items[(meta["namespace"], meta["name"])] = stored
        return copy.deepcopy(stored)

    def add_secret(self, secret: client.V1Secret) -> None:
        stored = copy.deepcopy(secret)
        stored.metadata.resource_version = self._next_version()
        self.secrets[(stored.metadata.namespace, stored.metadata.name)] = stored

    def _check_version(self, body: dict[str, Any]) -> tuple[str, str]:
        meta = body["metadata"]
        key = (meta["namespace"], meta["name"])
        stored = self.items.get(key)
        if stored is None:
            raise StorePersistError(f"OnePasswordItem {key} not found", status=404)
        if meta.get("resourceVersion") != stored["metadata"]["resourceVersion"]:
            raise StorePersistError("the object has been modified", status=409)
        return key

    def get_item(self, namespace: str, name: str) -> dict[str, Any] | None:
        self.calls.append(("get_item", namespace, name))
        stored = self.items.get((namespace, name))
        return copy.deepcopy(stored) if stored is not None else None

    def update_item(self, body: dict[str, Any]) -> dict[str, Any]:
        key = self._check_version(body)
        self.calls.append(("update_item", *key, ",".join(body["metadata"].get("finalizers") or [])))
        stored = self.items[key]
        updated = copy.deepcopy(body)
        updated["status"] = copy.deepcopy(stored.get("status"))
        updated["metadata"]["resourceVersion"] = self._next_version()
        if updated["metadata"].get("deletionTimestamp") and not updated["metadata"].get("finalizers"):
            del self.items[key]
        else:
            self.items[key] = updated
        return copy.deepcopy(updated)

    def update_item_status(self, body: dict[str, Any]) -> dict[str, Any]:
        key = self._check_version(body)
        self.calls.append(("update_item_status", *key))
        if self.fail_status_update is not None:
            raise self.fail_status_update
        stored = self.items[key]
        stored["status"] = copy.deepcopy(body.get("status"))
        stored["metadata"]["resourceVersion"] = self._next_version()
        return copy.deepcopy(stored)

    def get_secret(self, namespace: str, name: str) -> client.V1Secret | None:
        stored = self.secrets.get((namespace, name))
        return copy.deepcopy(stored) if stored is not None else None

    def create_secret(self, secret: client.V1Secret) -> client.V1Secret:
        key = (secret.metadata.namespace, secret.metadata.name)
        self.calls.append(("create_secret", *key))
        if key in self.secrets:
            raise StorePersistError(f"secret {key} already exists", status=409)
        self.add_secret(secret)
        return copy.deepcopy(self.secrets[key])

    def replace_secret(self, secret: client.V1Secret) -> client.V1Secret:
        key = (secret.metadata.namespace, secret.metadata.name)
        self.calls.append(("replace_secret", *key))
        stored = self.secrets.get(key)
        if stored is None:
            raise StorePersistError(f"secret {key} not found", status=404)
        if secret.metadata.resource_version != stored.metadata.resource_version:
            raise StorePersistError("the object has been modified", status=409)
        self.add_secret(secret)
        return copy.deepcopy(self.secrets[key])

    def delete_secret(self, namespace: str, name: str) -> bool:
        self.calls.append(("delete_secret", namespace, name))
        return self.secrets.pop((namespace, name), None) is not None


class FakeVault:
    """Vault returning configured items by path."""

    def __init__(self) -> None:
        self.items: dict[str, Item] = {}
        self.errors: dict[str, Exception] = {}
        self.requested: list[str] = []

    def set_fields(self, path: str, fields: dict[str, str], version: int = 1) -> None:
        self.items[path] = Item(
            id="a" * 26,
            title=path.rsplit("/", 1)[-1],
            vault_id="b" * 26,
            version=version,
            fields=[ItemField(label=label, value=value) for label, value in fields.items()],
        )

    def get_item_by_path(self, path: str) -> Item:
        self.requested.append(path)
        if path in self.errors:
            raise self.errors[path]
        if path not in self.items:
            raise ItemNotFoundError(f"item {path!r} not found")
        return self.items[path]


def make_item(
    name: str = "db-credentials",
    namespace: str = "default",
    item_path: str = "vaults/vault/items/item1",
    finalizers: list[str] | None = None,
    deletion_timestamp: str | None = None,
    labels: dict[str, str] | None = None,
    annotations: dict[str, str] | None = None,
    secret_type: str | None = None,
    status: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a OnePasswordItem body."""
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": namespace,
        "uid": f"uid-{name}",
        "finalizers": list(finalizers or []),
    }
    if labels is not None:
        metadata["labels"] = labels
    if annotations is not None:
        metadata["annotations"] = annotations
    if deletion_timestamp is not None:
        metadata["deletionTimestamp"] = deletion_timestamp

    body: dict[str, Any] = {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_ONEPASSWORD_ITEM,
        "metadata": metadata,
        "spec": {"itemPath": item_path},
    }
    if secret_type is not None:
        body["type"] = secret_type
    if status is not None:
        body["status"] = status
    return body


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def reconciler(store: FakeStore, vault: FakeVault) -> ItemReconciler:
    return ItemReconciler(store=store, vault=vault)
