"""Unit tests for the secret builder."""

from __future__ import annotations

import base64

import pytest
from kubernetes import client

from onepassword_item_operator.builders.secret import (
    build_owner_reference,
    build_secret_data,
    build_secret_from_item,
    format_secret_data_key,
    merge_managed_fields,
    secret_matches,
)
from onepassword_item_operator.constants import (
    ANNOTATION_AUTO_RESTART,
    ANNOTATION_ITEM_PATH,
    ANNOTATION_ITEM_VERSION,
)
from onepassword_item_operator.services.connect.models import Item, ItemField
from onepassword_item_operator.utils.errors import OwnerRefResolutionError


def encode(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("utf-8")


@pytest.fixture
def owner_reference() -> client.V1OwnerReference:
    return client.V1OwnerReference(
        api_version="onepassword.com/v1",
        kind="OnePasswordItem",
        name="db",
        uid="uid-1",
        controller=True,
        block_owner_deletion=True,
    )


@pytest.fixture
def item() -> Item:
    return Item(
        id="x" * 26,
        title="db",
        version=3,
        fields=[ItemField(label="username", value="admin"), ItemField(label="password", value="s3cr3t")],
    )


class TestFormatSecretDataKey:
    """Test field label conversion."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("username", "username"),
            ("API Key", "API-Key"),
            ("db.host", "db.host"),
            ("  spaced  ", "spaced"),
            ("-.edge.-", "edge"),
            ("a/b:c", "a-b-c"),
            ("!!!", ""),
        ],
    )
    def test_format(self, label, expected):
        """Test that labels become valid secret keys."""
        assert format_secret_data_key(label) == expected


class TestBuildSecretData:
    """Test mapping item fields to secret data."""

    def test_encodes_values(self, item):
        """Test that values are base64 encoded."""
        assert build_secret_data(item) == {"username": encode("admin"), "password": encode("s3cr3t")}

    def test_skips_unusable_fields(self):
        """Test that fields without a key or value are dropped."""
        item = Item(
            id="i",
            fields=[
                ItemField(label="", value="x"),
                ItemField(label="notes", value=None),
                ItemField(label="empty", value=""),
                ItemField(label="ok", value="1"),
            ],
        )

        assert build_secret_data(item) == {"ok": encode("1")}

    def test_later_field_wins(self):
        """Test that duplicate keys keep the last value."""
        item = Item(id="i", fields=[ItemField(label="key", value="1"), ItemField(label="key", value="2")])

        assert build_secret_data(item) == {"key": encode("2")}


class TestBuildOwnerReference:
    """Test owner reference resolution."""

    def test_from_resource(self):
        """Test that type and identity are taken from the resource."""
        resource = {
            "apiVersion": "onepassword.com/v1",
            "kind": "OnePasswordItem",
            "metadata": {"name": "db", "namespace": "default", "uid": "uid-1"},
        }

        ref = build_owner_reference(resource)

        assert ref.api_version == "onepassword.com/v1"
        assert ref.kind == "OnePasswordItem"
        assert ref.name == "db"
        assert ref.uid == "uid-1"
        assert ref.controller is True
        assert ref.block_owner_deletion is True

    def test_missing_kind(self):
        """Test that missing type metadata raises."""
        resource = {"apiVersion": "onepassword.com/v1", "metadata": {"name": "db", "uid": "uid-1"}}

        with pytest.raises(OwnerRefResolutionError, match="group version kind"):
            build_owner_reference(resource)

    def test_missing_uid(self):
        """Test that missing identity raises."""
        resource = {"apiVersion": "onepassword.com/v1", "kind": "OnePasswordItem", "metadata": {"name": "db"}}

        with pytest.raises(OwnerRefResolutionError):
            build_owner_reference(resource)


class TestBuildSecretFromItem:
    """Test building the desired secret."""

    def test_defaults(self, item, owner_reference):
        """Test the secret built with no optional metadata."""
        secret = build_secret_from_item("db", "default", item, "vaults/v/items/db", owner_reference)

        assert secret.metadata.name == "db"
        assert secret.metadata.namespace == "default"
        assert secret.type == "Opaque"
        assert secret.metadata.labels == {}
        assert secret.metadata.owner_references == [owner_reference]
        assert secret.metadata.annotations == {
            ANNOTATION_ITEM_PATH: "vaults/v/items/db",
            ANNOTATION_ITEM_VERSION: "3",
        }

    def test_with_metadata(self, item, owner_reference):
        """Test labels, type and the restart marker."""
        secret = build_secret_from_item(
            "db",
            "default",
            item,
            "vaults/v/items/db",
            owner_reference,
            labels={"app": "web"},
            secret_type="kubernetes.io/basic-auth",
            auto_restart="true",
        )

        assert secret.metadata.labels == {"app": "web"}
        assert secret.type == "kubernetes.io/basic-auth"
        assert secret.metadata.annotations[ANNOTATION_AUTO_RESTART] == "true"


class TestSecretMatches:
    """Test comparison of managed fields."""

    def test_identical(self, item, owner_reference):
        """Test that a secret matches itself."""
        desired = build_secret_from_item("db", "default", item, "p", owner_reference)
        existing = build_secret_from_item("db", "default", item, "p", owner_reference)
        existing.metadata.resource_version = "42"
        existing.metadata.annotations["example.com/note"] = "unmanaged"

        assert secret_matches(existing, desired)

    def test_data_differs(self, item, owner_reference):
        """Test that a data change is detected."""
        desired = build_secret_from_item("db", "default", item, "p", owner_reference)
        existing = build_secret_from_item("db", "default", item, "p", owner_reference)
        existing.data["extra"] = encode("x")

        assert not secret_matches(existing, desired)

    def test_owner_differs(self, item, owner_reference):
        """Test that a missing owner reference is detected."""
        desired = build_secret_from_item("db", "default", item, "p", owner_reference)
        existing = build_secret_from_item("db", "default", item, "p", owner_reference)
        existing.metadata.owner_references = None

        assert not secret_matches(existing, desired)


class TestMergeManagedFields:
    """Test overwriting managed fields."""

    def test_merge(self, item, owner_reference):
        """Test that managed fields are replaced and the rest kept."""
        desired = build_secret_from_item("db", "default", item, "p", owner_reference, labels={"app": "web"})
        existing = client.V1Secret(
            metadata=client.V1ObjectMeta(
                name="db",
                namespace="default",
                resource_version="42",
                labels={"stale": "yes"},
                annotations={"example.com/note": "kept", ANNOTATION_AUTO_RESTART: "true"},
            ),
            type="Opaque",
            data={"stale": encode("x")},
        )

        merged = merge_managed_fields(existing, desired)

        assert merged.metadata.resource_version == "42"
        assert merged.metadata.labels == {"app": "web"}
        assert merged.data == desired.data
        assert merged.metadata.owner_references == [owner_reference]
        assert merged.metadata.annotations == {
            "example.com/note": "kept",
            ANNOTATION_ITEM_PATH: "p",
            ANNOTATION_ITEM_VERSION: "3",
        }
        assert existing.metadata.labels == {"stale": "yes"}
