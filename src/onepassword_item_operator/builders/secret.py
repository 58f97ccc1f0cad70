"""Builder for secrets derived from vault items."""

from __future__ import annotations

import base64
import copy
import re
from typing import Any

from kubernetes import client

from ..constants import (
    ANNOTATION_AUTO_RESTART,
    ANNOTATION_ITEM_PATH,
    ANNOTATION_ITEM_VERSION,
    DEFAULT_SECRET_TYPE,
)
from ..services.connect.models import Item
from ..utils.errors import OwnerRefResolutionError

MANAGED_ANNOTATIONS = (ANNOTATION_ITEM_PATH, ANNOTATION_ITEM_VERSION, ANNOTATION_AUTO_RESTART)

_INVALID_KEY_CHARS = re.compile(r"[^-._a-zA-Z0-9]+")


def format_secret_data_key(label: str) -> str:
    """Turn a field label into a valid secret data key.

    Returns an empty string when nothing valid is left.
    """
    return _INVALID_KEY_CHARS.sub("-", label.strip()).strip("-.")


def build_secret_data(item: Item) -> dict[str, str]:
    """Map item fields to base64-encoded secret data.

    Fields without a usable label or without a value are skipped. Later
    fields win when two labels map to the same key.
    """
    data: dict[str, str] = {}
    for field in item.fields:
        key = format_secret_data_key(field.label or "")
        if not key or not field.value:
            continue
        data[key] = base64.b64encode(field.value.encode("utf-8")).decode("utf-8")
    return data


def build_owner_reference(resource: dict[str, Any]) -> client.V1OwnerReference:
    """Build an owner reference pointing at the source resource.

    Raises:
        OwnerRefResolutionError: If the resource lacks type or identity metadata
    """
    api_version = resource.get("apiVersion")
    kind = resource.get("kind")
    meta = resource.get("metadata") or {}
    if not api_version or not kind:
        raise OwnerRefResolutionError(
            f"could not retrieve group version kind of {meta.get('namespace')}/{meta.get('name')}"
        )
    if not meta.get("name") or not meta.get("uid"):
        raise OwnerRefResolutionError(f"could not retrieve name and uid of {kind} owner")

    return client.V1OwnerReference(
        api_version=api_version,
        kind=kind,
        name=meta["name"],
        uid=meta["uid"],
        controller=True,
        block_owner_deletion=True,
    )


def build_secret_from_item(
    name: str,
    namespace: str,
    item: Item,
    item_path: str,
    owner_reference: client.V1OwnerReference,
    labels: dict[str, str] | None = None,
    secret_type: str | None = None,
    auto_restart: str | None = None,
) -> client.V1Secret:
    """Build the desired secret for a vault item.

    Args:
        name: Name of the secret
        namespace: Namespace of the secret
        item: Fetched vault item
        item_path: Path the item was fetched from
        owner_reference: Reference back to the source resource
        labels: Labels to put on the secret
        secret_type: Secret type, Opaque when empty
        auto_restart: Restart-on-change marker passed through to consumers

    Returns:
        The desired secret
    """
    annotations = {
        ANNOTATION_ITEM_PATH: item_path,
        ANNOTATION_ITEM_VERSION: str(item.version),
    }
    if auto_restart:
        annotations[ANNOTATION_AUTO_RESTART] = auto_restart

    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=dict(labels or {}),
            annotations=annotations,
            owner_references=[owner_reference],
        ),
        type=secret_type or DEFAULT_SECRET_TYPE,
        data=build_secret_data(item),
    )


def _managed_annotations(secret: client.V1Secret) -> dict[str, str]:
    annotations = secret.metadata.annotations or {}
    return {k: v for k, v in annotations.items() if k in MANAGED_ANNOTATIONS}


def _owner_keys(secret: client.V1Secret) -> list[tuple[Any, ...]]:
    return [
        (ref.api_version, ref.kind, ref.name, ref.uid, bool(ref.controller), bool(ref.block_owner_deletion))
        for ref in secret.metadata.owner_references or []
    ]


def secret_matches(existing: client.V1Secret, desired: client.V1Secret) -> bool:
    """Check whether every managed field of the existing secret is as desired."""
    return (
        (existing.data or {}) == (desired.data or {})
        and (existing.metadata.labels or {}) == (desired.metadata.labels or {})
        and (existing.type or DEFAULT_SECRET_TYPE) == (desired.type or DEFAULT_SECRET_TYPE)
        and _managed_annotations(existing) == _managed_annotations(desired)
        and _owner_keys(existing) == _owner_keys(desired)
    )


def merge_managed_fields(existing: client.V1Secret, desired: client.V1Secret) -> client.V1Secret:
    """Overwrite the managed fields of an existing secret with the desired ones.

    Managed fields are replaced in full. Unmanaged annotations and the
    resourceVersion of the existing secret are kept.
    """
    merged = copy.deepcopy(existing)
    annotations = {
        k: v for k, v in (existing.metadata.annotations or {}).items() if k not in MANAGED_ANNOTATIONS
    }
    annotations.update(desired.metadata.annotations or {})

    merged.metadata.labels = dict(desired.metadata.labels or {})
    merged.metadata.annotations = annotations
    merged.metadata.owner_references = list(desired.metadata.owner_references or [])
    merged.type = desired.type
    merged.data = dict(desired.data or {})
    merged.string_data = None
    return merged
