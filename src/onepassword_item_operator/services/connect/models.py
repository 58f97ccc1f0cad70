"""Models for 1Password Connect items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ItemField:
    """A single field of a vault item."""

    label: str
    value: str | None = None


@dataclass
class Item:
    """A vault item with its fields."""

    id: str
    title: str = ""
    vault_id: str = ""
    version: int = 0
    fields: list[ItemField] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Item:
        """Build an item from a Connect API response body."""
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            vault_id=(data.get("vault") or {}).get("id", ""),
            version=data.get("version", 0),
            fields=[
                ItemField(label=f.get("label", ""), value=f.get("value"))
                for f in data.get("fields") or []
            ],
        )
