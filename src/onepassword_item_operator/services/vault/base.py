"""Base vault client interface."""

from __future__ import annotations

from typing import Protocol

from ..connect.models import Item


class VaultClientError(Exception):
    """Base class for errors raised by a vault client."""


class ItemNotFoundError(VaultClientError):
    """The vault or item referenced by a path does not exist."""


class VaultUnavailableError(VaultClientError):
    """The vault backend could not be reached or failed transiently."""


class InvalidItemPathError(VaultClientError):
    """The item path is not of the form vaults/<vault>/items/<item>."""


class VaultClient(Protocol):
    """Protocol defining vault item lookups."""

    def get_item_by_path(self, path: str) -> Item:
        """Fetch an item by its vaults/<vault>/items/<item> path.

        Raises:
            ItemNotFoundError: If the vault or item does not exist
            VaultUnavailableError: If the backend is unreachable
            VaultClientError: For any other lookup failure
        """
        ...
