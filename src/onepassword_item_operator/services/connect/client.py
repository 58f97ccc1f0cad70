"""1Password Connect client implementation."""

from __future__ import annotations

import logging
import re
from typing import Any

import requests

from ..vault.base import (
    InvalidItemPathError,
    ItemNotFoundError,
    VaultClientError,
    VaultUnavailableError,
)
from .models import Item

logger = logging.getLogger(__name__)

_CONNECT_ID = re.compile(r"^[a-z0-9]{26}$")


def eq_filter(attribute: str, value: str) -> str:
    """Build a Connect `attribute eq "value"` filter with the value escaped."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{attribute} eq "{escaped}"'


def parse_item_path(path: str) -> tuple[str, str]:
    """Split a vaults/<vault>/items/<item> path into vault and item.

    Raises:
        InvalidItemPathError: If the path does not have that shape
    """
    parts = (path or "").strip("/").split("/")
    if len(parts) != 4 or parts[0] != "vaults" or parts[2] != "items" or not parts[1] or not parts[3]:
        raise InvalidItemPathError(
            f"invalid item path {path!r}: expected format vaults/<vault>/items/<item>"
        )
    return parts[1], parts[3]


class ConnectClient:
    """Vault client talking to a 1Password Connect server."""

    def __init__(
        self,
        host: str,
        token: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the Connect client.

        Args:
            host: Base URL of the Connect server
            token: Connect bearer token
            timeout: Per-request timeout in seconds
            session: Optional pre-configured session
        """
        self.host = host.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        })

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.host}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise VaultUnavailableError(f"connect server unreachable: {e}") from e

        if response.status_code == 404:
            raise ItemNotFoundError(f"{path} not found")
        if response.status_code >= 500:
            raise VaultUnavailableError(f"connect server returned {response.status_code} for {path}")
        if response.status_code >= 400:
            raise VaultClientError(f"connect server returned {response.status_code} for {path}: {response.text}")
        return response.json()

    def _resolve_vault_id(self, vault: str) -> str:
        if _CONNECT_ID.match(vault):
            return vault
        vaults = self._get("/v1/vaults", params={"filter": eq_filter("name", vault)}) or []
        if not vaults:
            raise ItemNotFoundError(f"vault {vault!r} not found")
        if len(vaults) > 1:
            raise VaultClientError(f"vault name {vault!r} is ambiguous: {len(vaults)} vaults match")
        return vaults[0]["id"]

    def _resolve_item_id(self, vault_id: str, item: str) -> str:
        if _CONNECT_ID.match(item):
            return item
        items = self._get(f"/v1/vaults/{vault_id}/items", params={"filter": eq_filter("title", item)}) or []
        if not items:
            raise ItemNotFoundError(f"item {item!r} not found in vault {vault_id}")
        if len(items) > 1:
            raise VaultClientError(f"item title {item!r} is ambiguous: {len(items)} items match")
        return items[0]["id"]

    def get_item_by_path(self, path: str) -> Item:
        """Fetch an item by its vaults/<vault>/items/<item> path."""
        vault, item = parse_item_path(path)
        vault_id = self._resolve_vault_id(vault)
        item_id = self._resolve_item_id(vault_id, item)
        logger.debug(f"Fetching item {item_id} from vault {vault_id}")
        return Item.from_api(self._get(f"/v1/vaults/{vault_id}/items/{item_id}"))
