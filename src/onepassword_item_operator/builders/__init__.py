"""Builders for resources derived from OnePasswordItem specs."""

from .secret import build_owner_reference, build_secret_from_item

__all__ = ["build_owner_reference", "build_secret_from_item"]
