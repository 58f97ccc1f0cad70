"""Environment-driven configuration for the OnePassword Item Operator."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class OperatorConfig:
    """Settings read once at operator startup."""

    connect_host: str
    connect_token: str
    connect_timeout: float = 10.0
    metrics_port: int = 8080
    retry_delay: float = 15.0
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> OperatorConfig:
        """Build the configuration from environment variables.

        Environment Variables:
            OP_CONNECT_HOST: URL of the 1Password Connect server (required)
            OP_CONNECT_TOKEN: Connect bearer token (required)
            OP_CONNECT_TIMEOUT: Connect request timeout in seconds (default: 10)
            METRICS_PORT: Port for /metrics, /healthz and /readyz (default: 8080)
            RETRY_DELAY: Seconds before a failed reconciliation is retried (default: 15)
            MAX_WORKERS: Maximum concurrently running handlers (default: 4)

        Raises:
            ValueError: If a required variable is missing or a value is malformed
        """
        connect_host = os.getenv("OP_CONNECT_HOST", "")
        connect_token = os.getenv("OP_CONNECT_TOKEN", "")
        missing = [
            name
            for name, value in (("OP_CONNECT_HOST", connect_host), ("OP_CONNECT_TOKEN", connect_token))
            if not value
        ]
        if missing:
            raise ValueError(f"missing required environment variables: {', '.join(missing)}")

        return cls(
            connect_host=connect_host,
            connect_token=connect_token,
            connect_timeout=float(os.getenv("OP_CONNECT_TIMEOUT", "10")),
            metrics_port=int(os.getenv("METRICS_PORT", "8080")),
            retry_delay=float(os.getenv("RETRY_DELAY", "15")),
            max_workers=int(os.getenv("MAX_WORKERS", "4")),
        )


def get_watched_namespaces() -> list[str]:
    """Namespaces to watch from WATCH_NAMESPACE (comma-separated); empty means all."""
    raw = os.getenv("WATCH_NAMESPACE", "")
    return [ns.strip() for ns in raw.split(",") if ns.strip()]
