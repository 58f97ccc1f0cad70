"""Main entry point for the OnePassword Item Operator."""

from __future__ import annotations

from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .config import OperatorConfig, get_watched_namespaces
from .constants import FINALIZER
from .handlers.item import ItemHandler
from .reconciler import ItemReconciler
from .services.connect.client import ConnectClient
from .services.kubernetes.store import create_kubernetes_store


def build_item_handler(config: OperatorConfig) -> ItemHandler:
    """Construct the clients once and wire them into the item handler."""
    vault = ConnectClient(
        host=config.connect_host,
        token=config.connect_token,
        timeout=config.connect_timeout,
    )
    reconciler = ItemReconciler(store=create_kubernetes_store(), vault=vault)
    return ItemHandler(reconciler, retry_delay=config.retry_delay)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()

    config = OperatorConfig.from_env()

    # Use AnnotationsProgressStorage to avoid conflicts with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()
    # kopf blocks deletion on the reconciler's own finalizer instead of adding its marker
    settings.persistence.finalizer = FINALIZER

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = config.max_workers

    memo.item_handler = build_item_handler(config)

    health.start_metrics_server(config.metrics_port)


def run() -> None:
    """Run the operator in the current process.

    Usage:
        onepassword-item-operator
        # Or with kopf directly:
        kopf run -m onepassword_item_operator.main --all-namespaces
    """
    watched_namespaces = get_watched_namespaces()
    if watched_namespaces:
        kopf.run(namespaces=watched_namespaces)
    else:
        kopf.run(clusterwide=True)


if __name__ == "__main__":
    run()
