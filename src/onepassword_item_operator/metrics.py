"""Prometheus metrics for the OnePassword Item Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "onepassword_item_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "onepassword_item_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "onepassword_item_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "onepassword_item_operator_resource_status_total",
    "Resource status observations",
    ["kind", "status"],
)

# Vault metrics
vault_fetch_total = Counter(
    "onepassword_item_operator_vault_fetch_total",
    "Total number of vault item fetches",
    ["result"],
)

vault_fetch_duration_seconds = Histogram(
    "onepassword_item_operator_vault_fetch_duration_seconds",
    "Duration of vault item fetches in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

# Secret operation metrics
secret_operations_total = Counter(
    "onepassword_item_operator_secret_operations_total",
    "Total number of derived secret operations",
    ["operation", "result"],
)
