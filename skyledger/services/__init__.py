from skyledger.services.extractor import extract_inventory, extract_snapshot
from skyledger.services.notification_formatter import format_changes, format_failure, truncate
from skyledger.services.reconciler import diff_snapshots, reconcile
from skyledger.services.retry import RetryPolicy, retry_async

__all__ = [
    "RetryPolicy",
    "diff_snapshots",
    "extract_inventory",
    "extract_snapshot",
    "format_changes",
    "format_failure",
    "reconcile",
    "retry_async",
    "truncate",
]
