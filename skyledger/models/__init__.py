from skyledger.models.failure import (
    ConfigurationError,
    FailureKind,
    MalformedProfileError,
    TrackerError,
    TransientIOError,
    UnhandledError,
)
from skyledger.models.inventory import (
    ContainerItems,
    InvestmentLedger,
    ItemChange,
    ItemSnapshot,
    MergePolicy,
    ReconciliationResult,
)
