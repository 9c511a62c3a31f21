from skyledger.api.health import router as health_router
from skyledger.api.ledger import router as ledger_router

__all__ = [
    "health_router",
    "ledger_router",
]
