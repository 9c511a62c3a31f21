from skyledger.clients.profile import ProfileClient
from skyledger.clients.telegram import TelegramNotifier

__all__ = ["ProfileClient", "TelegramNotifier"]
