"""
Navbot Telegram Bot Package
===========================

Telegram front end for the navigation engine: transport adapter,
keyboards, screens and the update handlers.
"""

from .bot import TelegramBotHandler
from .screens import ScreenId, setup_screens, build_registry
from .transport import TelegramTransport, event_from_update

__all__ = [
    "TelegramBotHandler",
    "ScreenId",
    "setup_screens",
    "build_registry",
    "TelegramTransport",
    "event_from_update",
]
