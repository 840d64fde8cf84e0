"""
navbot - Screen Navigation Bot
==============================

A Telegram bot built around a small set of named screens. Each user
navigates a stack of screens rendered by editing one message in place;
admins can broadcast a message to every known user.

    from navbot.core.navigation import ScreenRegistry, Navigator, Renderer
    from navbot.telegram_bot import TelegramBotHandler

The engine in ``navbot.core`` does not import Telegram; the
``navbot.telegram_bot`` package adapts it to python-telegram-bot.
"""

__version__ = "0.1.0"

from .core.foundation import (
    NavbotError,
    ConfigurationError,
    TransportError,
    NonEditableError,
    DeliveryError,
    ConversationState,
    InboundEvent,
)
from .core.navigation import (
    ScreenRegistry,
    Navigator,
    Renderer,
    Broadcaster,
    NOTHING_TO_GO_BACK,
)

__all__ = [
    "__version__",
    "NavbotError",
    "ConfigurationError",
    "TransportError",
    "NonEditableError",
    "DeliveryError",
    "ConversationState",
    "InboundEvent",
    "ScreenRegistry",
    "Navigator",
    "Renderer",
    "Broadcaster",
    "NOTHING_TO_GO_BACK",
]
