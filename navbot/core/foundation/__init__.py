"""
Foundation layer: shared types, collaborator protocols and exceptions.
"""

from .exceptions import (
    NavbotError,
    ConfigurationError,
    ScreenNotRegisteredError,
    MissingDefaultScreenError,
    InvalidConfigError,
    TransportError,
    NonEditableError,
    DeliveryError,
)
from .types import ConversationState, InboundEvent
from .protocols import StateStore, RecipientStore, MessagingEndpoint

__all__ = [
    "NavbotError",
    "ConfigurationError",
    "ScreenNotRegisteredError",
    "MissingDefaultScreenError",
    "InvalidConfigError",
    "TransportError",
    "NonEditableError",
    "DeliveryError",
    "ConversationState",
    "InboundEvent",
    "StateStore",
    "RecipientStore",
    "MessagingEndpoint",
]
