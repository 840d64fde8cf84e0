"""
Navbot Exceptions
=================

Error taxonomy for the navigation engine.

- ConfigurationError: programming/deployment defects (fatal at boot or on use)
- TransportError: the messaging endpoint failed
- NonEditableError: the target message cannot be edited (recoverable)
- DeliveryError: one interaction could not be rendered
"""

from typing import Optional


class NavbotError(Exception):
    """Base class for all navbot errors."""
    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(NavbotError):
    """Raised when the bot is wired incorrectly."""
    pass


class ScreenNotRegisteredError(ConfigurationError):
    """Raised when navigating to a screen that was never registered."""

    def __init__(self, state_id: str):
        super().__init__(f"Screen not registered: {state_id!r}")
        self.state_id = state_id


class MissingDefaultScreenError(ConfigurationError):
    """Raised when the registry has no fallback screen."""

    def __init__(self):
        super().__init__("Screen registry has no default screen configured")


class InvalidConfigError(ConfigurationError):
    """Raised when loaded configuration values are unusable."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================

class TransportError(NavbotError):
    """Raised by a messaging endpoint when a call fails."""
    pass


class NonEditableError(TransportError):
    """
    Raised when a message cannot be edited.

    Covers identical content, messages too old to edit and messages that
    were already deleted.
    """
    pass


class DeliveryError(NavbotError):
    """Raised when a screen could not be delivered to the user."""

    def __init__(self, message: str, chat_id: Optional[int] = None):
        super().__init__(message)
        self.chat_id = chat_id
