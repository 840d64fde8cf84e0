"""
Navbot configuration.
"""

from .schema import (
    BotConfig,
    TelegramConfig,
    DatabaseConfig,
    BroadcastConfig,
    StateConfig,
    LoggingConfig,
    parse_id_list,
)
from .loader import ConfigLoader

__all__ = [
    "BotConfig",
    "TelegramConfig",
    "DatabaseConfig",
    "BroadcastConfig",
    "StateConfig",
    "LoggingConfig",
    "parse_id_list",
    "ConfigLoader",
]
