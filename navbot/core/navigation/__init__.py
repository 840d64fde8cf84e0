"""
Screen navigation and rendering engine.
"""

from .screens import ScreenRegistry, ScreenDescriptor, DEFAULT_STATE_ID, state_key
from .conversation import Conversation, ConversationManager, InMemoryStateStore, KeyedLock
from .renderer import Renderer, RenderResult, best_effort
from .navigator import Navigator, BackOutcome, NOTHING_TO_GO_BACK
from .broadcaster import Broadcaster, BroadcastReport, IntervalLimiter

__all__ = [
    "ScreenRegistry",
    "ScreenDescriptor",
    "DEFAULT_STATE_ID",
    "state_key",
    "Conversation",
    "ConversationManager",
    "InMemoryStateStore",
    "KeyedLock",
    "Renderer",
    "RenderResult",
    "best_effort",
    "Navigator",
    "BackOutcome",
    "NOTHING_TO_GO_BACK",
    "Broadcaster",
    "BroadcastReport",
    "IntervalLimiter",
]
