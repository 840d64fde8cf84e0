"""
Screens of the bot and their registration.
"""

from enum import Enum

from ..core.navigation.screens import ScreenRegistry
from .keyboards import admin_menu_kb, back_kb, user_menu_kb, CB_ADMIN_BACK


class ScreenId(str, Enum):
    """Known screens. Anything else renders the default screen."""
    USER_MAIN = "user.main"
    ADMIN_MENU = "admin.menu"
    ADMIN_BROADCAST = "admin.broadcast"
    ADMIN_USERS = "admin.users"


DEFAULT_SCREEN_TEXT = "Main Menu"
WELCOME_TEXT = "Bot started!"
ADMIN_MENU_TEXT = "🛠 Admin Panel"
BROADCAST_PROMPT_TEXT = "📝 Send me the message for broadcast:"
USERS_LIST_TEXT = "📋 Users List:"


def setup_screens(registry: ScreenRegistry) -> None:
    registry.set_default(DEFAULT_SCREEN_TEXT, user_menu_kb)

    registry.register(ScreenId.USER_MAIN, WELCOME_TEXT, user_menu_kb)

    registry.register(ScreenId.ADMIN_MENU, ADMIN_MENU_TEXT, admin_menu_kb)
    registry.register(ScreenId.ADMIN_BROADCAST, BROADCAST_PROMPT_TEXT, lambda: back_kb(CB_ADMIN_BACK))
    registry.register(ScreenId.ADMIN_USERS, USERS_LIST_TEXT, lambda: back_kb(CB_ADMIN_BACK))


def build_registry() -> ScreenRegistry:
    """Registry with every screen of the bot, validated."""
    registry = ScreenRegistry()
    setup_screens(registry)
    registry.validate()
    return registry
