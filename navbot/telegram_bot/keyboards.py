"""
Inline keyboards and their callback data.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

CB_ADMIN_BROADCAST = "admin_broadcast"
CB_ADMIN_USERS = "admin_users"
CB_ADMIN_EXIT = "admin_exit"
CB_ADMIN_BACK = "admin_back"
CB_BROADCAST_CANCEL = "broadcast_cancel"
CB_USER_BUTTON = "button"


def admin_menu_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("📢 Broadcast", callback_data=CB_ADMIN_BROADCAST)],
        [InlineKeyboardButton("📋 Users List", callback_data=CB_ADMIN_USERS)],
        [InlineKeyboardButton("🚪 Exit", callback_data=CB_ADMIN_EXIT)],
    ])


def back_kb(callback: str = CB_ADMIN_BACK) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("⬅️ Back", callback_data=callback)],
    ])


def user_menu_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("Button", callback_data=CB_USER_BUTTON)],
    ])


def cancel_broadcast_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("✖️ Stop broadcast", callback_data=CB_BROADCAST_CANCEL)],
    ])
