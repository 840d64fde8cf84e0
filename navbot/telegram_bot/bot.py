"""
Telegram Bot Handler
====================

Wires Telegram updates to the navigation engine.

User flow: /start registers the user as a broadcast recipient and shows
the main screen. Admin flow: /admin opens the admin panel, from which
the admin can list users, broadcast a message, go back or exit.
"""

import asyncio
import logging
from typing import Dict, Optional

from ..config.schema import BotConfig
from ..core.foundation.exceptions import InvalidConfigError, ConfigurationError
from ..core.foundation.types import InboundEvent
from ..core.navigation.broadcaster import Broadcaster
from ..core.navigation.conversation import ConversationManager, Conversation, InMemoryStateStore
from ..core.navigation.navigator import Navigator, NOTHING_TO_GO_BACK
from ..core.navigation.renderer import Renderer, best_effort
from ..core.navigation.screens import ScreenRegistry
from ..core.persistence.database import Database
from ..core.persistence.state_store import SqlStateStore
from .keyboards import (
    cancel_broadcast_kb,
    CB_ADMIN_BROADCAST,
    CB_ADMIN_USERS,
    CB_ADMIN_EXIT,
    CB_ADMIN_BACK,
    CB_BROADCAST_CANCEL,
)
from .screens import ScreenId, build_registry, USERS_LIST_TEXT
from .transport import TelegramTransport, event_from_update

logger = logging.getLogger(__name__)

NO_HISTORY_NOTICE = "No previous state to go back to."
SESSION_TERMINATED_TEXT = "👋 Session terminated."
EMPTY_DATABASE_TEXT = "Database is empty."
GENERIC_ERROR_TEXT = "⚠️ Something went wrong. Please try again."


class TelegramBotHandler:
    """
    Telegram bot handler for navbot.

    Uses python-telegram-bot for Telegram integration. Screens are
    rendered through the Navigator; broadcasts go through the
    Broadcaster.
    """

    def __init__(
        self,
        config: BotConfig,
        database: Optional[Database] = None,
        registry: Optional[ScreenRegistry] = None,
        state_store=None
    ):
        """
        Initialize Telegram bot handler.

        Args:
            config: Loaded bot configuration
            database: Recipient database (built from config if not provided)
            registry: Screen registry (the bot's screens if not provided)
            state_store: Conversation state store (chosen by config.state.backend)
        """
        if not config.telegram.token:
            raise InvalidConfigError("Telegram token not configured", key="telegram.token")

        self.config = config
        self.token = config.telegram.token
        self.admin_ids = set(config.telegram.admin_ids)

        if database is None:
            database = Database(config.database.url, echo=config.database.echo)
        self.database = database
        self.registry = registry if registry is not None else build_registry()
        self.registry.validate()
        self.conversations = ConversationManager(
            state_store if state_store is not None else self._build_state_store()
        )

        self.navigator: Optional[Navigator] = None
        self.broadcaster: Optional[Broadcaster] = None
        self._transport = None
        self._application = None

        # admin user id -> cancel event of the broadcast they started
        self._active_broadcasts: Dict[int, asyncio.Event] = {}

    def _build_state_store(self):
        if self.config.state.backend == "sql":
            return SqlStateStore(self.database)
        return InMemoryStateStore()

    def bind_transport(self, transport) -> None:
        """Create the navigator and broadcaster on top of a messaging endpoint."""
        self._transport = transport
        self.navigator = Navigator(self.registry, Renderer(transport))
        self.broadcaster = Broadcaster(
            transport,
            delay_seconds=self.config.broadcast.delay_seconds,
            max_concurrency=self.config.broadcast.max_concurrency,
        )

    def _is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_ids

    def _conversation(self, event: InboundEvent) -> Conversation:
        return self.conversations.get(event.user_id)

    # =========================================================================
    # User handlers
    # =========================================================================

    async def _handle_start(self, update, context):
        """Handle /start command."""
        event = event_from_update(update)
        await self.database.add_user(event.user_id, event.user_name, event.full_name)
        await self.navigator.transition_to(event, self._conversation(event), ScreenId.USER_MAIN)

    async def _handle_other_callback(self, update, context):
        """Acknowledge buttons without a dedicated handler."""
        await update.callback_query.answer()

    # =========================================================================
    # Admin handlers
    # =========================================================================

    async def _handle_admin(self, update, context):
        """Handle /admin command."""
        event = event_from_update(update)
        if not self._is_admin(event.user_id):
            logger.warning(f"Unauthorized /admin attempt from user {event.user_id}")
            return

        await self.navigator.transition_to(event, self._conversation(event), ScreenId.ADMIN_MENU)

    async def _handle_admin_users(self, update, context):
        """Show the list of known users."""
        event = event_from_update(update)
        await update.callback_query.answer()
        if not self._is_admin(event.user_id):
            return

        users = await self.database.get_all_users()
        if users:
            user_list = "\n".join(f"{u.user_id} | @{u.user_name}" for u in users)
        else:
            user_list = EMPTY_DATABASE_TEXT

        await self.navigator.transition_to(
            event,
            self._conversation(event),
            ScreenId.ADMIN_USERS,
            override_text=f"{USERS_LIST_TEXT}\n\n{user_list}",
        )

    async def _handle_admin_broadcast(self, update, context):
        """Ask the admin for the broadcast text."""
        event = event_from_update(update)
        await update.callback_query.answer()
        if not self._is_admin(event.user_id):
            return

        await self.navigator.transition_to(event, self._conversation(event), ScreenId.ADMIN_BROADCAST)

    async def _handle_text(self, update, context):
        """Handle plain text. Only meaningful while an admin is on the broadcast screen."""
        event = event_from_update(update)
        if not self._is_admin(event.user_id) or not (event.text or "").strip():
            return

        conversation = self._conversation(event)
        if await self.navigator.current_state_id(conversation) != ScreenId.ADMIN_BROADCAST.value:
            return

        await self._run_broadcast(event, conversation, event.text)

    async def _run_broadcast(self, event: InboundEvent, conversation: Conversation, text: str):
        if event.user_id in self._active_broadcasts:
            logger.info(f"Admin {event.user_id} already has a broadcast running")
            return

        cancel_event = asyncio.Event()
        self._active_broadcasts[event.user_id] = cancel_event
        try:
            recipient_ids = await self.database.list_all_ids()
            progress = await self.navigator.renderer.render(
                event,
                f"📤 Broadcasting to {len(recipient_ids)} users...",
                cancel_broadcast_kb(),
            )
            report = await self.broadcaster.run(recipient_ids, text, cancel_event)
        finally:
            self._active_broadcasts.pop(event.user_id, None)

        # Edit the progress message into the admin menu
        target = InboundEvent(
            chat_id=event.chat_id,
            user_id=event.user_id,
            message_id=progress.message_id,
            is_callback=progress.message_id is not None,
        )
        await self.navigator.transition_to(
            target,
            conversation,
            ScreenId.ADMIN_MENU,
            override_text=f"✅ Broadcast finished!\n{report.summary()}",
        )

    def cancel_broadcast(self, user_id: int) -> bool:
        """Ask the broadcast started by ``user_id`` to stop. Returns False if none runs."""
        cancel_event = self._active_broadcasts.get(user_id)
        if cancel_event is None:
            return False
        cancel_event.set()
        logger.info(f"Broadcast cancellation requested by {user_id}")
        return True

    async def _handle_broadcast_cancel(self, update, context):
        """Stop button on the broadcast progress message."""
        event = event_from_update(update)
        if self.cancel_broadcast(event.user_id):
            await update.callback_query.answer("Stopping broadcast...")
        else:
            await update.callback_query.answer("No broadcast is running.")

    async def _handle_cancel(self, update, context):
        """Handle /cancel command."""
        event = event_from_update(update)
        if not self._is_admin(event.user_id):
            return
        if self.cancel_broadcast(event.user_id):
            await update.effective_message.reply_text("Stopping broadcast...")
        else:
            await update.effective_message.reply_text("No broadcast is running.")

    async def _handle_back(self, update, context):
        """Return to the previous screen."""
        event = event_from_update(update)
        outcome = None
        try:
            outcome = await self.navigator.go_back(event, self._conversation(event))
        finally:
            # The button spinner must clear even when rendering fails
            if outcome is NOTHING_TO_GO_BACK:
                await update.callback_query.answer(NO_HISTORY_NOTICE)
            else:
                await update.callback_query.answer()

    async def _handle_exit(self, update, context):
        """End the admin session."""
        event = event_from_update(update)
        await update.callback_query.answer()
        await self.navigator.reset(self._conversation(event))
        await self.navigator.renderer.render(event, SESSION_TERMINATED_TEXT, None)

    # =========================================================================
    # Errors
    # =========================================================================

    async def _handle_error(self, update, context):
        """Log handler errors and tell the affected user something went wrong."""
        error = context.error
        logger.error(f"Update handling failed: {error}", exc_info=error)

        if isinstance(error, ConfigurationError):
            logger.critical(f"Bot is misconfigured: {error}")

        chat = getattr(update, "effective_chat", None)
        if chat is None or self._transport is None:
            return
        await best_effort(
            self._transport.send_message(chat.id, GENERIC_ERROR_TEXT),
            f"error notice to chat {chat.id}",
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def setup_handlers(self, application):
        """Setup command, callback and message handlers."""
        from telegram.ext import CallbackQueryHandler, CommandHandler, MessageHandler, filters

        # Command handlers
        application.add_handler(CommandHandler("start", self._handle_start))
        application.add_handler(CommandHandler("admin", self._handle_admin))
        application.add_handler(CommandHandler("cancel", self._handle_cancel))

        # Button handlers
        application.add_handler(CallbackQueryHandler(self._handle_admin_users, pattern=f"^{CB_ADMIN_USERS}$"))
        application.add_handler(CallbackQueryHandler(self._handle_admin_broadcast, pattern=f"^{CB_ADMIN_BROADCAST}$"))
        application.add_handler(CallbackQueryHandler(self._handle_back, pattern=f"^{CB_ADMIN_BACK}$"))
        application.add_handler(CallbackQueryHandler(self._handle_exit, pattern=f"^{CB_ADMIN_EXIT}$"))
        application.add_handler(CallbackQueryHandler(self._handle_broadcast_cancel, pattern=f"^{CB_BROADCAST_CANCEL}$"))
        application.add_handler(CallbackQueryHandler(self._handle_other_callback))

        # Message handler (must be last)
        application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_text))

        application.add_error_handler(self._handle_error)

    def build_application(self):
        """Build the python-telegram-bot Application and bind it to this handler."""
        from telegram.ext import Application

        tg_config = self.config.telegram
        application = (
            Application.builder()
            .token(self.token)
            .concurrent_updates(True)
            .connect_timeout(tg_config.connect_timeout)
            .read_timeout(tg_config.read_timeout)
            .write_timeout(tg_config.write_timeout)
            .post_init(self._post_init)
            .post_shutdown(self._post_shutdown)
            .build()
        )

        self.bind_transport(TelegramTransport(application.bot))
        self.setup_handlers(application)
        self._application = application
        return application

    async def _post_init(self, application):
        await self.database.create_all()

    async def _post_shutdown(self, application):
        await self.database.dispose()

    def run(self):
        """Run the bot (blocking)."""
        from telegram import Update

        logger.info("Starting Telegram bot...")
        application = self.build_application()
        logger.info("Bot is running. Press Ctrl+C to stop.")

        application.run_polling(
            allowed_updates=Update.ALL_TYPES,
            drop_pending_updates=self.config.telegram.drop_pending_updates,
        )

    async def run_async(self):
        """Run the bot asynchronously."""
        from telegram import Update

        logger.info("Starting Telegram bot (async)...")
        application = self.build_application()

        # post_init only runs under run_polling
        await self.database.create_all()
        await application.initialize()
        await application.start()
        await application.updater.start_polling(
            allowed_updates=Update.ALL_TYPES,
            drop_pending_updates=self.config.telegram.drop_pending_updates,
        )

        logger.info("Bot is running asynchronously.")
        return application

    async def stop(self):
        """Stop the bot."""
        if self._application:
            logger.info("Stopping Telegram bot...")
            for cancel_event in self._active_broadcasts.values():
                cancel_event.set()
            await self._application.updater.stop()
            await self._application.stop()
            await self._application.shutdown()
            await self.database.dispose()
            self._application = None
            logger.info("Bot stopped.")
