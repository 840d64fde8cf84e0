"""
Navigator
=========

Decides which screen a conversation shows and drives state transitions.

Each operation holds the conversation's lock for the whole
read-modify-persist-render sequence, so renders for one user are applied
in the order their transitions were issued.

Usage:
    navigator = Navigator(registry, Renderer(transport))
    await navigator.transition_to(event, conversation, ScreenId.ADMIN_MENU)
    outcome = await navigator.go_back(event, conversation)
    if outcome is NOTHING_TO_GO_BACK:
        ...
"""

import logging
from enum import Enum
from typing import Optional, Union

from ..foundation.types import ConversationState, InboundEvent
from .conversation import Conversation
from .renderer import Renderer, RenderResult
from .screens import ScreenRegistry, ScreenDescriptor, StateKey

logger = logging.getLogger(__name__)


class BackOutcome(Enum):
    """Non-render outcomes of back navigation."""
    NOTHING_TO_GO_BACK = "nothing_to_go_back"


NOTHING_TO_GO_BACK = BackOutcome.NOTHING_TO_GO_BACK


class Navigator:
    """Screen transitions and back navigation over a ScreenRegistry."""

    def __init__(self, registry: ScreenRegistry, renderer: Renderer):
        self.registry = registry
        self.renderer = renderer

    async def render_current(
        self,
        event: InboundEvent,
        conversation: Conversation,
        override_text: Optional[str] = None
    ) -> RenderResult:
        """Render whatever the conversation currently points at.

        Unknown or cleared states render the registry's default screen.
        """
        async with conversation.locked():
            state = await conversation.load()
            return await self._render_state(event, state, override_text)

    async def transition_to(
        self,
        event: InboundEvent,
        conversation: Conversation,
        new_state_id: StateKey,
        override_text: Optional[str] = None
    ) -> RenderResult:
        """
        Move the conversation to ``new_state_id`` and render it.

        Raises:
            ScreenNotRegisteredError: target was never registered. Raised
                before any state is touched.
        """
        screen = self.registry.require(new_state_id)

        async with conversation.locked():
            state = await conversation.load()
            if state.current_state_id != screen.state_id:
                state.push(state.current_state_id)
            state.current_state_id = screen.state_id
            await conversation.save(state)

            logger.debug(f"{conversation} -> {screen.state_id} (history depth {len(state.history)})")
            return await self._render(event, screen, override_text)

    async def go_back(
        self,
        event: InboundEvent,
        conversation: Conversation
    ) -> Union[RenderResult, BackOutcome]:
        """
        Pop the previous screen off the history and render it.

        The screen being left is not pushed. With an empty history the
        state is left untouched and NOTHING_TO_GO_BACK is returned.
        """
        async with conversation.locked():
            state = await conversation.load()
            previous = state.pop()
            if previous is None:
                logger.debug(f"{conversation}: nothing to go back to")
                return NOTHING_TO_GO_BACK

            state.current_state_id = previous
            await conversation.save(state)
            return await self._render_state(event, state)

    async def reset(self, conversation: Conversation) -> None:
        """Clear current state and history (session termination)."""
        async with conversation.locked():
            await conversation.save(ConversationState.empty())
        logger.debug(f"{conversation} reset")

    async def current_state_id(self, conversation: Conversation) -> Optional[str]:
        state = await conversation.load()
        return state.current_state_id

    async def _render_state(
        self,
        event: InboundEvent,
        state: ConversationState,
        override_text: Optional[str] = None
    ) -> RenderResult:
        screen = self.registry.resolve(state.current_state_id)
        return await self._render(event, screen, override_text)

    async def _render(
        self,
        event: InboundEvent,
        screen: ScreenDescriptor,
        override_text: Optional[str] = None
    ) -> RenderResult:
        text = override_text if override_text else screen.text
        return await self.renderer.render(event, text, screen.build_keyboard())
