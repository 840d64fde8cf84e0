"""
Tests for the Navigator
=======================
Covers:
- transition_to history bookkeeping and persistence
- idempotent refresh (same-state transition)
- go_back pop semantics and the empty-history no-op
- unknown-state fallback in render_current
- configuration errors for unregistered targets
- reset
- per-user serialization under concurrent transitions
"""
import asyncio
import random

import pytest

from navbot.core.foundation.exceptions import ScreenNotRegisteredError
from navbot.core.foundation.types import ConversationState
from navbot.core.navigation.conversation import ConversationManager, InMemoryStateStore, KeyedLock
from navbot.core.navigation.navigator import NOTHING_TO_GO_BACK, BackOutcome

from .conftest import USER_ID, CALLBACK_MESSAGE_ID


def assert_no_consecutive_duplicates(history):
    for previous, current in zip(history, history[1:]):
        assert previous != current, f"duplicate entries in {history}"


# =============================================================================
# transition_to
# =============================================================================

class TestTransition:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_first_transition_has_no_history(self, navigator, conversation, store, callback_event):
        await navigator.transition_to(callback_event, conversation, "a")
        state = await store.get(USER_ID)
        assert state.current_state_id == "a"
        assert state.history == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_previous_state_is_pushed(self, navigator, conversation, store, callback_event):
        await navigator.transition_to(callback_event, conversation, "a")
        await navigator.transition_to(callback_event, conversation, "b")
        await navigator.transition_to(callback_event, conversation, "c")
        state = await store.get(USER_ID)
        assert state.current_state_id == "c"
        assert state.history == ["a", "b"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_renders_descriptor(self, navigator, conversation, transport, callback_event):
        result = await navigator.transition_to(callback_event, conversation, "b")
        assert result.delivered
        assert transport.ops("edit") == [("edit", USER_ID, CALLBACK_MESSAGE_ID, "Screen B", "kb-b")]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_override_text(self, navigator, conversation, transport, callback_event):
        await navigator.transition_to(callback_event, conversation, "b", override_text="Report")
        assert transport.ops("edit")[0][3] == "Report"
        assert transport.ops("edit")[0][4] == "kb-b"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_state_refreshes_without_growing_history(
        self, navigator, conversation, store, transport, callback_event
    ):
        await navigator.transition_to(callback_event, conversation, "a")
        await navigator.transition_to(callback_event, conversation, "b")
        await navigator.transition_to(callback_event, conversation, "b")

        state = await store.get(USER_ID)
        assert state.current_state_id == "b"
        assert state.history == ["a"]
        assert len(transport.ops("edit")) == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unregistered_target_raises_before_mutation(
        self, navigator, conversation, store, transport, callback_event
    ):
        await navigator.transition_to(callback_event, conversation, "a")
        transport.calls.clear()

        with pytest.raises(ScreenNotRegisteredError):
            await navigator.transition_to(callback_event, conversation, "missing")

        assert await store.get(USER_ID) == ConversationState("a", [])
        assert transport.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_history_invariant_over_random_walk(self, navigator, conversation, store, callback_event):
        rng = random.Random(7)
        for _ in range(200):
            if rng.random() < 0.25:
                await navigator.go_back(callback_event, conversation)
            else:
                await navigator.transition_to(callback_event, conversation, rng.choice("abc"))
            state = await store.get(USER_ID)
            assert_no_consecutive_duplicates(state.history)


# =============================================================================
# go_back
# =============================================================================

class TestGoBack:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_round_trip(self, navigator, conversation, store, transport, callback_event):
        await navigator.transition_to(callback_event, conversation, "a")
        await navigator.transition_to(callback_event, conversation, "b")
        result = await navigator.go_back(callback_event, conversation)

        state = await store.get(USER_ID)
        assert state.current_state_id == "a"
        assert state.history == []
        assert result.delivered
        assert transport.ops("edit")[-1][3] == "Screen A"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_history_is_noop(self, navigator, conversation, store, transport, callback_event):
        await navigator.transition_to(callback_event, conversation, "a")
        before = await store.get(USER_ID)
        transport.calls.clear()

        outcome = await navigator.go_back(callback_event, conversation)

        assert outcome is NOTHING_TO_GO_BACK
        assert outcome is BackOutcome.NOTHING_TO_GO_BACK
        assert await store.get(USER_ID) == before
        assert transport.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_conversation_is_noop(self, navigator, conversation, store, callback_event):
        outcome = await navigator.go_back(callback_event, conversation)
        assert outcome is NOTHING_TO_GO_BACK
        assert (await store.get(USER_ID)).is_empty

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_back_never_pushes(self, navigator, conversation, store, callback_event):
        for target in ("a", "b", "c"):
            await navigator.transition_to(callback_event, conversation, target)

        await navigator.go_back(callback_event, conversation)
        assert await store.get(USER_ID) == ConversationState("b", ["a"])
        await navigator.go_back(callback_event, conversation)
        assert await store.get(USER_ID) == ConversationState("a", [])
        assert await navigator.go_back(callback_event, conversation) is NOTHING_TO_GO_BACK

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forward_back_oscillation_does_not_grow_stack(
        self, navigator, conversation, store, callback_event
    ):
        await navigator.transition_to(callback_event, conversation, "a")
        for _ in range(10):
            await navigator.transition_to(callback_event, conversation, "b")
            await navigator.go_back(callback_event, conversation)
        assert await store.get(USER_ID) == ConversationState("a", [])


# =============================================================================
# render_current and reset
# =============================================================================

class TestRenderCurrent:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_state_renders_default(self, navigator, conversation, store, transport, callback_event):
        await store.set(USER_ID, ConversationState("ghost", []))
        result = await navigator.render_current(callback_event, conversation)
        assert result.delivered
        assert transport.ops("edit") == [("edit", USER_ID, CALLBACK_MESSAGE_ID, "Main Menu", "kb-default")]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cleared_state_renders_default(self, navigator, conversation, transport, callback_event):
        await navigator.render_current(callback_event, conversation)
        assert transport.ops("edit")[0][3] == "Main Menu"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_registered_state_with_override(self, navigator, conversation, store, transport, callback_event):
        await store.set(USER_ID, ConversationState("c", ["a"]))
        await navigator.render_current(callback_event, conversation, override_text="Hi")
        assert transport.ops("edit")[0][3:] == ("Hi", "kb-c")
        assert await store.get(USER_ID) == ConversationState("c", ["a"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reset_clears_state(self, navigator, conversation, store, callback_event):
        await navigator.transition_to(callback_event, conversation, "a")
        await navigator.transition_to(callback_event, conversation, "b")
        await navigator.reset(conversation)
        assert (await store.get(USER_ID)).is_empty
        assert await navigator.current_state_id(conversation) is None


# =============================================================================
# Concurrency
# =============================================================================

class YieldingStore(InMemoryStateStore):
    """Store that suspends on every access, like a real database would."""

    async def get(self, user_id):
        await asyncio.sleep(0)
        return await super().get(user_id)

    async def set(self, user_id, state):
        await asyncio.sleep(0)
        await super().set(user_id, state)


class TestConcurrency:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_concurrent_transitions_do_not_lose_updates(self, navigator, callback_event):
        store = YieldingStore()
        manager = ConversationManager(store)

        await asyncio.gather(*(
            navigator.transition_to(callback_event, manager.get(USER_ID), target)
            for target in ("a", "b", "c")
        ))

        assert await store.get(USER_ID) == ConversationState("c", ["a", "b"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_managers_sharing_a_lock_table_serialize(self, navigator, callback_event):
        store = YieldingStore()
        locks = KeyedLock()
        first = ConversationManager(store, locks=locks)
        second = ConversationManager(store, locks=locks)
        assert first.locks is locks and second.locks is locks

        await navigator.transition_to(callback_event, first.get(USER_ID), "a")
        await asyncio.gather(
            navigator.transition_to(callback_event, first.get(USER_ID), "b"),
            navigator.transition_to(callback_event, second.get(USER_ID), "c"),
        )

        assert await store.get(USER_ID) == ConversationState("c", ["a", "b"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_users_are_independent(self, navigator, callback_event):
        store = InMemoryStateStore()
        manager = ConversationManager(store)

        await navigator.transition_to(callback_event, manager.get(1), "a")
        await navigator.transition_to(callback_event, manager.get(2), "b")
        await navigator.transition_to(callback_event, manager.get(1), "c")

        assert await store.get(1) == ConversationState("c", ["a"])
        assert await store.get(2) == ConversationState("b", [])
