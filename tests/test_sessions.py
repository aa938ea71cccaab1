import asyncio

import pytest

from jot_core.agent import Agent
from jot_core.config import JotConfig
from jot_core.errors import TransportError
from jot_core.messages import ChatResponse, Message, ToolDefinition
from jot_core.sessions import SessionStore
from jot_core.tokens import estimate_messages_tokens

from .conftest import MockDispatcher, MockTransport


class GatedTransport:
    """Transport that blocks each request until released, tracking overlap."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.active = 0
        self.max_active = 0
        self.seen: list[list[Message]] = []

    async def chat(
        self,
        system_prompt: str,
        messages: list[Message],
        tools: list[ToolDefinition],
    ) -> ChatResponse:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.seen.append(list(messages))
        try:
            await self.release.wait()
        finally:
            self.active -= 1
        return ChatResponse(content=f"reply {len(self.seen)}")


class TestSessionStore:
    """Test per-conversation history storage."""

    @pytest.mark.asyncio
    async def test_history_carries_across_turns(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """The second turn sees the first turn's messages."""
        transport = MockTransport([ChatResponse(content="first"), ChatResponse(content="second")])
        store = SessionStore(Agent(transport, mock_dispatcher))

        await store.run_turn("conv-1", "hello")
        result = await store.run_turn("conv-1", "again")

        assert result.text == "second"
        sent = transport.calls[1]["messages"]
        assert [m.content for m in sent] == ["hello", "first", "again"]
        assert len(store.get_history("conv-1")) == 4

    @pytest.mark.asyncio
    async def test_conversations_are_isolated(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """Histories are kept per conversation ID."""
        transport = MockTransport([ChatResponse(content="ok")])
        store = SessionStore(Agent(transport, mock_dispatcher))

        await store.run_turn("a", "for a")
        await store.run_turn("b", "for b")

        assert [m.content for m in store.get_history("a")] == ["for a", "ok"]
        assert [m.content for m in store.get_history("b")] == ["for b", "ok"]
        assert sorted(store.conversation_ids()) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_stored_history_capped_to_retention_budget(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """Stored history is trimmed; the returned result is not."""
        transport = MockTransport([ChatResponse(content="r" * 400)])
        agent = Agent(transport, mock_dispatcher)
        store = SessionStore(agent, retention_tokens=300)

        for i in range(5):
            result = await store.run_turn("conv", f"q{i} " + "x" * 400)

        stored = store.get_history("conv")
        assert estimate_messages_tokens(stored) <= 300
        assert stored[-1].content == "r" * 400
        assert len(result.history) > len(stored)

    def test_from_config_uses_retention_setting(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """The retention budget comes from settings when built from config."""
        agent = Agent(MockTransport([ChatResponse()]), mock_dispatcher)
        config = JotConfig(_env_file=None, history_retention_tokens=50)

        assert SessionStore.from_config(agent, config).retention_tokens == 50

    def test_from_config_defaults_to_context_setting(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        agent = Agent(MockTransport([ChatResponse()]), mock_dispatcher)
        config = JotConfig(_env_file=None, max_context_tokens=7000)

        assert SessionStore.from_config(agent, config).retention_tokens == 7000

    def test_retention_defaults_to_context_budget(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """Without an explicit budget, retention follows the agent."""
        agent = Agent(MockTransport([ChatResponse()]), mock_dispatcher, max_context_tokens=5000)

        assert SessionStore(agent).retention_tokens == 5000
        assert SessionStore(agent, retention_tokens=200).retention_tokens == 200

    @pytest.mark.asyncio
    async def test_failed_turn_stores_nothing(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """A transport error leaves the stored history unchanged."""
        transport = MockTransport([ChatResponse(content="ok"), TransportError("down")])
        store = SessionStore(Agent(transport, mock_dispatcher))

        await store.run_turn("conv", "hello")
        with pytest.raises(TransportError):
            await store.run_turn("conv", "again")

        assert [m.content for m in store.get_history("conv")] == ["hello", "ok"]

    @pytest.mark.asyncio
    async def test_reset(self, mock_dispatcher: MockDispatcher) -> None:
        """Reset forgets a conversation."""
        store = SessionStore(Agent(MockTransport([ChatResponse(content="ok")]), mock_dispatcher))

        await store.run_turn("conv", "hello")
        await store.reset("conv")

        assert store.get_history("conv") == []
        assert store.conversation_ids() == []
        assert store._locks == {}

    @pytest.mark.asyncio
    async def test_same_conversation_turns_serialized(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """Concurrent turns on one conversation run one at a time."""
        transport = GatedTransport()
        store = SessionStore(Agent(transport, mock_dispatcher))

        first = asyncio.create_task(store.run_turn("conv", "one"))
        second = asyncio.create_task(store.run_turn("conv", "two"))
        await asyncio.sleep(0.01)
        transport.release.set()
        await asyncio.gather(first, second)

        assert transport.max_active == 1
        # The second turn saw the first turn's completed exchange.
        assert [m.content for m in transport.seen[1]] == ["one", "reply 1", "two"]

    @pytest.mark.asyncio
    async def test_different_conversations_run_concurrently(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """Unrelated conversations do not wait on each other."""
        transport = GatedTransport()
        store = SessionStore(Agent(transport, mock_dispatcher))

        tasks = [
            asyncio.create_task(store.run_turn("a", "hi")),
            asyncio.create_task(store.run_turn("b", "hi")),
        ]
        await asyncio.sleep(0.01)
        transport.release.set()
        await asyncio.gather(*tasks)

        assert transport.max_active == 2

    @pytest.mark.asyncio
    async def test_reset_waits_for_running_turn(
        self, mock_dispatcher: MockDispatcher
    ) -> None:
        """A reset queued between turns keeps them serialized."""
        transport = GatedTransport()
        store = SessionStore(Agent(transport, mock_dispatcher))

        first = asyncio.create_task(store.run_turn("conv", "one"))
        reset = asyncio.create_task(store.reset("conv"))
        second = asyncio.create_task(store.run_turn("conv", "two"))
        await asyncio.sleep(0.01)
        transport.release.set()
        await asyncio.gather(first, reset, second)

        assert transport.max_active == 1
        # The reset ran after the first turn, so the second starts fresh.
        assert [m.content for m in transport.seen[1]] == ["two"]
        assert [m.content for m in store.get_history("conv")] == ["two", "reply 2"]
