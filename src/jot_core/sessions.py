"""Per-conversation history with serialized turns.

Each conversation ID gets its own lock, so two turns on the same
conversation run one after the other while unrelated conversations proceed
concurrently.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from jot_core.agent import Agent, TurnResult
from jot_core.config import JotConfig
from jot_core.messages import Message
from jot_core.trimming import trim_messages

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory conversation histories keyed by conversation ID.

    Example:
        ```python
        store = SessionStore(agent)
        result = await store.run_turn("channel-42", "what's on my list?")
        ```
    """

    def __init__(self, agent: Agent, retention_tokens: int | None = None) -> None:
        """Initialize the store.

        Args:
            agent: Agent used to run turns.
            retention_tokens: Token budget for stored history. Defaults to the
                agent's max_context_tokens, keeping as much history as the
                model could use.
        """
        self._agent = agent
        self._retention_tokens = retention_tokens
        self._histories: dict[str, list[Message]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Turns holding or waiting on each conversation's lock.
        self._lock_users: dict[str, int] = {}

    @classmethod
    def from_config(cls, agent: Agent, config: JotConfig) -> "SessionStore":
        """Create a store using the retention budget from settings."""
        return cls(agent, retention_tokens=config.get_retention_tokens())

    @property
    def retention_tokens(self) -> int:
        return self._retention_tokens or self._agent.max_context_tokens

    @asynccontextmanager
    async def _locked(self, conversation_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = self._locks[conversation_id] = asyncio.Lock()
        self._lock_users[conversation_id] = self._lock_users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[conversation_id] -= 1
            if not self._lock_users[conversation_id]:
                del self._lock_users[conversation_id]

    def get_history(self, conversation_id: str) -> list[Message]:
        """Return a copy of a conversation's stored history."""
        return list(self._histories.get(conversation_id, []))

    def conversation_ids(self) -> list[str]:
        return list(self._histories)

    async def reset(self, conversation_id: str) -> None:
        """Forget a conversation's history.

        The conversation's lock is released too, unless another turn is
        still waiting on it.
        """
        async with self._locked(conversation_id):
            self._histories.pop(conversation_id, None)
        if conversation_id not in self._lock_users:
            self._locks.pop(conversation_id, None)

    async def run_turn(self, conversation_id: str, user_message: str) -> TurnResult:
        """Run one agent turn and store the resulting history.

        The stored history is trimmed to the retention budget; the returned
        TurnResult carries the full, untrimmed history of the turn.

        Raises:
            TransportError: Propagated from the agent. Nothing is stored.
        """
        async with self._locked(conversation_id):
            history = self._histories.get(conversation_id, [])
            result = await self._agent.run(history, user_message)

            stored = trim_messages(result.history, self.retention_tokens)
            if len(stored) < len(result.history):
                logger.debug(
                    "session %s history capped: %d -> %d messages",
                    conversation_id,
                    len(result.history),
                    len(stored),
                )
            self._histories[conversation_id] = list(stored)
            return result
