"""Tool-calling agent loop.

Usage:
    ```python
    from jot_core import Agent, FunctionToolDispatcher, register_builtin_tools
    from jot_core.transports import AnthropicTransport

    dispatcher = register_builtin_tools(FunctionToolDispatcher())

    async with AnthropicTransport(api_key="sk-...") as transport:
        agent = Agent(transport, dispatcher, dispatcher.definitions)
        result = await agent.run([], "What day is it?")
        print(result.text)
        history = result.history  # pass back in on the next turn
    ```
"""

import asyncio
import logging

from pydantic import BaseModel, Field

from jot_core.errors import TransportError
from jot_core.messages import ChatResponse, Message, ToolCall, ToolDefinition
from jot_core.tokens import estimate_tokens, estimate_tools_tokens
from jot_core.tools.protocol import ToolDispatcher
from jot_core.transports.protocol import ChatTransport
from jot_core.trimming import trim_messages

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTEXT_TOKENS = 100_000
DEFAULT_MAX_TOOL_ROUNDS = 10
DEFAULT_MIN_MESSAGE_BUDGET = 1000

MAX_ROUNDS_TEXT = "I hit the maximum number of tool calls. Here's what I have so far."

DEFAULT_SYSTEM_PROMPT = """\
You are a personal assistant that helps the user keep track of what is on \
their mind. You act through the tools available to you.

Guidelines:
- Be helpful but concise. No unnecessary chatter.
- Use tools to check state before answering questions. Don't guess.
- Use get_time when you need the current date or time.
- If a tool returns an error, tell the user or try a different approach.
- Admit when you don't know something rather than making things up.
- Dates should be in YYYY-MM-DD format.
- When creating items, confirm what you created with the details."""


class TurnResult(BaseModel):
    """Outcome of one agent turn.

    Attributes:
        text: Final reply for the user, or MAX_ROUNDS_TEXT if the round
            limit was reached.
        history: The full, untrimmed history including every message added
            during the turn. Callers persist this and apply their own
            retention budget.
        rounds: Number of model requests made.
        reached_round_limit: True if the turn ended without a final answer.
    """

    text: str
    history: list[Message] = Field(default_factory=list)
    rounds: int = 0
    reached_round_limit: bool = False


def truncate(text: str, n: int) -> str:
    """Cut text to n characters, marking the cut with '...'."""
    if len(text) <= n:
        return text
    return text[:n] + "..."


class Agent:
    """Runs the tool-calling loop between a model and a set of tools.

    Each turn appends the user's message, then repeatedly sends the
    history (trimmed to the message budget) to the model. Tool calls are
    executed and their results appended until the model answers without
    calling a tool, or the round limit is hit.

    Trimming only affects what is sent. The history returned in the
    TurnResult keeps every message.

    The agent holds no conversation state. Callers must not run two turns
    on the same history at once; see SessionStore for a per-conversation
    lock.
    """

    def __init__(
        self,
        transport: ChatTransport,
        dispatcher: ToolDispatcher,
        tools: list[ToolDefinition] | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        min_message_budget: int = DEFAULT_MIN_MESSAGE_BUDGET,
        parallel_tools: bool = False,
    ) -> None:
        """Initialize the agent.

        Args:
            transport: Sends conversations to the model provider.
            dispatcher: Executes the tools the model calls.
            tools: Tool catalog advertised to the model.
            system_prompt: System instructions sent with every request.
            max_context_tokens: Budget for a whole request: system prompt,
                tool catalog and message history.
            max_tool_rounds: Maximum model requests per turn.
            min_message_budget: Floor for the message budget, so the current
                turn has room even when fixed overhead is large.
            parallel_tools: Execute the tool calls of one round concurrently.
                Results are still appended in call order.
        """
        self._transport = transport
        self._dispatcher = dispatcher
        self._tools = list(tools or [])
        self._system_prompt = system_prompt
        self.max_context_tokens = max_context_tokens
        self.max_tool_rounds = max_tool_rounds
        self.min_message_budget = min_message_budget
        self.parallel_tools = parallel_tools

    @property
    def tools(self) -> list[ToolDefinition]:
        return self._tools

    @tools.setter
    def tools(self, tools: list[ToolDefinition]) -> None:
        self._tools = list(tools)

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def aclose(self) -> None:
        """Close the underlying transport."""
        await self._transport.aclose()

    def message_budget(self) -> int:
        """Tokens left for messages after the system prompt and tool catalog.

        Re-estimated on each call so a changed tool catalog is accounted for.
        """
        fixed = estimate_tokens(self._system_prompt) + estimate_tools_tokens(self._tools)
        return max(self.max_context_tokens - fixed, self.min_message_budget)

    async def run(self, history: list[Message], user_message: str) -> TurnResult:
        """Run one turn of the conversation.

        Args:
            history: Prior conversation. Not modified.
            user_message: The user's new input.

        Returns:
            TurnResult with the reply and the extended history.

        Raises:
            TransportError: If a model request fails. The turn is aborted.
        """
        messages = list(history)
        messages.append(Message(role="user", content=user_message))

        budget = self.message_budget()

        for round_index in range(1, self.max_tool_rounds + 1):
            trimmed = trim_messages(messages, budget)
            if len(trimmed) < len(messages):
                logger.info(
                    "context trimmed: %d -> %d messages", len(messages), len(trimmed)
                )

            response = await self._chat(trimmed)

            if not response.tool_calls:
                messages.append(Message(role="assistant", content=response.content))
                logger.debug("turn finished after %d round(s)", round_index)
                return TurnResult(
                    text=response.content, history=messages, rounds=round_index
                )

            messages.append(
                Message(
                    role="assistant",
                    content=response.content,
                    tool_calls=response.tool_calls,
                )
            )
            results = await self._execute_tools(response.tool_calls)
            for tool_call, result in zip(response.tool_calls, results):
                messages.append(
                    Message(role="user", content=result, tool_call_id=tool_call.id)
                )

        logger.warning(
            "tool-call round limit reached (%d rounds)", self.max_tool_rounds
        )
        return TurnResult(
            text=MAX_ROUNDS_TEXT,
            history=messages,
            rounds=self.max_tool_rounds,
            reached_round_limit=True,
        )

    async def _chat(self, messages: list[Message]) -> ChatResponse:
        try:
            return await self._transport.chat(self._system_prompt, messages, self._tools)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"llm chat: {e}") from e

    async def _execute_tools(self, tool_calls: list[ToolCall]) -> list[str]:
        if self.parallel_tools and len(tool_calls) > 1:
            return list(
                await asyncio.gather(*(self._execute_tool(tc) for tc in tool_calls))
            )
        return [await self._execute_tool(tc) for tc in tool_calls]

    async def _execute_tool(self, tool_call: ToolCall) -> str:
        result = await self._dispatcher.execute(tool_call.name, tool_call.params)
        logger.debug("tool %s -> %s", tool_call.name, truncate(result, 200))
        return result
