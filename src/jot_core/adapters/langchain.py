"""LangChain message adapter.

Turns an existing LangChain transcript (HumanMessage, AIMessage,
ToolMessage) into a history the agent can continue.
"""

from typing import TYPE_CHECKING

from jot_core.messages import Message, ToolCall

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage


class LangChainAdapter:
    """Converts LangChain messages to history Messages.

    Usage:
        ```python
        from langchain_core.messages import HumanMessage, AIMessage
        from jot_core.adapters.langchain import LangChainAdapter

        adapter = LangChainAdapter()
        history = adapter.convert([
            HumanMessage(content="What's due today?"),
            AIMessage(content="", tool_calls=[...]),
        ])
        result = await agent.run(history, "And tomorrow?")
        ```
    """

    def convert(self, messages: list["BaseMessage"]) -> list[Message]:
        """Convert a list of LangChain messages, skipping system messages."""
        converted = (self.convert_single(msg) for msg in messages)
        return [m for m in converted if m is not None]

    def convert_single(self, message: "BaseMessage") -> Message | None:
        """Convert a single LangChain message.

        Tool results become user messages tagged with the tool_call_id.
        System messages return None. Unknown message types are treated as
        user input.
        """
        from langchain_core.messages import (
            AIMessage,
            HumanMessage,
            SystemMessage,
            ToolMessage,
        )

        content = self._extract_content(message)

        if isinstance(message, SystemMessage):
            return None

        if isinstance(message, HumanMessage):
            return Message(role="user", content=content)

        if isinstance(message, AIMessage):
            tool_calls = [
                ToolCall(
                    id=tc.get("id") or "",
                    name=tc.get("name", ""),
                    params=tc.get("args") or {},
                )
                for tc in (message.tool_calls or [])
            ]
            return Message(role="assistant", content=content, tool_calls=tool_calls)

        if isinstance(message, ToolMessage):
            return Message(
                role="user",
                content=content,
                tool_call_id=message.tool_call_id,
            )

        return Message(role="user", content=content)

    def _extract_content(self, message: "BaseMessage") -> str:
        """Flatten string or multimodal list content to text."""
        if isinstance(message.content, str):
            return message.content
        if isinstance(message.content, list):
            texts = []
            for block in message.content:
                if isinstance(block, str):
                    texts.append(block)
                elif isinstance(block, dict) and block.get("type") == "text":
                    texts.append(block.get("text", ""))
            return "\n".join(texts)
        return str(message.content)
