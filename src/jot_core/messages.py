"""Conversation types shared by the agent loop, trimming and transports.

These are provider-agnostic. Transports translate them to and from the
provider's wire format; adapters convert framework message types into them.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class ToolCall(BaseModel):
    """A tool invocation requested by the assistant."""

    id: str
    name: str
    params: dict[str, Any] = Field(default_factory=dict)


class Message(BaseModel):
    """A single entry in a conversation history.

    A message is exactly one of:

    - an ordinary turn: plain content, no tool calls, no ``tool_call_id``;
    - an invocation: an assistant message carrying one or more tool calls;
    - a result: the output of a tool, tagged with the call's ``tool_call_id``.

    The system prompt is never part of a history; it is passed to the
    transport separately.

    Attributes:
        role: Who produced the message. Tool results use ``"user"``.
        content: Text content. May be empty on invocation messages.
        tool_calls: Tool invocations requested by the assistant.
        tool_call_id: ID of the tool call this message is the result of.
    """

    role: Literal["user", "assistant"]
    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_call_id: str | None = None

    @model_validator(mode="after")
    def _check_kind(self) -> "Message":
        if self.tool_calls and self.tool_call_id:
            raise ValueError("a tool result message cannot carry tool calls")
        return self

    @property
    def is_invocation(self) -> bool:
        return bool(self.tool_calls)

    @property
    def is_result(self) -> bool:
        return bool(self.tool_call_id)


class ToolDefinition(BaseModel):
    """A tool catalog entry as advertised to the model.

    Attributes:
        name: Tool name the model uses to call it.
        description: What the tool does.
        parameters: JSON Schema object describing the tool's arguments.
    """

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )


class ChatResponse(BaseModel):
    """An assistant reply as returned by a chat transport."""

    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
