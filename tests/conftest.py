import json
from typing import Any

import pytest

from jot_core.messages import ChatResponse, Message, ToolCall, ToolDefinition


class MockTransport:
    """Scripted chat transport for testing.

    Returns the queued responses in order and records every request.
    Once the script runs out, the last response is repeated.
    """

    def __init__(self, responses: list[ChatResponse | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def chat(
        self,
        system_prompt: str,
        messages: list[Message],
        tools: list[ToolDefinition],
    ) -> ChatResponse:
        self.calls.append(
            {"system_prompt": system_prompt, "messages": list(messages), "tools": tools}
        )
        index = min(len(self.calls) - 1, len(self._responses) - 1)
        response = self._responses[index]
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


class MockDispatcher:
    """Dispatcher that echoes the call back as JSON and records calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def execute(self, name: str, params: dict[str, Any]) -> str:
        self.calls.append((name, params))
        return json.dumps({"tool": name, "params": params})


def tool_response(*calls: tuple[str, str], content: str = "") -> ChatResponse:
    """Build a response requesting tools, given (call_id, tool_name) pairs."""
    return ChatResponse(
        content=content,
        tool_calls=[ToolCall(id=call_id, name=name) for call_id, name in calls],
    )


@pytest.fixture
def mock_dispatcher() -> MockDispatcher:
    """Provide an echoing tool dispatcher."""
    return MockDispatcher()


@pytest.fixture
def sample_tools() -> list[ToolDefinition]:
    """Provide a small tool catalog."""
    return [
        ToolDefinition(
            name="get_summary",
            description="Get a summary of open things.",
        ),
        ToolDefinition(
            name="create_thing",
            description="Create a new thing to track.",
            parameters={
                "type": "object",
                "properties": {"title": {"type": "string", "description": "What it is"}},
                "required": ["title"],
            },
        ),
    ]


@pytest.fixture
def sample_history() -> list[Message]:
    """Provide a history with one tool exchange in the middle."""
    return [
        Message(role="user", content="q1"),
        Message(role="assistant", content="a1"),
        Message(role="user", content="q2"),
        Message(
            role="assistant",
            tool_calls=[ToolCall(id="c1", name="get_summary")],
        ),
        Message(role="user", content="{}", tool_call_id="c1"),
        Message(role="assistant", content="a2"),
    ]
