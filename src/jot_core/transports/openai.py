"""OpenAI-compatible chat completions transport.

Also serves Ollama and other servers exposing the OpenAI API via ``base_url``.
"""

import json
import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from jot_core.errors import TransportError
from jot_core.messages import ChatResponse, Message, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


class OpenAITransport:
    """Chat transport for the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self._model = model or DEFAULT_MODEL
        try:
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        except openai.OpenAIError as e:
            raise TransportError(f"openai client: {e}") from e

    @property
    def model(self) -> str:
        return self._model

    async def __aenter__(self) -> "OpenAITransport":
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.close()

    async def chat(
        self,
        system_prompt: str,
        messages: list[Message],
        tools: list[ToolDefinition],
    ) -> ChatResponse:
        """Send one chat completion request."""
        request: dict[str, Any] = {
            "model": self._model,
            "messages": build_messages(system_prompt, messages),
        }
        if tools:
            request["tools"] = build_tools(tools)

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            raise TransportError(f"openai chat: {e}", status_code=e.status_code) from e
        except openai.OpenAIError as e:
            raise TransportError(f"openai chat: {e}") from e

        if not response.choices:
            return ChatResponse()

        choice = response.choices[0].message
        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                params=_decode_arguments(tc.function.arguments),
            )
            for tc in (choice.tool_calls or [])
        ]
        logger.debug(
            "openai chat model=%s messages=%d tool_calls=%d",
            self._model,
            len(messages),
            len(tool_calls),
        )
        return ChatResponse(content=choice.content or "", tool_calls=tool_calls)


def build_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
    """Convert the tool catalog to OpenAI function tools."""
    return [
        {
            "type": "function",
            "function": {
                "name": t.name,
                "description": t.description,
                "parameters": t.parameters,
            },
        }
        for t in tools
    ]


def build_messages(system_prompt: str, messages: list[Message]) -> list[dict[str, Any]]:
    """Convert history to OpenAI message dicts, system prompt first."""
    result: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    for m in messages:
        if m.role == "user":
            if m.tool_call_id:
                result.append(
                    {"role": "tool", "tool_call_id": m.tool_call_id, "content": m.content}
                )
            else:
                result.append({"role": "user", "content": m.content})
        elif m.tool_calls:
            result.append(
                {
                    "role": "assistant",
                    "content": m.content,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": json.dumps(tc.params),
                            },
                        }
                        for tc in m.tool_calls
                    ],
                }
            )
        else:
            result.append({"role": "assistant", "content": m.content})
    return result


def _decode_arguments(arguments: str | None) -> dict[str, Any]:
    """Decode a tool call's JSON arguments; malformed input yields {}."""
    if not arguments:
        return {}
    try:
        params = json.loads(arguments)
    except json.JSONDecodeError:
        logger.debug("discarding malformed tool arguments %r", arguments[:200])
        return {}
    return params if isinstance(params, dict) else {}
