"""Anthropic Messages API transport."""

import logging
from typing import Any

import anthropic
import httpx
from anthropic import AsyncAnthropic

from jot_core.errors import TransportError
from jot_core.messages import ChatResponse, Message, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)

OAUTH_BETA = "oauth-2025-04-20"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 4096


class AnthropicTransport:
    """Chat transport for the Anthropic Messages API.

    Authenticates with an OAuth bearer token when one is given, otherwise
    with an API key. Either may also come from the ``ANTHROPIC_AUTH_TOKEN``
    and ``ANTHROPIC_API_KEY`` environment variables.

    Example:
        ```python
        async with AnthropicTransport(api_key="sk-...") as transport:
            response = await transport.chat(system_prompt, messages, tools)
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        auth_token: str | None = None,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        base_url: str | None = None,
        max_retries: int = 2,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            api_key: API key sent as ``x-api-key``.
            auth_token: OAuth token sent as a bearer token. Takes precedence
                over ``api_key``.
            model: Model name. Defaults to DEFAULT_MODEL.
            max_tokens: Maximum tokens the model may generate per response.
            base_url: Override for the API base URL.
            max_retries: Retries the client makes on transient failures.
            http_client: Optional preconfigured httpx client.

        Raises:
            TransportError: If no credentials are given or found in the
                environment.
        """
        self._model = model or DEFAULT_MODEL
        self._max_tokens = max_tokens

        kwargs: dict[str, Any] = {"max_retries": max_retries}
        if base_url:
            kwargs["base_url"] = base_url
        if http_client is not None:
            kwargs["http_client"] = http_client
        if auth_token:
            kwargs["auth_token"] = auth_token
            kwargs["default_headers"] = {"anthropic-beta": OAUTH_BETA}
        else:
            kwargs["api_key"] = api_key
        self._client = AsyncAnthropic(**kwargs)

        if not (self._client.api_key or self._client.auth_token):
            raise TransportError(
                "anthropic client: no API key or auth token configured"
            )

    @property
    def model(self) -> str:
        return self._model

    async def __aenter__(self) -> "AnthropicTransport":
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
        """Send one Messages API request."""
        request: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": [{"type": "text", "text": system_prompt}],
            "messages": build_messages(messages),
        }
        if tools:
            request["tools"] = build_tools(tools)

        try:
            response = await self._client.messages.create(**request)
        except anthropic.APIStatusError as e:
            raise TransportError(f"anthropic chat: {e}", status_code=e.status_code) from e
        except anthropic.APIError as e:
            raise TransportError(f"anthropic chat: {e}") from e

        if not isinstance(response, anthropic.types.Message):
            raise TransportError(f"anthropic chat: unexpected response {response!r:.200}")

        result = parse_response(response.model_dump())
        logger.debug(
            "anthropic chat model=%s messages=%d tool_calls=%d",
            self._model,
            len(messages),
            len(result.tool_calls),
        )
        return result


def build_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
    """Convert the tool catalog to Anthropic tool definitions.

    Only ``properties`` and ``required`` are carried over into the
    ``input_schema``; the API expects a plain object schema.
    """
    result = []
    for t in tools:
        schema: dict[str, Any] = {"type": "object"}
        if "properties" in t.parameters:
            schema["properties"] = t.parameters["properties"]
        if "required" in t.parameters:
            schema["required"] = t.parameters["required"]
        result.append(
            {"name": t.name, "description": t.description, "input_schema": schema}
        )
    return result


def build_messages(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert history to Anthropic message dicts.

    Tool results become ``tool_result`` blocks in user messages; invocations
    become an optional ``text`` block followed by ``tool_use`` blocks.
    """
    result: list[dict[str, Any]] = []
    for m in messages:
        if m.role == "user":
            if m.tool_call_id:
                content: Any = [
                    {
                        "type": "tool_result",
                        "tool_use_id": m.tool_call_id,
                        "content": m.content,
                    }
                ]
            else:
                content = m.content
            result.append({"role": "user", "content": content})
        elif m.tool_calls:
            blocks: list[dict[str, Any]] = []
            if m.content:
                blocks.append({"type": "text", "text": m.content})
            for tc in m.tool_calls:
                blocks.append(
                    {"type": "tool_use", "id": tc.id, "name": tc.name, "input": tc.params}
                )
            result.append({"role": "assistant", "content": blocks})
        else:
            result.append({"role": "assistant", "content": m.content})
    return result


def parse_response(payload: dict[str, Any]) -> ChatResponse:
    """Collect text and tool_use blocks from a Messages API response."""
    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []
    for block in payload.get("content") or []:
        block_type = block.get("type")
        if block_type == "text":
            text_parts.append(block.get("text", ""))
        elif block_type == "tool_use":
            params = block.get("input")
            tool_calls.append(
                ToolCall(
                    id=block.get("id", ""),
                    name=block.get("name", ""),
                    params=params if isinstance(params, dict) else {},
                )
            )
    return ChatResponse(content="".join(text_parts), tool_calls=tool_calls)
