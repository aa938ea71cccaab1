"""Function-backed tool dispatcher.

Example:
    ```python
    dispatcher = FunctionToolDispatcher()

    @dispatcher.tool(
        "add",
        "Add two integers.",
        {
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
            "required": ["a", "b"],
        },
    )
    def add(params):
        return {"sum": params["a"] + params["b"]}

    agent = Agent(transport, dispatcher, dispatcher.definitions)
    ```
"""

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from jot_core.messages import ToolDefinition

logger = logging.getLogger(__name__)

ToolFunction = Callable[[dict[str, Any]], Any | Awaitable[Any]]


def _encode(result: Any) -> str:
    return json.dumps(result, default=str, ensure_ascii=False)


def error_payload(message: str) -> str:
    """Serialize an error the way tool results report failures."""
    return _encode({"error": message})


class FunctionToolDispatcher:
    """Dispatches tool calls to registered Python callables.

    Each callable receives the model's argument dict and returns any
    JSON-serializable value (or an awaitable of one). Exceptions raised by a
    tool are turned into ``{"error": ...}`` payloads.
    """

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolDefinition, ToolFunction]] = {}

    def register(self, definition: ToolDefinition, func: ToolFunction) -> None:
        """Register a tool. Re-registering a name replaces the old tool."""
        self._tools[definition.name] = (definition, func)

    def tool(
        self,
        name: str,
        description: str = "",
        parameters: dict[str, Any] | None = None,
    ) -> Callable[[ToolFunction], ToolFunction]:
        """Decorator form of ``register``."""

        def decorator(func: ToolFunction) -> ToolFunction:
            definition = ToolDefinition(name=name, description=description)
            if parameters is not None:
                definition.parameters = parameters
            self.register(definition, func)
            return func

        return decorator

    @property
    def definitions(self) -> list[ToolDefinition]:
        """The tool catalog, in registration order."""
        return [definition for definition, _ in self._tools.values()]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    async def execute(self, name: str, params: dict[str, Any]) -> str:
        """Run a tool and return its JSON-encoded result. Never raises."""
        entry = self._tools.get(name)
        if entry is None:
            return error_payload(f"unknown tool: {name}")

        _, func = entry
        try:
            result = func(params)
            if inspect.isawaitable(result):
                result = await result
            return _encode(result)
        except Exception as e:
            logger.debug("tool %s failed: %s", name, e, exc_info=True)
            return error_payload(str(e) or type(e).__name__)
