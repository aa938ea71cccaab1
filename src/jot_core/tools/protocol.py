from typing import Any, Protocol


class ToolDispatcher(Protocol):
    """Protocol for executing tool calls requested by the model.

    Implementations must never raise for tool failures. Errors are caught
    and serialized into the returned payload so the model can see them and
    react.
    """

    async def execute(self, name: str, params: dict[str, Any]) -> str:
        """Execute a tool and return its serialized result.

        Args:
            name: Name of the tool to run.
            params: Arguments sent by the model.

        Returns:
            Result payload, conventionally JSON. On failure, a payload
            describing the error.
        """
        ...
