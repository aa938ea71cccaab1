from typing import Protocol

from jot_core.messages import ChatResponse, Message, ToolDefinition


class ChatTransport(Protocol):
    """Protocol for sending a conversation to a model provider.

    Implementations translate the core message types to the provider's wire
    format and back. They must preserve message order, and return tool calls
    with stable, unique IDs that the agent echoes back in result messages.
    """

    async def chat(
        self,
        system_prompt: str,
        messages: list[Message],
        tools: list[ToolDefinition],
    ) -> ChatResponse:
        """Send one request and return the assistant's reply.

        Args:
            system_prompt: System instructions, sent separately from history.
            messages: Conversation history, already trimmed to budget.
            tools: Tool catalog the model may call.

        Returns:
            The assistant's text and any requested tool calls.

        Raises:
            TransportError: If the provider request fails.
        """
        ...

    async def aclose(self) -> None:
        """Release the transport's network resources."""
        ...
