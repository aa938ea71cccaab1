from typing import Any, Protocol

from jot_core.messages import Message


class MessageAdapter(Protocol):
    """Converts a third-party transcript into history messages.

    Tool results must come out as user messages carrying the originating
    call's ``tool_call_id``, directly after the invocation that requested
    them, so trimming keeps each exchange together.
    """

    def convert(self, messages: list[Any]) -> list[Message]:
        """Convert a transcript, preserving order and skipping system prompts."""
        ...

    def convert_single(self, message: Any) -> Message | None:
        """Convert one message.

        Returns:
            The history message, or None for messages that never belong in
            a history (system prompts).
        """
        ...
