"""Keeping a conversation history inside a token budget.

Messages are grouped into units that must be kept or dropped as a whole:

- an ordinary message is its own group;
- an assistant message with tool calls plus the tool results that follow it
  form a single group.

Trimming drops whole groups, oldest first, and always keeps the most recent
group. A tool call is therefore never separated from its results.
"""

import logging

from pydantic import BaseModel, Field

from jot_core.messages import Message
from jot_core.tokens import estimate_message_tokens

logger = logging.getLogger(__name__)


class MessageGroup(BaseModel):
    """A run of messages that is kept or dropped as a unit.

    Attributes:
        messages: The messages in their original order.
        tokens: Sum of the messages' estimated token counts.
    """

    messages: list[Message] = Field(default_factory=list)
    tokens: int = 0

    def add(self, message: Message) -> None:
        self.messages.append(message)
        self.tokens += estimate_message_tokens(message)


def group_messages(messages: list[Message]) -> list[MessageGroup]:
    """Split a history into trimming groups in a single left-to-right pass.

    An invocation message absorbs every result message that directly
    follows it. Truncated transcripts with fewer results than calls are
    grouped with whatever results are present.
    """
    groups: list[MessageGroup] = []
    i = 0
    while i < len(messages):
        group = MessageGroup()
        message = messages[i]
        group.add(message)
        i += 1
        if message.role == "assistant" and message.is_invocation:
            while i < len(messages) and messages[i].is_result:
                group.add(messages[i])
                i += 1
        groups.append(group)
    return groups


def trim_messages(messages: list[Message], max_tokens: int) -> list[Message]:
    """Trim a history to fit within a token budget.

    The budget should already exclude the system prompt and tool catalog;
    only the message list is managed here.

    If the history fits, the same list object is returned untouched.
    Otherwise the oldest groups are dropped until the remainder fits. The
    last group is always kept, even if it alone exceeds the budget; callers
    can detect that case from the size of the result.

    Args:
        messages: Conversation history, oldest first.
        max_tokens: Token budget for the messages. Zero or negative budgets
            are treated as impossibly small.

    Returns:
        The surviving messages in their original order.
    """
    if not messages:
        return messages

    groups = group_messages(messages)
    total = sum(g.tokens for g in groups)
    if total <= max_tokens:
        return messages

    kept = total
    drop_until = 0
    while drop_until < len(groups) - 1 and kept > max_tokens:
        kept -= groups[drop_until].tokens
        drop_until += 1

    logger.debug(
        "trim_messages dropped %d of %d groups (%d -> %d tokens, budget=%d)",
        drop_until,
        len(groups),
        total,
        kept,
        max_tokens,
    )

    trimmed: list[Message] = []
    for group in groups[drop_until:]:
        trimmed.extend(group.messages)
    return trimmed
