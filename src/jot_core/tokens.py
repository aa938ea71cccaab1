"""Approximate token counting for messages and tool schemas.

Counts are a heuristic (about four characters per token) used for context
budgeting only. They never call a tokenizer or the network, so they are
cheap enough to run on every message each round.

The overhead constants are tuning values, not provider contracts. Adjust
them if a provider's real tokenizer disagrees badly.
"""

import json
from typing import Any

from jot_core.messages import Message, ToolDefinition

CHARS_PER_TOKEN = 4

# Role markers and delimiters around each message.
MESSAGE_OVERHEAD = 4
# Framing around each tool call inside an assistant message.
TOOL_CALL_OVERHEAD = 4
# Framing around the tool_call_id of a result message.
TOOL_RESULT_OVERHEAD = 2
# Framing around each tool definition in the request.
TOOL_DEFINITION_OVERHEAD = 10


def estimate_tokens(text: str) -> int:
    """Return a rough token count for a string (ceil of chars / 4)."""
    if not text:
        return 0
    return (len(text) + CHARS_PER_TOKEN - 1) // CHARS_PER_TOKEN


def _estimate_json_tokens(value: Any) -> int:
    """Estimate the tokens of a value's compact JSON form, 0 if unserializable."""
    try:
        encoded = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        return 0
    return estimate_tokens(encoded)


def estimate_message_tokens(message: Message) -> int:
    """Estimate the tokens a single message occupies in a request.

    Accounts for content, each tool call's name and arguments, the
    tool_call_id of result messages, and fixed framing overheads.
    """
    tokens = MESSAGE_OVERHEAD
    tokens += estimate_tokens(message.content)
    for tool_call in message.tool_calls:
        tokens += estimate_tokens(tool_call.name)
        tokens += _estimate_json_tokens(tool_call.params)
        tokens += TOOL_CALL_OVERHEAD
    if message.tool_call_id:
        tokens += estimate_tokens(message.tool_call_id) + TOOL_RESULT_OVERHEAD
    return tokens


def estimate_messages_tokens(messages: list[Message]) -> int:
    """Estimate the total tokens of a list of messages."""
    return sum(estimate_message_tokens(m) for m in messages)


def estimate_tools_tokens(tools: list[ToolDefinition]) -> int:
    """Estimate the tokens consumed by a tool catalog.

    Tool schemas are sent as JSON with every request, so they count
    against the context window just like messages do.
    """
    total = 0
    for tool in tools:
        total += estimate_tokens(tool.name)
        total += estimate_tokens(tool.description)
        total += _estimate_json_tokens(tool.parameters)
        total += TOOL_DEFINITION_OVERHEAD
    return total
