from jot_core.agent import (
    DEFAULT_SYSTEM_PROMPT,
    MAX_ROUNDS_TEXT,
    Agent,
    TurnResult,
)
from jot_core.config import JotConfig
from jot_core.errors import JotError, TransportError
from jot_core.messages import ChatResponse, Message, ToolCall, ToolDefinition
from jot_core.sessions import SessionStore
from jot_core.tokens import (
    estimate_message_tokens,
    estimate_messages_tokens,
    estimate_tokens,
    estimate_tools_tokens,
)
from jot_core.tools import (
    FunctionToolDispatcher,
    ToolDispatcher,
    register_builtin_tools,
)
from jot_core.transports import (
    AnthropicTransport,
    ChatTransport,
    OpenAITransport,
    create_transport,
)
from jot_core.trimming import MessageGroup, group_messages, trim_messages

__all__ = [
    # Agent loop
    "Agent",
    "TurnResult",
    "DEFAULT_SYSTEM_PROMPT",
    "MAX_ROUNDS_TEXT",
    "SessionStore",
    # Config
    "JotConfig",
    # Errors
    "JotError",
    "TransportError",
    # Messages
    "Message",
    "ToolCall",
    "ToolDefinition",
    "ChatResponse",
    # Token estimation
    "estimate_tokens",
    "estimate_message_tokens",
    "estimate_messages_tokens",
    "estimate_tools_tokens",
    # Trimming
    "MessageGroup",
    "group_messages",
    "trim_messages",
    # Tools
    "ToolDispatcher",
    "FunctionToolDispatcher",
    "register_builtin_tools",
    # Transports
    "ChatTransport",
    "AnthropicTransport",
    "OpenAITransport",
    "create_transport",
]
