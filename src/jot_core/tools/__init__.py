from jot_core.tools.builtin import GET_TIME, get_time, register_builtin_tools
from jot_core.tools.dispatcher import FunctionToolDispatcher, error_payload
from jot_core.tools.params import get_int, get_string
from jot_core.tools.protocol import ToolDispatcher

__all__ = [
    "FunctionToolDispatcher",
    "GET_TIME",
    "ToolDispatcher",
    "error_payload",
    "get_int",
    "get_string",
    "get_time",
    "register_builtin_tools",
]
