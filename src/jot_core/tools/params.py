"""Helpers for reading loosely typed tool arguments.

Models send arguments as decoded JSON, so integers may arrive as floats
(``3.0``) or strings (``"3"``). These helpers normalize the common cases
and report whether a usable value was present.
"""

from typing import Any


def get_int(params: dict[str, Any] | None, key: str) -> tuple[int, bool]:
    """Read an integer argument.

    Returns:
        ``(value, True)`` if present and integral, else ``(0, False)``.
    """
    if not params or key not in params:
        return 0, False
    value = params[key]
    if isinstance(value, bool):
        return 0, False
    if isinstance(value, int):
        return value, True
    if isinstance(value, float):
        if value.is_integer():
            return int(value), True
        return 0, False
    if isinstance(value, str):
        try:
            return int(value.strip()), True
        except ValueError:
            return 0, False
    return 0, False


def get_string(params: dict[str, Any] | None, key: str) -> tuple[str, bool]:
    """Read a string argument.

    Returns:
        ``(value, True)`` if present and a string, else ``("", False)``.
    """
    if not params or key not in params:
        return "", False
    value = params[key]
    if isinstance(value, str):
        return value, True
    return "", False

