"""Tools that need no external storage."""

from datetime import UTC, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from jot_core.messages import ToolDefinition
from jot_core.tools.dispatcher import FunctionToolDispatcher
from jot_core.tools.params import get_int, get_string

GET_TIME = ToolDefinition(
    name="get_time",
    description=(
        "Get the current local and UTC time, date and weekday. Use before "
        "setting due dates, calculating durations, or creating reminders. "
        "Pass offset_days to get the date a number of days from now."
    ),
    parameters={
        "type": "object",
        "properties": {
            "timezone": {
                "type": "string",
                "description": "IANA timezone for the local time, e.g. Europe/Berlin",
            },
            "offset_days": {
                "type": "integer",
                "description": "Days to add to the current time (negative for the past)",
            },
        },
    },
)


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone: {name}") from e


def get_time(params: dict[str, Any], now: datetime | None = None) -> dict[str, str]:
    """Return the current time in local and UTC forms.

    Args:
        params: Optional ``timezone`` (IANA name; the host zone if absent)
            and ``offset_days``.
        now: Instant to report instead of the current time.

    Raises:
        ValueError: If the timezone is not known.
    """
    instant = now or datetime.now(UTC)
    offset_days, ok = get_int(params, "offset_days")
    if ok:
        instant += timedelta(days=offset_days)

    zone_name, ok = get_string(params, "timezone")
    local = instant.astimezone(_zone(zone_name)) if ok and zone_name else instant.astimezone()
    return {
        "local": local.isoformat(timespec="seconds"),
        "utc": local.astimezone(UTC).isoformat(timespec="seconds"),
        "date": local.strftime("%Y-%m-%d"),
        "day": local.strftime("%A"),
    }


def register_builtin_tools(dispatcher: FunctionToolDispatcher) -> FunctionToolDispatcher:
    """Register the built-in tools on a dispatcher and return it."""
    dispatcher.register(GET_TIME, get_time)
    return dispatcher
