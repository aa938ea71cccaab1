"""Exceptions raised by jot_core."""


class JotError(Exception):
    """Base class for jot_core errors."""


class TransportError(JotError):
    """A chat transport failed to produce a response.

    Raised for network failures, non-success HTTP statuses and unparseable
    provider responses. Fatal to the current turn; no retry happens inside
    the agent loop.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
