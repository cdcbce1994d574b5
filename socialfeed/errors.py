from __future__ import annotations


class FieldValidationError(ValueError):
    """A single field failed its schema; ``message`` is safe to show to users."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class InternalError(Exception):
    """Unexpected failure behind a handler. Never rendered to the client."""


GENERIC_SERVER_MESSAGE = "Internal Server Error"
