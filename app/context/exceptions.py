"""Errors raised by the execution context layer."""

from __future__ import annotations

from typing import Any


class ContextError(Exception):
    """Base for all execution context errors."""


class InvalidContextError(ContextError):
    """Raised when a context is missing or carries no execution identifier."""

    def __init__(
        self,
        message: str = "Context must carry a non-empty execution ID",
        *,
        context: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
