"""Accessor service over the execution context store.

Everything outside this package reads and writes the current context through
:class:`ContextService`; the raw store is never handed out.
"""

from __future__ import annotations

import contextlib
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

from app.context.exceptions import InvalidContextError
from app.context.models import RequestContext
from app.context.store import ExecutionContextStore
from app.core.logging_utils import get_logger

logger = get_logger(__name__)

R = TypeVar("R")
P = ParamSpec("P")


class ContextService:
    """Get, set and run-with primitives for the per-task :class:`RequestContext`."""

    def __init__(self, store: ExecutionContextStore[RequestContext] | None = None) -> None:
        self._store = store or ExecutionContextStore[RequestContext]()

    def set_context(self, context: RequestContext) -> None:
        """Bind ``context`` for the remainder of the calling task.

        Raises:
            InvalidContextError: If ``context`` is missing or has an empty execution ID.
        """
        self._validate(context, operation="set_context")
        self._store.enter_unscoped(context)
        self._emit("context_set", operation="set_context", execution_id=context.execution_id)

    def get_context(self) -> RequestContext | None:
        return self._store.current()

    def get_execution_id(self) -> str | None:
        context = self._store.current()
        if context is None or not context.execution_id:
            return None
        return context.execution_id

    def is_context_active(self) -> bool:
        return self._store.current() is not None

    def run_with_context(
        self,
        context: RequestContext,
        body: Callable[P, R],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> R:
        """Run a synchronous ``body`` with ``context`` current.

        The context is validated before any scope is entered, so an invalid
        context never reaches ``body``. Errors raised by ``body`` propagate
        unchanged and the previous context is restored either way.
        """
        self._validate(context, operation="run_with_context")
        self._emit(
            "context_scope_entered", operation="run_with_context", execution_id=context.execution_id
        )
        try:
            return self._store.run_scoped(context, body, *args, **kwargs)
        finally:
            self._emit(
                "context_scope_exited",
                operation="run_with_context",
                execution_id=context.execution_id,
            )

    async def run_with_context_async(
        self,
        context: RequestContext,
        body: Callable[P, Awaitable[R]],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> R:
        """Await ``body`` with ``context`` current for its whole dynamic extent."""
        self._validate(context, operation="run_with_context_async")
        self._emit(
            "context_scope_entered",
            operation="run_with_context_async",
            execution_id=context.execution_id,
        )
        try:
            return await self._store.run_scoped_async(context, body, *args, **kwargs)
        finally:
            self._emit(
                "context_scope_exited",
                operation="run_with_context_async",
                execution_id=context.execution_id,
            )

    def _validate(self, context: Any, *, operation: str) -> None:
        if not isinstance(context, RequestContext) or not context.execution_id:
            self._emit("context_invalid", operation=operation, execution_id=None)
            raise InvalidContextError(context=context)

    @staticmethod
    def _emit(event: str, *, operation: str, execution_id: str | None) -> None:
        # Diagnostics must never change the outcome of the operation.
        with contextlib.suppress(Exception):
            logger.debug(event, extra={"operation": operation, "execution_id": execution_id})
