"""Task-local storage for the current execution context.

The store wraps a single :class:`contextvars.ContextVar`. asyncio copies the
current ``Context`` into every task it creates, so a binding made inside a
scope is visible to everything awaited or spawned from that scope, and is
invisible to unrelated tasks running on the same event loop.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generic, ParamSpec, TypeVar

T = TypeVar("T")
R = TypeVar("R")
P = ParamSpec("P")


class ExecutionContextStore(Generic[T]):
    """Binds a context value to the dynamic extent of a unit of work."""

    def __init__(self, name: str = "execution_context") -> None:
        self._var: ContextVar[T | None] = ContextVar(name, default=None)

    def current(self) -> T | None:
        """Return the context bound to the caller, or ``None`` if no scope is active."""
        return self._var.get()

    @contextmanager
    def scope(self, context: T) -> Iterator[T]:
        """Make ``context`` current until the block exits, then restore the previous value."""
        token = self._var.set(context)
        try:
            yield context
        finally:
            self._var.reset(token)

    def run_scoped(
        self, context: T, body: Callable[P, R], *args: P.args, **kwargs: P.kwargs
    ) -> R:
        with self.scope(context):
            return body(*args, **kwargs)

    async def run_scoped_async(
        self,
        context: T,
        body: Callable[P, Awaitable[R]],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> R:
        with self.scope(context):
            return await body(*args, **kwargs)

    def enter_unscoped(self, context: T) -> None:
        """Bind ``context`` for the rest of the calling task without a matching exit.

        The binding lives in the task's own ``Context`` copy, so it never leaks
        into the parent task or into sibling tasks.
        """
        self._var.set(context)
