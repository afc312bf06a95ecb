"""FastAPI middleware for request processing."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from app.context.models import RequestContext
from app.context.service import ContextService

EXECUTION_ID_HEADER = "X-Execution-ID"


class ExecutionContextMiddleware:
    """Run every request inside its own execution context.

    A fresh UUID4 is minted per request and the rest of the middleware and
    routing chain is awaited inside that scope. Errors raised downstream are
    left to the registered exception handlers.
    """

    def __init__(self, context_service: ContextService) -> None:
        self.context_service = context_service

    async def __call__(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        context = RequestContext.new()
        request.state.execution_id = context.execution_id

        response = await self.context_service.run_with_context_async(context, call_next, request)
        response.headers[EXECUTION_ID_HEADER] = context.execution_id
        return response
