from __future__ import annotations

from .exceptions import ContextError, InvalidContextError
from .models import RequestContext, generate_execution_id
from .service import ContextService
from .store import ExecutionContextStore

__all__ = [
    "ContextError",
    "ContextService",
    "ExecutionContextStore",
    "InvalidContextError",
    "RequestContext",
    "generate_execution_id",
]
