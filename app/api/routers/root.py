"""Echo endpoint returning the current request's execution ID."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from app.api.dependencies import get_context_service
from app.api.exceptions import ContextNotFoundError
from app.api.models.responses import ExecutionIdResponse
from app.context.service import ContextService

router = APIRouter()


@router.get("/")
async def get_execution_id(
    context_service: Annotated[ContextService, Depends(get_context_service)],
) -> dict[str, Any]:
    execution_id = context_service.get_execution_id()
    if not execution_id:
        raise ContextNotFoundError()
    return ExecutionIdResponse(execution_id=execution_id).model_dump(by_alias=True)
