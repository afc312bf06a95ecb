"""Response bodies for the HTTP API.

Success bodies are the bare payload models; errors share one envelope.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from app.api.exceptions import ErrorCode, ErrorType
from app.core.time_utils import utc_now_iso


class MetaInfo(BaseModel):
    execution_id: str = Field(default="", serialization_alias="executionId")
    timestamp: str = Field(default_factory=utc_now_iso)


class ErrorDetail(BaseModel):
    code: str
    error_type: str = Field(default=ErrorType.INTERNAL.value, serialization_alias="errorType")
    message: str
    retryable: bool = False
    details: dict[str, Any] | None = None
    execution_id: str = Field(default="", serialization_alias="executionId")


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
    meta: MetaInfo = Field(default_factory=MetaInfo)


class ExecutionIdResponse(BaseModel):
    execution_id: str = Field(serialization_alias="executionId")


class MemoryInfo(BaseModel):
    """Process memory in whole megabytes."""

    used: int
    total: int
    free: int
    external: int


class SystemInfo(BaseModel):
    platform: str
    python_version: str = Field(serialization_alias="pythonVersion")
    pid: int
    cpu_usage: int = Field(serialization_alias="cpuUsage", description="CPU time in ms")


class ContextInfo(BaseModel):
    active: bool
    execution_id: str | None = Field(default=None, serialization_alias="executionId")


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    timestamp: str = Field(default_factory=utc_now_iso)
    uptime: int
    environment: str
    version: str
    memory: MemoryInfo
    system: SystemInfo
    context: ContextInfo


def make_error(
    code: ErrorCode,
    message: str,
    *,
    error_type: ErrorType = ErrorType.INTERNAL,
    retryable: bool = False,
    details: dict[str, Any] | None = None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code.value,
        error_type=error_type.value,
        message=message,
        retryable=retryable,
        details=details,
    )


def error_response(detail: ErrorDetail, *, execution_id: str | None = None) -> dict[str, Any]:
    """Wrap ``detail`` in the envelope, stamping the request's execution ID on both parts."""
    exec_id = execution_id or ""
    envelope = ErrorResponse(
        error=detail.model_copy(update={"execution_id": exec_id}),
        meta=MetaInfo(execution_id=exec_id),
    )
    return envelope.model_dump(by_alias=True)
