"""Health check router reporting process and execution context state.

Provides:
- Uptime, environment and version
- Process memory (MB) and CPU time (ms)
- Whether an execution context is active for the calling request
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from app.api.dependencies import get_app_config, get_context_service, get_metrics_provider
from app.api.exceptions import MetricsUnavailableError
from app.api.models.responses import ContextInfo, HealthResponse, MemoryInfo, SystemInfo
from app.config import AppConfig
from app.context.service import ContextService
from app.core.logging_utils import get_logger
from app.services.system_metrics import SystemMetricsProvider

logger = get_logger(__name__)

router = APIRouter()

_BYTES_PER_MB = 1024 * 1024


def _to_mb(value: int) -> int:
    return round(value / _BYTES_PER_MB)


def build_health_snapshot(
    config: AppConfig,
    context_service: ContextService,
    metrics: SystemMetricsProvider,
) -> HealthResponse:
    """Collect the health snapshot; reads only, never touches the context binding."""
    memory = metrics.memory_usage()
    cpu = metrics.cpu_usage()
    used = _to_mb(memory.heap_used)
    total = _to_mb(memory.heap_total)

    return HealthResponse(
        uptime=metrics.uptime_seconds(),
        environment=config.app.environment,
        version=config.app.version,
        memory=MemoryInfo(
            used=used,
            total=total,
            free=total - used,
            external=_to_mb(memory.external),
        ),
        system=SystemInfo(
            platform=metrics.platform(),
            python_version=metrics.runtime_version(),
            pid=metrics.pid(),
            cpu_usage=round((cpu.user + cpu.system) / 1000),
        ),
        context=ContextInfo(
            active=context_service.get_context() is not None,
            execution_id=context_service.get_execution_id(),
        ),
    )


@router.get("/health")
async def health_check(
    config: Annotated[AppConfig, Depends(get_app_config)],
    context_service: Annotated[ContextService, Depends(get_context_service)],
    metrics: Annotated[SystemMetricsProvider, Depends(get_metrics_provider)],
) -> dict[str, Any]:
    """Health check endpoint."""
    try:
        snapshot = build_health_snapshot(config, context_service, metrics)
    except Exception as exc:
        logger.exception("health_check_failed", extra={"error": str(exc)})
        raise MetricsUnavailableError() from exc

    return snapshot.model_dump(by_alias=True, exclude_none=True)
