"""API dependencies for FastAPI dependency injection."""

from app.api.dependencies.services import (
    get_app_config,
    get_container,
    get_context_service,
    get_metrics_provider,
)

__all__ = [
    "get_app_config",
    "get_container",
    "get_context_service",
    "get_metrics_provider",
]
