"""FastAPI dependencies resolving services from the application container."""

from __future__ import annotations

from fastapi import Request

from app.config import AppConfig
from app.context.service import ContextService
from app.di.container import Container
from app.services.system_metrics import SystemMetricsProvider


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_app_config(request: Request) -> AppConfig:
    return get_container(request).config


def get_context_service(request: Request) -> ContextService:
    return get_container(request).context_service()


def get_metrics_provider(request: Request) -> SystemMetricsProvider:
    return get_container(request).metrics_provider()
