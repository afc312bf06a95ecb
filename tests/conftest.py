"""Pytest configuration and shared fixtures.

This module provides common fixtures for all tests.
"""

from __future__ import annotations

import re
from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.main import create_app
from app.config import (
    AppConfig,
    AppSection,
    ContextConfig,
    CronConfig,
    LoggingConfig,
    ServerConfig,
)
from app.context.service import ContextService
from app.di.container import Container

UUID4_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


def make_config(
    *,
    environment: str = "test",
    version: str = "1.0.0",
    cron_enabled: bool = False,
    cron_interval: int = 30,
    log_level: str = "info",
) -> AppConfig:
    return AppConfig(
        app=AppSection(name="Execution Context Service", environment=environment, version=version),
        server=ServerConfig(host="localhost", port=3000),
        logging=LoggingConfig(level=log_level, json_format=True),
        cron=CronConfig(enabled=cron_enabled, interval_minutes=cron_interval),
        context=ContextConfig(timeout_ms=30000),
    )


@pytest.fixture
def config_factory() -> Callable[..., AppConfig]:
    return make_config


@pytest.fixture
def app_config() -> AppConfig:
    return make_config()


@pytest.fixture
def container(app_config: AppConfig) -> Container:
    return Container(app_config)


@pytest.fixture
def context_service() -> ContextService:
    return ContextService()


@pytest.fixture
def app(container: Container) -> FastAPI:
    return create_app(container=container)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    # No context manager: the lifespan (and the scheduler) stays off in API tests.
    return TestClient(app)
