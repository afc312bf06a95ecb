"""Dependency injection container for wiring components.

Every long-lived service is constructed here once and handed to the pieces
that need it; nothing is looked up through module-level globals.
"""

from __future__ import annotations

from app.config import AppConfig
from app.context.models import RequestContext
from app.context.service import ContextService
from app.context.store import ExecutionContextStore
from app.services.scheduler import SchedulerService
from app.services.system_metrics import SystemMetricsProvider


class Container:
    """Dependency injection container.

    Example:
        ```python
        container = Container(load_config())
        app = create_app(container.config, container=container)
        ```

    """

    def __init__(
        self,
        config: AppConfig,
        *,
        context_store: ExecutionContextStore[RequestContext] | None = None,
        metrics_provider: SystemMetricsProvider | None = None,
    ) -> None:
        self.config = config
        self._context_store = context_store
        self._metrics_provider = metrics_provider

        # Lazy-initialized components
        self._context_service: ContextService | None = None
        self._scheduler: SchedulerService | None = None

    def context_store(self) -> ExecutionContextStore[RequestContext]:
        if self._context_store is None:
            self._context_store = ExecutionContextStore[RequestContext]()
        return self._context_store

    def context_service(self) -> ContextService:
        """Get or create the context accessor service.

        Returns:
            Singleton ContextService bound to the container's store.

        """
        if self._context_service is None:
            self._context_service = ContextService(self.context_store())
        return self._context_service

    def metrics_provider(self) -> SystemMetricsProvider:
        if self._metrics_provider is None:
            self._metrics_provider = SystemMetricsProvider()
        return self._metrics_provider

    def scheduler(self) -> SchedulerService:
        """Get or create the scheduler service for the periodic job."""
        if self._scheduler is None:
            self._scheduler = SchedulerService(self.config.cron, self.context_service())
        return self._scheduler
