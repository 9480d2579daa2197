"""Connector facade wiring the pool, aggregators and router together."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from .aggregator import HealthAggregator, StatusAggregator
from .config import Settings
from .metrics import ConnectorMetricsCollector
from .models import HealthValue
from .pool import InstancePool
from .router import JobRouter

logger = logging.getLogger(__name__)


class Connector(ABC):
    """Contract consumed by system-wide status and health reporting."""

    name: str

    @abstractmethod
    async def status(self) -> Dict[str, Any]: ...

    @abstractmethod
    async def health(self) -> HealthValue: ...


class CortexConnector(Connector):
    """Connector to a pool of Cortex instances."""

    name = "cortex"

    def __init__(
        self, pool: InstancePool, metrics: ConnectorMetricsCollector | None = None
    ) -> None:
        self.pool = pool
        self.metrics = metrics
        self.status_aggregator = StatusAggregator(pool, metrics)
        self.health_aggregator = HealthAggregator(pool, metrics)
        self.router = JobRouter(pool, metrics)

    @classmethod
    def from_settings(
        cls, settings: Settings, metrics: ConnectorMetricsCollector | None = None
    ) -> "CortexConnector":
        pool = InstancePool.from_settings(settings)
        logger.info(
            "Cortex connector (%s) configured with %d instance(s): %s",
            settings.environment,
            len(pool),
            ", ".join(client.name for client in pool.instances()) or "none",
        )
        return cls(pool, metrics or ConnectorMetricsCollector())

    async def status(self) -> Dict[str, Any]:
        composite = await self.status_aggregator.get_composite_status()
        return composite.model_dump()

    async def health(self) -> HealthValue:
        return await self.health_aggregator.get_composite_health()

    async def aclose(self) -> None:
        await self.pool.aclose()

    async def __aenter__(self) -> "CortexConnector":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
