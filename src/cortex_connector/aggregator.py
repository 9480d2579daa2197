"""Reduction of per-instance status and health into one system-wide value.

The status and health reductions follow different precedence rules and are
kept separate on purpose:

- status: ``OK`` only when every instance says OK, ``WARNING`` when OK is
  mixed with anything else, ``ERROR`` whenever no instance says OK.
- health: ``Ok`` only when all are Ok, ``Warning`` when Ok is mixed with
  anything (even Error), ``Error`` when Error is present without Ok, and
  ``Warning`` for everything else (only Warning, or no instances at all).
"""

from __future__ import annotations

import logging
import time
from typing import Iterable

from .clients import InstanceClient
from .metrics import ConnectorMetricsCollector
from .models import (
    CompositeStatus,
    HealthValue,
    InstanceStatus,
    StatusDocument,
)
from .pool import InstancePool

logger = logging.getLogger(__name__)


def reduce_status(statuses: Iterable[str]) -> str:
    """Reduce instance status strings into the composite status string."""

    distinct = set(statuses)
    if InstanceStatus.OK.value in distinct:
        if len(distinct) > 1:
            return InstanceStatus.WARNING.value
        return InstanceStatus.OK.value
    return InstanceStatus.ERROR.value


def reduce_health(values: Iterable[HealthValue]) -> HealthValue:
    """Reduce instance health values into the composite health value."""

    distinct = set(values)
    if HealthValue.OK in distinct:
        if len(distinct) > 1:
            return HealthValue.WARNING
        return HealthValue.OK
    if HealthValue.ERROR in distinct:
        return HealthValue.ERROR
    return HealthValue.WARNING


def _unreachable_status(client: InstanceClient, exc: BaseException) -> StatusDocument:
    return StatusDocument(
        name=client.name, status=InstanceStatus.ERROR.value, error=str(exc)
    )


def _unreachable_health(_client: InstanceClient, _exc: BaseException) -> HealthValue:
    return HealthValue.ERROR


class StatusAggregator:
    """Poll every instance's status and build the composite status document."""

    def __init__(
        self, pool: InstancePool, metrics: ConnectorMetricsCollector | None = None
    ) -> None:
        self.pool = pool
        self.metrics = metrics

    async def get_composite_status(self) -> CompositeStatus:
        start = time.perf_counter()
        documents = await self.pool.fan_out(
            lambda client: client.status(), _unreachable_status
        )
        composite = reduce_status(document.status for document in documents)
        if self.metrics:
            self.metrics.record_fanout("status", (time.perf_counter() - start) * 1000)
            for document in documents:
                self.metrics.record_instance_state(
                    document.name, document.status == InstanceStatus.OK.value
                )
        logger.debug("Composite status %s across %d instances", composite, len(documents))
        return CompositeStatus(enabled=True, servers=documents, status=composite)


class HealthAggregator:
    """Poll every instance's health and reduce it to one HealthValue."""

    def __init__(
        self, pool: InstancePool, metrics: ConnectorMetricsCollector | None = None
    ) -> None:
        self.pool = pool
        self.metrics = metrics

    async def get_composite_health(self) -> HealthValue:
        start = time.perf_counter()
        values = await self.pool.fan_out(
            lambda client: client.health(), _unreachable_health
        )
        if self.metrics:
            self.metrics.record_fanout("health", (time.perf_counter() - start) * 1000)
            for client, value in zip(self.pool.instances(), values):
                self.metrics.record_instance_state(client.name, value == HealthValue.OK)
        return reduce_health(values)
