from __future__ import annotations

import pytest

from cortex_connector.metrics import ConnectorMetricsCollector
from cortex_connector.models import HealthValue

from tests.unit.helpers.factories import StubInstanceClient, make_pool


@pytest.fixture
def metrics() -> ConnectorMetricsCollector:
    return ConnectorMetricsCollector()


@pytest.fixture
def healthy_pool():
    """Two healthy instances both offering the same analyzers."""
    return make_pool(
        StubInstanceClient("cortex-a", analyzers=["MaxMind_GeoIP", "VirusTotal_GetReport"]),
        StubInstanceClient("cortex-b", analyzers=["MaxMind_GeoIP", "VirusTotal_GetReport"]),
    )


@pytest.fixture
def degraded_pool():
    """One healthy, one reporting an error, one unreachable."""
    return make_pool(
        StubInstanceClient("cortex-a"),
        StubInstanceClient("cortex-b", status="ERROR", health=HealthValue.ERROR),
        StubInstanceClient("cortex-c", error=ConnectionError("connection refused")),
    )
