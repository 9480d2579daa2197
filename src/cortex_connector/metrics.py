from __future__ import annotations

from collections import defaultdict
from typing import Dict

from prometheus_client import Counter, Gauge, Histogram


_INSTANCE_UP = Gauge(
    "cortex_instance_up",
    "Instance status from the last poll (1 up, 0 degraded or down)",
    labelnames=["instance"],
)
_FANOUT_DURATION = Histogram(
    "cortex_fanout_duration_ms",
    "Duration of a fan-out across all instances in ms",
    labelnames=["operation"],
    buckets=(10, 50, 100, 200, 500, 1000, 3000, 5000, 10000),
)
_JOBS_SUBMITTED = Counter(
    "cortex_jobs_submitted_total",
    "Job submissions by target instance",
    labelnames=["instance", "status"],
)


class ConnectorMetricsCollector:
    def __init__(self) -> None:
        # In-memory mirrors to provide summaries without scraping Prometheus
        self._instance_states: Dict[str, bool] = {}
        self._jobs_submitted: Dict[str, int] = defaultdict(int)

    def record_instance_state(self, instance: str, is_up: bool) -> None:
        _INSTANCE_UP.labels(instance=instance).set(1 if is_up else 0)
        self._instance_states[instance] = is_up

    def record_fanout(self, operation: str, duration_ms: float) -> None:
        _FANOUT_DURATION.labels(operation=operation).observe(duration_ms)

    def record_job_submission(self, instance: str, success: bool) -> None:
        status = "success" if success else "failed"
        _JOBS_SUBMITTED.labels(instance=instance, status=status).inc()
        self._jobs_submitted[f"{instance}:{status}"] += 1

    def get_instance_states(self) -> Dict[str, bool]:
        return dict(self._instance_states)

    def get_total_jobs_submitted(self) -> int:
        return sum(self._jobs_submitted.values())
