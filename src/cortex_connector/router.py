from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from .clients import InstanceClient
from .errors import ConnectorError, MissingFieldError, NotFoundError
from .metrics import ConnectorMetricsCollector
from .models import Analyzer, Job, JobRequest
from .pool import InstancePool

logger = logging.getLogger(__name__)


def _none(_client: InstanceClient, _exc: BaseException) -> None:
    return None


def _empty(_client: InstanceClient, _exc: BaseException) -> List[Analyzer]:
    return []


def _require(value: Optional[str], field: str) -> None:
    if value is None or not value.strip():
        raise MissingFieldError(field)


class JobRouter:
    """Route job and analyzer operations to the instance(s) that own them.

    Submission without an explicit instance goes to the first instance, in
    configuration order, that offers the requested analyzer.
    """

    def __init__(
        self, pool: InstancePool, metrics: ConnectorMetricsCollector | None = None
    ) -> None:
        self.pool = pool
        self.metrics = metrics

    async def submit_job(
        self,
        analyzer_id: Optional[str],
        artifact_id: Optional[str],
        instance_id: Optional[str] = None,
        **artifact: Any,
    ) -> Job:
        _require(analyzer_id, "analyzerId")
        _require(artifact_id, "artifactId")
        request = JobRequest(
            analyzer_id=analyzer_id,
            artifact_id=artifact_id,
            instance_id=instance_id,
            **artifact,
        )

        if instance_id:
            client = self.pool.lookup(instance_id)
        else:
            client = await self.select_instance(analyzer_id)

        logger.info(
            "Submitting analyzer %s on artifact %s to instance %s",
            analyzer_id,
            artifact_id,
            client.name,
        )
        try:
            job = await client.submit_job(request)
        except ConnectorError:
            if self.metrics:
                self.metrics.record_job_submission(client.name, success=False)
            raise
        if self.metrics:
            self.metrics.record_job_submission(client.name, success=True)
        return job

    async def select_instance(self, analyzer_id: str) -> InstanceClient:
        """Pick the first instance in configuration order offering the analyzer."""

        found = await self._fan_out("select_instance", lambda c: c.get_analyzer(analyzer_id), _none)
        for client, analyzer in zip(self.pool.instances(), found):
            if analyzer is not None:
                return client
        raise NotFoundError("analyzer", analyzer_id)

    async def get_job(self, job_id: str) -> Job:
        _, job = await self._locate_job(job_id)
        return job

    async def get_job_report(self, job_id: str) -> Dict[str, Any]:
        client, _ = await self._locate_job(job_id)
        report = await client.get_job_report(job_id)
        if report is None:
            raise NotFoundError("report", job_id)
        return report

    async def list_analyzers(self) -> List[Analyzer]:
        per_instance = await self._fan_out("list_analyzers", lambda c: c.list_analyzers(), _empty)
        return [analyzer for analyzers in per_instance for analyzer in analyzers]

    async def analyzers_for(self, data_type: str) -> List[Analyzer]:
        per_instance = await self._fan_out(
            "analyzers_for", lambda c: c.analyzers_for(data_type), _empty
        )
        return [analyzer for analyzers in per_instance for analyzer in analyzers]

    async def get_analyzer(self, analyzer_id: str) -> Analyzer:
        found = await self._fan_out("get_analyzer", lambda c: c.get_analyzer(analyzer_id), _none)
        merged: Optional[Analyzer] = None
        for analyzer in found:
            if analyzer is None:
                continue
            if merged is None:
                merged = analyzer.model_copy(deep=True)
                continue
            for instance_id in analyzer.instance_ids:
                if instance_id not in merged.instance_ids:
                    merged.instance_ids.append(instance_id)
        if merged is None:
            raise NotFoundError("analyzer", analyzer_id)
        return merged

    async def _locate_job(self, job_id: str) -> tuple[InstanceClient, Job]:
        _require(job_id, "jobId")
        found = await self._fan_out("get_job", lambda c: c.get_job(job_id), _none)
        for client, job in zip(self.pool.instances(), found):
            if job is not None:
                return client, job
        raise NotFoundError("job", job_id)

    async def _fan_out(self, operation: str, call, on_error) -> list:
        start = time.perf_counter()
        results = await self.pool.fan_out(call, on_error)
        if self.metrics:
            self.metrics.record_fanout(operation, (time.perf_counter() - start) * 1000)
        return results
