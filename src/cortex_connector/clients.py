"""HTTP clients for the analysis-engine instances behind the connector."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import CortexInstanceConfig
from .errors import ConnectorError, InstanceUnreachableError, NotFoundError
from .models import (
    Analyzer,
    HealthValue,
    InstanceStatus,
    Job,
    JobRequest,
    StatusDocument,
)

logger = logging.getLogger(__name__)

_AUTH_REJECTED = (401, 403)

_STATUS_TO_HEALTH = {
    InstanceStatus.OK.value: HealthValue.OK,
    InstanceStatus.WARNING.value: HealthValue.WARNING,
}


class InstanceClient(ABC):
    """Capability wrapping one backend instance.

    ``status`` and ``health`` never raise on unreachability: a down instance
    reports an ERROR document / Error health instead. Fan-out lookups return
    ``None`` or an empty list for an instance that cannot be reached; targeted
    calls (``submit_job``, ``get_job_report``) raise InstanceUnreachableError.
    """

    name: str

    @abstractmethod
    async def status(self) -> StatusDocument: ...

    @abstractmethod
    async def health(self) -> HealthValue: ...

    @abstractmethod
    async def submit_job(self, request: JobRequest) -> Job: ...

    @abstractmethod
    async def get_job(self, job_id: str) -> Optional[Job]: ...

    @abstractmethod
    async def get_job_report(self, job_id: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def list_analyzers(self) -> List[Analyzer]: ...

    @abstractmethod
    async def analyzers_for(self, data_type: str) -> List[Analyzer]: ...

    @abstractmethod
    async def get_analyzer(self, analyzer_id: str) -> Optional[Analyzer]: ...

    async def aclose(self) -> None:
        return None


class CortexClient(InstanceClient):
    """Client for one Cortex instance over its REST API."""

    def __init__(
        self,
        config: CortexInstanceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.name = config.name
        self.url = config.url
        self.timeout_ms = config.timeout_ms
        self.max_retries = max(int(config.max_retries), 0)
        headers = {"Accept": "application/json"}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = httpx.AsyncClient(
            base_url=config.url,
            headers=headers,
            timeout=config.timeout_ms / 1000,
            verify=config.verify_ssl,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying 5xx and transport errors with backoff.

        Raises InstanceUnreachableError once every attempt has failed.
        """

        attempts = self.max_retries + 1
        backoff_base = 0.05  # 50ms base
        last_error = "unknown_error"
        for i in range(attempts):
            try:
                resp = await self._client.request(method, path, **kwargs)
            except httpx.TimeoutException:
                last_error = "timeout"
            except httpx.HTTPError as exc:  # network errors
                last_error = str(exc) or exc.__class__.__name__
            else:
                if resp.status_code < 500:
                    return resp
                last_error = f"HTTP {resp.status_code}"
            if i < attempts - 1:
                await asyncio.sleep(backoff_base * (2**i))
        raise InstanceUnreachableError(self.name, last_error)

    async def status(self) -> StatusDocument:
        try:
            resp = await self._request("GET", "/api/status")
        except InstanceUnreachableError as exc:
            logger.warning("Cortex instance %s unreachable: %s", self.name, exc.reason)
            return self._status_document(InstanceStatus.ERROR.value, error=exc.reason)

        if resp.status_code in _AUTH_REJECTED:
            return self._status_document(
                InstanceStatus.WARNING.value, error="authentication rejected"
            )
        if not resp.is_success:
            return self._status_document(
                InstanceStatus.ERROR.value, error=f"HTTP {resp.status_code}"
            )
        try:
            data = resp.json()
        except ValueError:
            data = {}
        versions = data.get("versions") if isinstance(data, dict) else None
        version = versions.get("Cortex", "") if isinstance(versions, dict) else ""
        return self._status_document(InstanceStatus.OK.value, version=str(version))

    async def health(self) -> HealthValue:
        document = await self.status()
        return _STATUS_TO_HEALTH.get(document.status, HealthValue.ERROR)

    async def submit_job(self, request: JobRequest) -> Job:
        path = f"/api/analyzer/{quote(request.analyzer_id, safe='')}/run"
        resp = await self._request("POST", path, json=request.to_payload())
        if resp.status_code == 404:
            raise NotFoundError("analyzer", request.analyzer_id)
        if not resp.is_success:
            raise ConnectorError(
                f"job submission to {self.name} failed with HTTP {resp.status_code}",
                error_code="JOB_SUBMISSION_FAILED",
                details={"instance": self.name, "status_code": resp.status_code},
            )
        job = self._job(self._json(resp, path))
        job.artifact_id = request.artifact_id
        return job

    async def get_job(self, job_id: str) -> Optional[Job]:
        data = await self._lookup(f"/api/job/{quote(job_id, safe='')}")
        return self._job(data) if data is not None else None

    async def get_job_report(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a job report from this instance only.

        Returns None when the instance has no report for the job; raises
        InstanceUnreachableError when the instance cannot be reached.
        """

        path = f"/api/job/{quote(job_id, safe='')}/report"
        resp = await self._request("GET", path)
        if resp.status_code == 404:
            return None
        if not resp.is_success:
            raise ConnectorError(
                f"report fetch from {self.name} failed with HTTP {resp.status_code}",
                error_code="INVALID_RESPONSE",
                details={"instance": self.name, "status_code": resp.status_code},
            )
        data = self._json(resp, path)
        report = data.get("report", data) if isinstance(data, dict) else data
        return report if isinstance(report, dict) else {"report": report}

    async def list_analyzers(self) -> List[Analyzer]:
        data = await self._lookup("/api/analyzer", params={"range": "all"})
        return self._analyzers(data)

    async def analyzers_for(self, data_type: str) -> List[Analyzer]:
        data = await self._lookup(f"/api/analyzer/type/{quote(data_type, safe='')}")
        return self._analyzers(data)

    async def get_analyzer(self, analyzer_id: str) -> Optional[Analyzer]:
        data = await self._lookup(f"/api/analyzer/{quote(analyzer_id, safe='')}")
        if data is None:
            return None
        analyzer = Analyzer.model_validate(data)
        analyzer.instance_ids = [self.name]
        return analyzer

    async def _lookup(self, path: str, **kwargs: Any) -> Any:
        """GET a resource, returning None when missing or unreachable."""

        try:
            resp = await self._request("GET", path, **kwargs)
        except InstanceUnreachableError as exc:
            logger.warning(
                "Lookup %s on %s skipped, instance unreachable: %s",
                path,
                self.name,
                exc.reason,
            )
            return None
        if resp.status_code == 404:
            return None
        if not resp.is_success:
            logger.warning("Lookup %s on %s returned HTTP %s", path, self.name, resp.status_code)
            return None
        return self._json(resp, path)

    def _json(self, resp: httpx.Response, path: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise ConnectorError(
                f"{self.name} returned a non-JSON body for {path}",
                error_code="INVALID_RESPONSE",
                details={"instance": self.name, "status_code": resp.status_code},
            ) from exc

    def _status_document(self, status: str, version: str = "", **extra: Any) -> StatusDocument:
        return StatusDocument(name=self.name, version=version, status=status, url=self.url, **extra)

    def _job(self, data: Dict[str, Any]) -> Job:
        job = Job.model_validate(data)
        job.instance_id = self.name
        if job.artifact_id is None and data.get("label"):
            job.artifact_id = str(data["label"])
        return job

    def _analyzers(self, data: Any) -> List[Analyzer]:
        if not isinstance(data, list):
            return []
        analyzers = []
        for item in data:
            analyzer = Analyzer.model_validate(item)
            analyzer.instance_ids = [self.name]
            analyzers.append(analyzer)
        return analyzers
