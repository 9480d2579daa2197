from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthValue(str, Enum):
    """Coarse health classification of an instance or of the whole pool."""

    OK = "Ok"
    WARNING = "Warning"
    ERROR = "Error"


class InstanceStatus(str, Enum):
    """Conventional values of StatusDocument.status.

    Instances may report other strings; the status field stays free-form.
    """

    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"


class JobStatus(str, Enum):
    WAITING = "Waiting"
    IN_PROGRESS = "InProgress"
    SUCCESS = "Success"
    FAILURE = "Failure"
    DELETED = "Deleted"


class StatusDocument(BaseModel):
    """Snapshot of one instance's operational status, produced on every poll."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: str = ""
    status: str


class CompositeStatus(BaseModel):
    """System-wide status across every configured instance."""

    enabled: bool = True
    servers: List[StatusDocument] = Field(default_factory=list)
    status: str


class Analyzer(BaseModel):
    """Analysis capability offered by one or more instances."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    version: str = ""
    description: str = ""
    data_types: List[str] = Field(default_factory=list, alias="dataTypeList")
    instance_ids: List[str] = Field(default_factory=list)


class Job(BaseModel):
    """Analysis job owned by exactly one instance."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    instance_id: str = ""
    analyzer_id: str = Field(default="", alias="analyzerId")
    artifact_id: Optional[str] = None
    status: str = JobStatus.WAITING.value
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    report: Optional[Dict[str, Any]] = None


class JobRequest(BaseModel):
    """Job submission carrying the artifact to analyze."""

    analyzer_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    instance_id: Optional[str] = None
    data_type: Optional[str] = None
    data: Optional[str] = None
    tlp: int = Field(default=2, ge=0, le=3)
    message: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Body for the instance's analyzer run endpoint."""

        payload: Dict[str, Any] = {
            "label": self.artifact_id,
            "tlp": self.tlp,
            "parameters": self.parameters,
        }
        if self.data_type is not None:
            payload["dataType"] = self.data_type
        if self.data is not None:
            payload["data"] = self.data
        if self.message is not None:
            payload["message"] = self.message
        return payload
