from enum import Enum
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import UpstreamProtocolError


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "JobStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.FINISHED, JobStatus.FAILED)


class UploadRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_guid: str
    content_length: int
    content_md5: Optional[str] = None


class JobDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    guid: str
    url: str


class JobMetadata(BaseModel):
    guid: str
    url: str


class JobEntity(BaseModel):
    status: str


class JobResponse(BaseModel):
    """Body of both the upload call and the job status call."""

    metadata: JobMetadata
    entity: JobEntity

    @classmethod
    def from_response(cls, response: httpx.Response) -> "JobResponse":
        try:
            return cls.model_validate_json(response.content)
        except ValidationError as e:
            raise UpstreamProtocolError(
                f"unparsable job body from {response.request.url}: {e.error_count()} errors",
                status_code=response.status_code,
            ) from e

    @property
    def descriptor(self) -> JobDescriptor:
        return JobDescriptor(guid=self.metadata.guid, url=self.metadata.url)

    @property
    def status(self) -> JobStatus:
        return JobStatus.parse(self.entity.status)
