from typing import Union

from fastapi import status

from .errors import (
    ClientInputError,
    FileServerError,
    RequestCancelled,
)
from .models import JobStatus

# nginx's "client closed request"; never actually read by anyone
STATUS_CLIENT_CLOSED_REQUEST = 499

Outcome = Union[JobStatus, FileServerError]


def status_for(outcome: Outcome) -> int:
    if isinstance(outcome, JobStatus):
        if outcome is JobStatus.FINISHED:
            return status.HTTP_201_CREATED
        if outcome is JobStatus.FAILED:
            return status.HTTP_500_INTERNAL_SERVER_ERROR
        raise ValueError(f"{outcome.value} is not a terminal status")
    if isinstance(outcome, ClientInputError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(outcome, RequestCancelled):
        return STATUS_CLIENT_CLOSED_REQUEST
    # UpstreamProtocolError, PollTimeout, JobFailed
    return status.HTTP_500_INTERNAL_SERVER_ERROR
