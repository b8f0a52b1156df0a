class FileServerError(Exception):
    """Base class for everything the upload handler can fail with."""


class ClientInputError(FileServerError):
    pass


class MissingContentLength(ClientInputError):
    def __init__(self, raw=None):
        self.raw = raw
        if raw is None:
            message = "missing Content-Length"
        else:
            message = f"invalid Content-Length: {raw!r}"
        super().__init__(message)


class UpstreamProtocolError(FileServerError):
    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class PollTimeout(UpstreamProtocolError):
    def __init__(self, job_guid: str, attempts: int, elapsed: float):
        super().__init__(
            f"job {job_guid} not terminal after {attempts} polls ({elapsed:.1f}s)"
        )
        self.job_guid = job_guid
        self.attempts = attempts
        self.elapsed = elapsed


class JobFailed(FileServerError):
    def __init__(self, job_guid: str):
        super().__init__(f"job {job_guid} failed")
        self.job_guid = job_guid


class RequestCancelled(FileServerError):
    """The inbound client went away while we were still waiting on the job."""
