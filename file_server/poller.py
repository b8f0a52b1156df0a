import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

import httpx

from .cc_client import CloudControllerClient
from .config import Settings
from .errors import PollTimeout, RequestCancelled, UpstreamProtocolError
from .models import JobDescriptor, JobResponse, JobStatus

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], Awaitable[bool]]


class JobPoller:
    def __init__(self, client: CloudControllerClient, settings: Settings):
        self.client = client
        self.interval = settings.cc_job_polling_interval
        self.max_duration = settings.max_poll_duration
        self.max_attempts = settings.max_poll_attempts

    async def wait(self, job: JobDescriptor, status: JobStatus, cancelled: Optional[CancelCheck] = None) -> JobStatus:
        """
        Poll the job's status url until it reports finished or failed.

        Polls are strictly sequential and each one is preceded by a sleep of
        the full interval. A transport or parse error aborts immediately.
        """
        started = time.monotonic()
        attempts = 0
        while not status.is_terminal:
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise PollTimeout(job.guid, attempts, time.monotonic() - started)
            elapsed = time.monotonic() - started
            if self.max_duration is not None and elapsed + self.interval > self.max_duration:
                raise PollTimeout(job.guid, attempts, elapsed)

            await self._check_cancelled(job, cancelled)
            await asyncio.sleep(self.interval)
            await self._check_cancelled(job, cancelled)

            attempts += 1
            status = await self.poll_once(job)
        logger.info("job %s: %s after %d polls", job.guid, status.value, attempts)
        return status

    async def poll_once(self, job: JobDescriptor) -> JobStatus:
        try:
            response = await self.client.get_job(job.url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamProtocolError(f"polling job {job.guid} failed: {e}") from e
        if response.status_code != httpx.codes.OK:
            raise UpstreamProtocolError(
                f"polling job {job.guid} returned {response.status_code}",
                status_code=response.status_code,
            )

        body = JobResponse.from_response(response)
        status = body.status
        if status is JobStatus.UNKNOWN:
            logger.warning("job %s: unrecognized status %r, still polling", job.guid, body.entity.status)
        else:
            logger.debug("job %s: %s", job.guid, status.value)
        return status

    @staticmethod
    async def _check_cancelled(job: JobDescriptor, cancelled: Optional[CancelCheck]) -> None:
        if cancelled is not None and await cancelled():
            logger.info("job %s: client went away, no longer polling", job.guid)
            raise RequestCancelled(f"client disconnected while waiting on job {job.guid}")
