import logging
import tempfile
from typing import AsyncIterator, Optional, Tuple

import httpx

from .cc_client import CloudControllerClient
from .errors import MissingContentLength, UpstreamProtocolError
from .models import JobDescriptor, JobResponse, JobStatus, UploadRequest

logger = logging.getLogger(__name__)

# bodies above this spill from memory to a temp file
SPOOL_MAX_MEMORY = 8 * 1024 * 1024


def parse_content_length(raw: Optional[str]) -> int:
    if raw is None:
        raise MissingContentLength()
    try:
        length = int(raw)
    except ValueError:
        raise MissingContentLength(raw) from None
    if length <= 0:
        raise MissingContentLength(raw)
    return length


class UploadProxy:
    def __init__(self, client: CloudControllerClient):
        self.client = client

    async def upload(self, request: UploadRequest, body: AsyncIterator[bytes]) -> Tuple[JobDescriptor, JobStatus]:
        """
        Relay one droplet to the backend and return the job it created.

        Exactly one upload call is made; it is never retried.
        """
        with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY) as spool:
            received = 0
            async for chunk in body:
                spool.write(chunk)
                received += len(chunk)
            if received != request.content_length:
                logger.warning(
                    "app %s: declared %d bytes, received %d",
                    request.app_guid, request.content_length, received,
                )
            spool.seek(0)
            # small droplets never left memory; httpx would force a file to disk to size it
            droplet = spool.read() if received <= SPOOL_MAX_MEMORY else spool

            logger.info("app %s: uploading droplet (%d bytes)", request.app_guid, received)
            try:
                response = await self.client.upload_droplet(request.app_guid, droplet, request.content_md5)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise UpstreamProtocolError(f"droplet upload for app {request.app_guid} failed: {e}") from e

        if response.status_code != httpx.codes.CREATED:
            raise UpstreamProtocolError(
                f"droplet upload for app {request.app_guid} returned {response.status_code}",
                status_code=response.status_code,
            )

        job = JobResponse.from_response(response)
        logger.info(
            "app %s: upload accepted as job %s (%s)",
            request.app_guid, job.metadata.guid, job.entity.status,
        )
        return job.descriptor, job.status
