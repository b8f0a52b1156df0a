import logging
from typing import IO, Optional, Union

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

DROPLET_FIELD = "upload[droplet]"
DROPLET_FILENAME = "droplet.tgz"
DROPLET_CONTENT_TYPE = "application/octet-stream"


class CloudControllerClient:
    """Authenticated client for the backend job API, shared by every request."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.cc_address
        self.client = httpx.AsyncClient(
            base_url=settings.cc_address,
            auth=(settings.cc_username, settings.cc_password),
            verify=not settings.skip_cert_verify,
            timeout=settings.cc_request_timeout,
            transport=transport,
        )
        if settings.skip_cert_verify:
            logger.warning("TLS certificate verification disabled for %s", settings.cc_address)

    async def upload_droplet(self, app_guid: str, droplet: Union[bytes, IO[bytes]], content_md5: Optional[str] = None) -> httpx.Response:
        headers = {}
        if content_md5 is not None:
            headers["Content-MD5"] = content_md5
        files = {DROPLET_FIELD: (DROPLET_FILENAME, droplet, DROPLET_CONTENT_TYPE)}
        return await self.client.post(
            f"/staging/droplets/{app_guid}/upload",
            params={"async": "true"},
            files=files,
            headers=headers,
        )

    async def get_job(self, url: str) -> httpx.Response:
        # absolute urls are used as-is, relative ones hang off cc_address
        return await self.client.get(url)

    async def aclose(self) -> None:
        await self.client.aclose()
