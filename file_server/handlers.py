import logging
from typing import Any, Dict

from fastapi import Request, Response
from fastapi.staticfiles import StaticFiles

from .cc_client import CloudControllerClient
from .config import Settings
from .errors import JobFailed
from .models import JobStatus, UploadRequest
from .poller import JobPoller
from .routes import RouteName
from .translator import status_for
from .upload import UploadProxy, parse_content_length

logger = logging.getLogger(__name__)


class UploadDropletHandler:
    def __init__(self, client: CloudControllerClient, settings: Settings):
        self.proxy = UploadProxy(client)
        self.poller = JobPoller(client, settings)

    async def handle(self, app_guid: str, request: Request) -> Response:
        upload = UploadRequest(
            app_guid=app_guid,
            content_length=parse_content_length(request.headers.get("content-length")),
            content_md5=request.headers.get("content-md5"),
        )
        job, status = await self.proxy.upload(upload, request.stream())
        status = await self.poller.wait(job, status, cancelled=request.is_disconnected)
        if status is JobStatus.FAILED:
            raise JobFailed(job.guid)
        logger.info("app %s: droplet staged by job %s", app_guid, job.guid)
        return Response(status_code=status_for(status))


def new(settings: Settings, client: CloudControllerClient) -> Dict[RouteName, Any]:
    return {
        RouteName.STATIC: StaticFiles(directory=settings.static_directory, check_dir=False),
        RouteName.UPLOAD_DROPLET: UploadDropletHandler(client, settings).handle,
    }
