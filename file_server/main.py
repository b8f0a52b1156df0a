import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Request, Response

from . import __version__, handlers as route_handlers
from .cc_client import CloudControllerClient
from .config import Settings, get_settings
from .errors import ClientInputError, FileServerError, RequestCancelled
from .routes import ROUTES, RouteName
from .translator import status_for

logger = logging.getLogger(__name__)


async def handle_file_server_error(request: Request, exc: FileServerError) -> Response:
    code = status_for(exc)
    if isinstance(exc, ClientInputError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    elif isinstance(exc, RequestCancelled):
        logger.info("%s %s abandoned: %s", request.method, request.url.path, exc)
    else:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return Response(status_code=code)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    handlers: Optional[Dict[RouteName, Any]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    client = CloudControllerClient(settings, transport=transport)
    if handlers is None:
        handlers = route_handlers.new(settings, client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(title="File Server", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.cc_client = client

    for name, route in ROUTES.items():
        handler = handlers[name]
        if route.method is None:
            app.mount(route.path, handler, name=name.value)
        else:
            app.add_api_route(route.path, handler, methods=[route.method], name=name.value)

    app.add_exception_handler(FileServerError, handle_file_server_error)
    return app
