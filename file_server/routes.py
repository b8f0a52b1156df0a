from enum import Enum
from typing import Dict, NamedTuple, Optional


class RouteName(str, Enum):
    STATIC = "static"
    UPLOAD_DROPLET = "upload_droplet"


class Route(NamedTuple):
    path: str
    method: Optional[str]  # None for mounted sub-applications


ROUTES: Dict[RouteName, Route] = {
    RouteName.STATIC: Route("/v1/static", None),
    RouteName.UPLOAD_DROPLET: Route("/v1/droplet/{app_guid}", "POST"),
}
