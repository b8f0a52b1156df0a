import logging

import uvicorn

from .config import get_settings
from .logging_setup import configure_logging
from .main import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("file server listening on %s:%d, backend %s", settings.address, settings.port, settings.cc_address)
    uvicorn.run(create_app(settings), host=settings.address, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
