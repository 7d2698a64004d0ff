"""Root logger setup shared by the application and uvicorn."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)d %(message)s"


def setup_logging(level: str = "INFO") -> None:
    # force=True so a later call (after settings load) replaces the bootstrap handler
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
