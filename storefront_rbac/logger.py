from __future__ import annotations

import logging

from .middleware.request_id import RequestIdFilter
from .settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | rid=%(request_id)s | %(message)s"


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # stamp request ids on every record, whichever logger emitted it
    rid_filter = RequestIdFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(rid_filter)
