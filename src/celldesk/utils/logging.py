"""
Logging setup for celldesk.

Modules log through ``logging.getLogger(__name__)``; applications call
``configure_logging`` once to attach a handler to the package logger.
"""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: Union[int, str, None] = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Attach a stream handler to the ``celldesk`` logger.

    Calling this again replaces the handler installed by the previous call
    rather than stacking another one.

    Args:
        level: Level name or number; defaults to the configured log_level
        handler: Handler to install instead of a stderr stream handler

    Returns:
        The configured package logger
    """
    if level is None:
        from celldesk.config import get_settings

        level = get_settings().log_level
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger("celldesk")
    logger.setLevel(level)

    for existing in list(logger.handlers):
        if getattr(existing, "_celldesk_handler", False):
            logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._celldesk_handler = True
    logger.addHandler(handler)
    return logger
