# storybook_api/logger.py
import logging
import sys
from typing import Optional
from storybook_api.config import config

_DEFAULT_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Server loggers that should follow LOG_LEVEL
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "gunicorn.error", "gunicorn.access")
# Client libraries that log every HTTP call at INFO (supabase -> httpx, google-cloud-storage -> urllib3)
_CHATTY_LOGGERS = ("httpx", "httpcore", "urllib3")

_configured = False

def configure_logging(level: Optional[str] = None, fmt: str = _DEFAULT_FMT) -> None:
    """Set up stdout logging at LOG_LEVEL; later calls are no-ops."""
    global _configured
    if _configured:
        return

    level_value = getattr(logging, (level or config.log_level).upper(), logging.INFO)
    formatter = logging.Formatter(fmt)

    root = logging.getLogger()
    root.setLevel(level_value)
    if not root.handlers:
        # one line per page event, collected from stdout by the platform
        handler = logging.StreamHandler(sys.stdout)
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setLevel(level_value)
        if not handler.formatter:
            handler.setFormatter(formatter)

    for name in _SERVER_LOGGERS:
        logging.getLogger(name).setLevel(level_value)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_value, logging.WARNING))

    _configured = True

def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name or __name__)
