import logging
from functools import wraps

from fastapi import HTTPException, Request

from .errors import Internal
from .friendly_msg import get_friendly_message

logger = logging.getLogger(__name__)


def _find_request(args, kwargs) -> Request | None:
    for arg in list(args) + list(kwargs.values()):
        if isinstance(arg, Request):
            return arg
    return None


def safe_handler(func):
    """Log expected HTTP errors and turn anything else into a 500."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        request = _find_request(args, kwargs)
        where = request.url.path if request else func.__name__

        try:
            return await func(*args, **kwargs)
        except HTTPException as e:
            logger.warning("[HTTPException] %s - %s: %s", e.status_code, where, e.detail)
            raise
        except Exception as e:
            trace_id = request.headers.get("X-Request-ID", "none") if request else "none"
            logger.error(
                "[Unhandled Error] TraceID=%s | in %s | %s: %s",
                trace_id,
                func.__name__,
                where,
                e,
                exc_info=True,
            )
            raise Internal(get_friendly_message(e))

    return wrapper
