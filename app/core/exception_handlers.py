"""
DRF exception handler mapping service-layer exceptions to HTTP responses.

Registered in settings as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Services raise
core.exceptions.* (ValidationError, NotFoundError, PersistenceError, ...);
this handler turns them into JSON bodies (via .to_dict()) with the status
code declared on the exception class. Everything else falls through to
DRF's default handler.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Convert BaseApplicationError subclasses to API responses.

    Server-side failures (5xx) are logged at ERROR with traceback; client
    errors at INFO. Raw database messages never reach the response body.
    """
    if not isinstance(exc, BaseApplicationError):
        return exception_handler(exc, context)

    request = context.get("request")
    where = f"{request.method} {request.path}" if request is not None else "unknown"

    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} for {where}: {exc}", exc_info=exc)
    else:
        logger.info(f"{exc.__class__.__name__} for {where}: {exc}")

    return Response(exc.to_dict(), status=exc.status_code)
