"""DRF exception handling for domain errors."""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import NotFoundError, PGConnectError, ValidationError, WriteError

logger = logging.getLogger(__name__)


def _status_for(exc: PGConnectError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, WriteError):
        if exc.code == "version_conflict":
            return status.HTTP_409_CONFLICT
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


def exception_handler(exc, context):
    """Render :class:`PGConnectError` as an inline message, defer the rest to DRF."""

    if isinstance(exc, PGConnectError):
        view = context.get("view")
        logger.warning(
            "%s in %s: %s (%s)",
            type(exc).__name__,
            type(view).__name__ if view is not None else "unknown view",
            exc,
            exc.code,
        )
        return Response(
            {"ok": False, "detail": str(exc), "code": exc.code},
            status=_status_for(exc),
        )
    return drf_exception_handler(exc, context)
