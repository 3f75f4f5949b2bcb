"""DRF exception handler for engine failures."""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from .errors import AvailabilityError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render :class:`AvailabilityError` as ``{"error": {...}}``.

    Anything else falls through to DRF's default handling.
    """
    if isinstance(exc, AvailabilityError):
        view = context.get("view")
        logger.info(
            "Request rejected: %s (%s)",
            exc.code,
            view.__class__.__name__ if view is not None else "unknown view",
        )
        return Response({"error": exc.as_dict()}, status=exc.status_code)
    return exception_handler(exc, context)
