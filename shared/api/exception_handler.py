"""
DRF exception handler for domain errors

Maps the shared domain exception tiers onto HTTP responses:
validation 400, not found 404, conflict 409. Everything else falls
through to the REST framework default.
"""

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import ConflictError, DomainValidationError, NotFoundError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    if isinstance(exc, ConflictError):
        logger.info(f"Conflict in {_view_name(context)}: {exc}")
        return Response({"detail": str(exc), **exc.details()}, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, NotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, DomainValidationError):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    return exception_handler(exc, context)


def _view_name(context) -> str:
    view = context.get("view") if context else None
    return type(view).__name__ if view is not None else "unknown view"
