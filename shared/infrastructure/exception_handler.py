"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import structlog
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import DomainError, ErrorKind

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
}


def domain_exception_handler(exc, context):  # type: ignore
    """Map DomainError kinds to status codes; hide unexpected failures."""

    if isinstance(exc, DomainError):
        return Response(
            {"status": "error", **exc.to_dict()},
            status=STATUS_BY_KIND[exc.kind],
        )

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.error(
        "api.unhandled_exception",
        view=view.__class__.__name__ if view else None,
        error=repr(exc),
        exc_info=exc,
    )
    return Response(
        {"status": "error", "message": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
