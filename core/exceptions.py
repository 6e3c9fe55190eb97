from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import exceptions, status
import logging

logger = logging.getLogger("tf.core")


class NotFound(exceptions.NotFound):
    """Entity absent or not visible to the actor."""
    default_detail = "Not found."


class Forbidden(exceptions.PermissionDenied):
    """Actor lacks the role required, or the team uses the other decision system."""
    default_detail = "You do not have permission to perform this action."


class Conflict(exceptions.APIException):
    """
    Invariant violation: duplicate pending item, already-resolved item,
    actor already in a team, team at capacity, suspended entity.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state."
    default_code = "conflict"


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": response.data,
            },
            status=response.status_code,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
