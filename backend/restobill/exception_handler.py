import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from orders.exceptions import BillingError

logger = logging.getLogger(__name__)


def billing_exception_handler(exc, context):
    """
    Turns BillingError subclasses into {"error", "code"} responses.

    Anything else falls through to DRF's default handler; errors DRF does not
    handle either are logged before Django turns them into a 500.
    """
    request = context.get("request")
    path = request.path if request is not None else ""

    if isinstance(exc, BillingError):
        logger.warning(f"{exc.code} on {path}: {exc.message}")
        return Response({"error": exc.message, "code": exc.code}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"Unhandled {type(exc).__name__} on {path}", exc_info=exc)
    return response
