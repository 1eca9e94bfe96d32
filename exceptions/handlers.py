from rest_framework.exceptions import APIException
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from django.core.exceptions import (
    ObjectDoesNotExist,
    ValidationError as DjangoValidationError,
)
from rest_framework.exceptions import ValidationError as DRFValidationError
from utils.constants import (
    GeneralMessage,
)
import logging

logger = logging.getLogger("exceptions")


def custom_exception_handler(exc, context):
    # Handle Django's DoesNotExist as 404
    if isinstance(exc, ObjectDoesNotExist):
        return Response(
            {"success": False, "error": "Not found."},
            status=status.HTTP_404_NOT_FOUND
        )

    # Handle Django and DRF validation errors as 400
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        return Response(
            {"success": False, "error": detail},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, DRFValidationError):
        return Response(
            {"success": False, "error": exc.detail},
            status=status.HTTP_400_BAD_REQUEST,
        )

    # Handle all APIException (including the domain ones below)
    if isinstance(exc, APIException):
        return Response(
            {"success": False, "error": exc.detail},
            status=exc.status_code,
        )

    # Fallback to DRF's default handler (Http404, PermissionDenied, etc.)
    response = exception_handler(exc, context)
    if response is not None:
        response.data = {"success": False, "error": response.data}
        return response

    view = context.get("view")
    logger.exception(
        f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}"
    )
    return Response(
        {
            "success": False,
            "error": GeneralMessage.SOMETHING_WENT_WRONG,
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AlreadyExistsException(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "already_exists"


class ConflictException(APIException):
    """
    Business-rule violation: duplicate schedule time, cancelled or departed
    schedule, station plan not matching the route, seat already booked.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request conflicts with the current state."
    default_code = "conflict"


class NotFoundException(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class PermissionDeniedException(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = GeneralMessage.PERMISSION_DENIED
    default_code = "permission_denied"


class InvalidInputException(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = GeneralMessage.INVALID_INPUT
    default_code = "invalid_input"
