"""
API errors and the DRF exception handler.

Every failure leaves the API in the same envelope as a success:
{statusCode, data: null, message, success: false, errors: [...]}
"""
import logging

from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ApiError(exceptions.APIException):
    """
    Client-facing error carrying its own HTTP status.

    Raised from views and services; rendered by custom_exception_handler.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Something went wrong'

    def __init__(self, status_code: int = 400, message: str | None = None, errors=None):
        self.status_code = status_code
        self.message = message or self.default_detail
        self.errors = list(errors or [])
        super().__init__(detail=self.message)


def error_body(status_code: int, message: str, errors=None) -> dict:
    return {
        'statusCode': status_code,
        'data': None,
        'message': message,
        'success': False,
        'errors': list(errors or []),
    }


def _first_message(detail) -> str:
    """Pull the first human readable message out of DRF error details."""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)):
        for value in detail:
            return _first_message(value)
        return ''
    return str(detail)


def custom_exception_handler(exc, context):
    """
    Render every exception as the error envelope.

    1. ApiError: status and message as raised
    2. Anything DRF understands (validation, auth, 404, throttling)
    3. ValueError: raised by services for rejected input
    4. IntegrityError: duplicate row raced past a pre-check
    5. Everything else: logged, generic 500
    """
    if isinstance(exc, ApiError):
        return Response(
            error_body(exc.status_code, exc.message, exc.errors),
            status=exc.status_code
        )

    response = exception_handler(exc, context)
    if response is not None:
        errors = [response.data] if isinstance(response.data, dict) else list(response.data)
        if isinstance(exc, exceptions.ValidationError):
            message = _first_message(exc.detail) or 'Invalid request'
        elif isinstance(exc, Http404):
            message = 'Not found'
        else:
            message = _first_message(response.data) or str(exc)
        response.data = error_body(response.status_code, message, errors)
        return response

    if isinstance(exc, ValueError):
        return Response(
            error_body(status.HTTP_400_BAD_REQUEST, str(exc)),
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, IntegrityError):
        logger.warning("IntegrityError: %s", exc)
        return Response(
            error_body(status.HTTP_400_BAD_REQUEST, 'Duplicate entry'),
            status=status.HTTP_400_BAD_REQUEST
        )

    logger.exception("Unhandled exception: %s", exc)
    return Response(
        error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, 'An unexpected error occurred.'),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
