import logging
from rest_framework.views import exception_handler
from rest_framework.exceptions import (
    AuthenticationFailed, NotAuthenticated, ValidationError, PermissionDenied, NotFound
)
from rest_framework.response import Response
from rest_framework import status

logger = logging.getLogger(__name__)


def first_error_message(detail):
    """Return the first human readable message from a DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            return first_error_message(value)
        return 'Invalid request'
    if isinstance(detail, (list, tuple)):
        if not detail:
            return 'Invalid request'
        return first_error_message(detail[0])
    return str(detail)


def custom_exception_handler(exc, context):
    """
    Map every exception to the {"error": ...} response shape used by the API.

    Anything DRF does not handle itself becomes a logged 500 with a generic
    message.
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)
    request = context.get('request')

    if response is None:
        view = context.get('view')
        logger.exception(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response({'error': 'Server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.data = {
            'error': 'Unauthorized. Please login again.',
            'detail': str(exc.detail),
        }
        if request is not None:
            auth_header = request.headers.get('Authorization')
            if auth_header:
                logger.warning(f"Authentication error on {request.path}: {exc} (header {auth_header[:20]}...)")
            else:
                logger.warning(f"Authentication error on {request.path}: no Authorization header")
    elif isinstance(exc, ValidationError):
        response.data = {
            'error': first_error_message(exc.detail),
            'errors': exc.detail,
        }
    elif isinstance(exc, (PermissionDenied, NotFound)):
        response.data = {'error': str(exc.detail)}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail'])}

    return response
