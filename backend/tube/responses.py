"""
Success envelope shared by every endpoint.
"""
from rest_framework import status as http_status
from rest_framework.response import Response


def api_response(data, message: str = 'Success', status_code: int = http_status.HTTP_200_OK) -> Response:
    """
    Wrap a payload as {statusCode, data, message, success}.

    success mirrors the status code so a 4xx passed here by mistake is
    still reported as a failure.
    """
    return Response(
        {
            'statusCode': status_code,
            'data': data,
            'message': message,
            'success': status_code < 400,
        },
        status=status_code
    )
