"""Helpers shared by the clinic views."""
from rest_framework import status
from rest_framework.response import Response

from clinic.services.repository import KIND_AUTHORIZATION, KIND_BACKEND, KIND_VALIDATION, Result

STATUS_BY_KIND = {
    KIND_VALIDATION: status.HTTP_400_BAD_REQUEST,
    KIND_AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    KIND_BACKEND: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def respond(result: Result, *, ok_status=status.HTTP_200_OK, not_found=None) -> Response:
    """Turn a service :class:`Result` into a response.

    With ``not_found`` set, a successful result without data becomes a 404
    carrying that message.
    """
    if not result.success:
        return Response(result.to_dict(), status=STATUS_BY_KIND.get(result.kind, 500))
    if result.data is None and not_found:
        return Response({'success': False, 'error': not_found}, status=status.HTTP_404_NOT_FOUND)
    return Response(result.to_dict(), status=ok_status)
