import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """A business rule rejected the requested change."""


class InvalidTransition(DomainError):
    """A status change that the record's lifecycle does not allow."""


class AuthorizationFailed(Exception):
    """Credentials were wrong or the account may not sign in."""


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled error in %s", context.get('view').__class__.__name__, exc_info=exc)
        return Response({'success': False, 'error': str(exc) or 'Unknown error'}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    payload = {'success': False, 'error': detail}
    redirect = getattr(exc, 'redirect', None)
    if redirect:
        payload['redirect'] = redirect
    resp.data = payload
    return resp
