"""
Function endpoints under ``/functions/v1/``.

Each takes a JSON body with an ``action`` and answers
``{success, ...}``: ``auth`` (admin login, token verification, logout),
``hospital-settings`` (read/update the settings row) and ``mongodb``
(acknowledges document-store requests without persisting them).
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic import domain, session
from clinic.exceptions import AuthorizationFailed, DomainError
from clinic.permissions import LoginRequired
from clinic.serializers.auth import AuthFunctionSerializer
from clinic.serializers.workflow import DatastoreFunctionSerializer, SettingsFunctionSerializer
from clinic.services import auth, datastore, hospital_settings, tokens
from clinic.views.common import respond

logger = logging.getLogger(__name__)

UNKNOWN_ACTION = 'Unknown action'


def _error(message, code=status.HTTP_400_BAD_REQUEST):
    return Response({'success': False, 'error': message}, status=code)


@api_view(['POST'])
@permission_classes([AllowAny])
def auth_function(request):
    s = AuthFunctionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    action = vd['action']
    logger.info("auth action: %s", action)

    if action == 'login':
        if not vd.get('username') or not vd.get('password'):
            return _error('Username and password required')
        try:
            issued = auth.admin_login(vd['username'], vd['password'])
        except AuthorizationFailed as exc:
            return _error(str(exc), status.HTTP_401_UNAUTHORIZED)
        return Response({'success': True, **issued})

    if action == 'verify':
        if not vd.get('token'):
            return _error('Token required')
        claims = tokens.verify_token(vd['token'])
        if claims is None:
            return Response({'success': False})
        return Response({'success': True, 'username': claims.username})

    if action == 'logout':
        return Response({'success': True})

    return _error(UNKNOWN_ACTION)


auth_function.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def hospital_settings_function(request):
    """``get`` is public (the login screens show the name and logo); ``update`` needs an admin."""
    s = SettingsFunctionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    action = vd['action']
    logger.info("settings action: %s", action)

    if action == 'get':
        return respond(hospital_settings.get_settings())

    if action == 'update':
        if not session.context_for(request).has_role(domain.ROLE_ADMIN):
            raise LoginRequired()
        kwargs = {'hospital_name': vd.get('hospitalName') or None}
        if 'logoUrl' in vd:
            kwargs['logo_url'] = vd['logoUrl']
        result = hospital_settings.update_settings(**kwargs)
        if not result.success and result.error == hospital_settings.SETTINGS_NOT_FOUND:
            return _error(result.error, status.HTTP_404_NOT_FOUND)
        return respond(result)

    return _error(UNKNOWN_ACTION)


@api_view(['POST'])
@permission_classes([AllowAny])
def datastore_function(request):
    s = DatastoreFunctionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = dict(s.validated_data)
    try:
        return Response(datastore.acknowledge(vd.pop('action'), vd.pop('collection', ''), **vd))
    except DomainError as exc:
        return _error(str(exc))
