"""
Admin and staff sign-in for the panels.

The identity is remembered in the Django session under the same keys
the front-end used in browser storage; the admin token is returned too
so API clients can send it as a bearer token instead.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic import session
from clinic.exceptions import AuthorizationFailed
from clinic.serializers.auth import LoginSerializer, StaffLoginSerializer
from clinic.services import auth


@api_view(['GET'])
@permission_classes([AllowAny])
def current_session(request):
    return Response({'success': True, 'data': session.context_for(request).as_dict()})


@api_view(['POST'])
@permission_classes([AllowAny])
def admin_login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        context = auth.admin_session_login(request.session, vd['username'], vd['password'])
    except AuthorizationFailed as exc:
        return Response({'success': False, 'error': str(exc)}, status=status.HTTP_401_UNAUTHORIZED)
    data = context.as_dict()
    data['token'] = context.identity.token
    return Response({'success': True, 'data': data})


admin_login.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def staff_login(request):
    s = StaffLoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        context = auth.staff_login(request.session, vd['role'], vd['username'], vd['password'])
    except AuthorizationFailed as exc:
        return Response({'success': False, 'error': str(exc)}, status=status.HTTP_401_UNAUTHORIZED)
    return Response({'success': True, 'data': context.as_dict()})


staff_login.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    auth.logout(request.session)
    return Response({'success': True})
