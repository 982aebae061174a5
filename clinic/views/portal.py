"""
Patient portal.

Patients sign up and sign in with Django user accounts and DRF tokens.
Their appointments are the rows whose ``patientId`` is their user id.
"""
from __future__ import annotations

from django.contrib.auth import authenticate, get_user_model
from django.db import transaction
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic import domain
from clinic.permissions import IsPatientSession
from clinic.serializers.auth import LoginSerializer, PortalRegisterSerializer
from clinic.serializers.workflow import PortalAppointmentSerializer
from clinic.services.audit import log_action
from clinic.services.repository import appointments, doctors
from clinic.views.common import respond


def _profile(user) -> dict:
    return {'id': str(user.id), 'username': user.username, 'name': user.get_full_name() or user.username,
            'email': user.email}


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    s = PortalRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    first, _, last = vd['name'].strip().partition(' ')
    with transaction.atomic():
        user = get_user_model().objects.create_user(
            username=vd['username'], password=vd['password'], email=vd.get('email', ''),
            first_name=first, last_name=last,
        )
        token = Token.objects.create(user=user)
    log_action(actor=f"patient:{user.username}", action='portal_register', object_type='user', object_id=user.id)
    return Response({'success': True, 'token': token.key, 'user': _profile(user)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = authenticate(request._request, username=vd['username'], password=vd['password'])
    if user is None:
        log_action(actor=vd['username'], action='portal_login', detail={'result': 'fail'})
        return Response({'success': False, 'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)
    token, _ = Token.objects.get_or_create(user=user)
    log_action(actor=f"patient:{user.username}", action='portal_login', object_type='user', object_id=user.id,
               detail={'result': 'ok'})
    return Response({'success': True, 'token': token.key, 'user': _profile(user)})


login.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([IsPatientSession])
def doctor_list(request):
    """Doctors patients can book with."""
    return respond(doctors.get_all(status=domain.DOCTOR_AVAILABLE))


@api_view(['GET', 'POST'])
@permission_classes([IsPatientSession])
def my_appointments(request):
    user = request.user
    if request.method == 'GET':
        return respond(appointments.get_all(patient_id=str(user.id)))

    s = PortalAppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    doctor = doctors.get_by_id(vd['doctorId'])
    if not doctor.success:
        return respond(doctor)
    if doctor.data is None:
        return Response({'success': False, 'error': 'Doctor not found'}, status=status.HTTP_400_BAD_REQUEST)
    return respond(appointments.create({
        'patientId': str(user.id),
        'patientName': user.get_full_name() or user.username,
        'doctorId': doctor.data['id'],
        'doctorName': doctor.data['name'],
        'date': vd['date'],
        'time': vd['time'],
        'type': vd.get('type', 'Consultation'),
        'notes': vd.get('notes') or None,
    }), ok_status=status.HTTP_201_CREATED)
