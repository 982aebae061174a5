"""
Workflow endpoints: appointment status and rescheduling, payments, lab
results, stock, status toggles and the doctor's day view.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied

from clinic import domain, session
from clinic.permissions import AdminOnly, RequireRole
from clinic.serializers.workflow import (
    AppointmentStatusSerializer,
    DayQuerySerializer,
    LabResultSerializer,
    PaymentSerializer,
    RescheduleSerializer,
    StockSerializer,
)
from clinic.services import appointments, billing, lab, pharmacy, records
from clinic.views.common import respond

NOT_FOUND = 'Not found'

AppointmentDesk = RequireRole(domain.ROLE_ADMIN, domain.ROLE_APPOINTMENTS, domain.ROLE_DOCTOR)
BillingDesk = RequireRole(domain.ROLE_ADMIN, domain.ROLE_BILLING)
LabDesk = RequireRole(domain.ROLE_ADMIN, domain.ROLE_LAB)


@api_view(['POST'])
@permission_classes([AppointmentDesk])
def appointment_status(request, pk):
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    context = session.context_for(request)
    return respond(
        appointments.set_status(pk, s.validated_data['status'], actor_name=context.identity.display_name),
        not_found=NOT_FOUND,
    )


@api_view(['POST'])
@permission_classes([AppointmentDesk])
def appointment_reschedule(request, pk):
    s = RescheduleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    return respond(appointments.reschedule(pk, vd['date'], vd['time']), not_found=NOT_FOUND)


@api_view(['GET'])
@permission_classes([AppointmentDesk])
def doctor_day(request, pk):
    q = DayQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return respond(appointments.doctor_day(pk, q.validated_data.get('date')), not_found=NOT_FOUND)


@api_view(['GET'])
@permission_classes([RequireRole(domain.ROLE_DOCTOR)])
def my_day(request):
    """The signed-in doctor's schedule; the account must be linked to a doctor."""
    q = DayQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    doctor_id = session.context_for(request).identity.doctor_id
    if not doctor_id:
        raise PermissionDenied('This account is not linked to a doctor')
    return respond(appointments.doctor_day(doctor_id, q.validated_data.get('date')), not_found=NOT_FOUND)


@api_view(['POST'])
@permission_classes([BillingDesk])
def bill_payment(request, pk):
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    actor = session.context_for(request).actor
    return respond(billing.record_payment(pk, s.validated_data['amount'], actor=actor), not_found=NOT_FOUND)


@api_view(['POST'])
@permission_classes([LabDesk])
def lab_test_start(request, pk):
    return respond(lab.start_test(pk), not_found=NOT_FOUND)


@api_view(['POST'])
@permission_classes([LabDesk])
def lab_test_complete(request, pk):
    s = LabResultSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return respond(lab.complete_test(pk, s.validated_data['result']), not_found=NOT_FOUND)


@api_view(['POST'])
@permission_classes([AdminOnly])
def medicine_stock(request, pk):
    s = StockSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return respond(pharmacy.update_stock(pk, **s.validated_data), not_found=NOT_FOUND)


@api_view(['POST'])
@permission_classes([AdminOnly])
def doctor_toggle_status(request, pk):
    return respond(records.toggle_doctor_status(pk), not_found=NOT_FOUND)


@api_view(['POST'])
@permission_classes([AdminOnly])
def patient_toggle_status(request, pk):
    return respond(records.toggle_patient_status(pk), not_found=NOT_FOUND)
