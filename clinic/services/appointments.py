"""Appointment lifecycle: status changes, rescheduling and the doctor's day."""
from __future__ import annotations

import datetime
import logging
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from clinic import domain
from clinic.models import Appointment, Doctor
from clinic.services.notifications import create_notification
from clinic.services.repository import KIND_VALIDATION, Result, appointments

logger = logging.getLogger(__name__)


def set_status(appointment_id, status: str, *, actor_name: Optional[str] = None) -> Result:
    """Move a scheduled appointment to Completed, Cancelled or No-show."""
    if status not in domain.APPOINTMENT_STATUSES:
        return Result.fail(f"Unknown appointment status: {status}", KIND_VALIDATION)
    result = appointments.update(appointment_id, {'status': status})
    if not result.success or result.data is None:
        return result
    by = f" by {actor_name}" if actor_name else ''
    note = create_notification(
        domain.NOTIFY_APPOINTMENT,
        f"Appointment for {result.data['patientName']} {status.lower()}{by}",
        related_id=result.data['id'],
    )
    if not note.success:
        logger.warning("status change of %s not announced: %s", appointment_id, note.error)
    return result


def reschedule(appointment_id, date, time) -> Result:
    """Move an appointment to a new slot, keeping its id and status."""
    if not date or not time:
        return Result.fail('Please select new date and time', KIND_VALIDATION)
    return appointments.update(appointment_id, {'date': date, 'time': time})


def doctor_day(doctor_id: str, day: Optional[datetime.date] = None) -> Result:
    """A doctor's appointments for ``day`` by time, with the day's earnings.

    Earnings are the consultation fee times the completed appointments.
    """
    day = day or timezone.localdate()
    try:
        doctor = Doctor.objects.filter(pk=doctor_id).first()
    except (ValidationError, ValueError):
        return Result.ok(None)
    except DatabaseError as exc:
        return Result.fail(str(exc))
    if doctor is None:
        return Result.ok(None)
    try:
        qs = Appointment.objects.filter(doctor_id=str(doctor.pk), date=day).order_by('time')
        items = [appointments.serialize(a) for a in qs]
    except DatabaseError as exc:
        return Result.fail(str(exc))
    completed = sum(1 for a in items if a['status'] == domain.APPOINTMENT_COMPLETED)
    fee = doctor.consultation_fee if doctor.consultation_fee is not None else domain.DEFAULT_CONSULTATION_FEE
    return Result.ok({
        'doctorId': str(doctor.pk),
        'doctorName': doctor.name,
        'date': day.isoformat(),
        'appointments': items,
        'completed': completed,
        'earnings': float(Decimal(completed) * fee),
    })
