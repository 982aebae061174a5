"""
Per-entity access layer.

Each :class:`EntityRepository` offers the same five operations
(``get_all``, ``get_by_id``, ``create``, ``update``, ``delete``) over one
table and always answers with a :class:`Result`; database failures and
rule violations are reported in the result, never raised.  Subclasses
add entity rules through four hooks: ``prepare_create``,
``prepare_update``, ``check_update`` and ``after_create``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from django.contrib.auth.hashers import make_password
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone

from clinic import domain
from clinic.exceptions import DomainError, InvalidTransition
from clinic.services import transforms
from clinic.services.transforms import EntityMapping

logger = logging.getLogger(__name__)

KIND_VALIDATION = 'validation'
KIND_BACKEND = 'backend'
KIND_AUTHORIZATION = 'authorization'


@dataclass(frozen=True)
class Result:
    success: bool
    data: Any = None
    error: Optional[str] = None
    kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> 'Result':
        return cls(True, data=data)

    @classmethod
    def fail(cls, error: str, kind: str = KIND_BACKEND) -> 'Result':
        return cls(False, error=error, kind=kind)

    def to_dict(self) -> dict:
        if self.success:
            return {'success': True, 'data': self.data}
        return {'success': False, 'error': self.error}


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return '; '.join(exc.messages)
    return str(exc) or exc.__class__.__name__


class EntityRepository:
    """CRUD over one table, speaking API records."""

    def __init__(self, mapping: EntityMapping):
        self.mapping = mapping

    @property
    def model(self):
        return self.mapping.model

    @property
    def resource(self) -> str:
        return self.mapping.resource

    # -- hooks -------------------------------------------------------------
    def prepare_create(self, data: dict) -> dict:
        return data

    def prepare_update(self, current: dict, changes: dict) -> dict:
        return changes

    def check_update(self, current: dict, changes: dict) -> None:
        """Raise :class:`DomainError` to refuse ``changes``."""

    def after_create(self, record: dict) -> None:
        """Secondary effects of a successful create."""

    # -- helpers -----------------------------------------------------------
    def _find(self, pk):
        try:
            return self.model.objects.filter(pk=pk).first()
        except (ValidationError, ValueError):
            # malformed ids cannot match any row
            return None

    def serialize(self, instance) -> dict:
        return self.mapping.from_row(instance)

    def queryset(self, search: Optional[str] = None):
        qs = self.model.objects.all()
        if search and self.mapping.search_columns:
            cond = Q()
            for column in self.mapping.search_columns:
                cond |= Q(**{f'{column}__icontains': search})
            qs = qs.filter(cond)
        return qs.order_by(*self.mapping.ordering)

    # -- operations --------------------------------------------------------
    def get_all(self, search: Optional[str] = None, **filters) -> Result:
        try:
            qs = self.queryset(search)
            if filters:
                qs = qs.filter(**filters)
            return Result.ok([self.serialize(obj) for obj in qs])
        except DatabaseError as exc:
            logger.error("get_all %s failed: %s", self.resource, exc)
            return Result.fail(_describe(exc))

    def get_by_id(self, pk) -> Result:
        try:
            obj = self._find(pk)
        except DatabaseError as exc:
            logger.error("get_by_id %s/%s failed: %s", self.resource, pk, exc)
            return Result.fail(_describe(exc))
        return Result.ok(self.serialize(obj) if obj else None)

    def create(self, data: dict) -> Result:
        try:
            data = self.prepare_create(dict(data))
            row = self.mapping.to_row(data)
            obj = self.model(**row)
            obj.full_clean(exclude=['id'], validate_unique=True)
            obj.save(force_insert=True)
            record = self.serialize(obj)
        except DomainError as exc:
            return Result.fail(str(exc), KIND_VALIDATION)
        except (ValidationError, ValueError, TypeError, InvalidOperation) as exc:
            return Result.fail(_describe(exc), KIND_VALIDATION)
        except DatabaseError as exc:
            logger.error("create %s failed: %s", self.resource, exc)
            return Result.fail(_describe(exc))
        self.after_create(record)
        return Result.ok(record)

    def update(self, pk, changes: dict) -> Result:
        try:
            obj = self._find(pk)
            if obj is None:
                return Result.ok(None)
            current = self.serialize(obj)
            changes = self.prepare_update(current, dict(changes))
            row = self.mapping.to_row(changes, partial=True)
            if not row:
                return Result.ok(current)
            self.check_update(current, changes)
            for column, value in row.items():
                setattr(obj, column, value)
            obj.full_clean(exclude=['id'], validate_unique=True)
            obj.save()
            return Result.ok(self.serialize(obj))
        except DomainError as exc:
            return Result.fail(str(exc), KIND_VALIDATION)
        except (ValidationError, ValueError, TypeError, InvalidOperation) as exc:
            return Result.fail(_describe(exc), KIND_VALIDATION)
        except DatabaseError as exc:
            logger.error("update %s/%s failed: %s", self.resource, pk, exc)
            return Result.fail(_describe(exc))

    def delete(self, pk) -> Result:
        try:
            obj = self._find(pk)
            if obj is None:
                return Result.ok(None)
            record = self.serialize(obj)
            obj.delete()
            return Result.ok(record)
        except DatabaseError as exc:
            logger.error("delete %s/%s failed: %s", self.resource, pk, exc)
            return Result.fail(_describe(exc))


# ---------------------------------------------------------------------------
# Entity specific repositories
# ---------------------------------------------------------------------------
class AppointmentRepository(EntityRepository):
    def prepare_create(self, data: dict) -> dict:
        data.setdefault('status', domain.APPOINTMENT_SCHEDULED)
        data.setdefault('duration', domain.DEFAULT_APPOINTMENT_DURATION)
        return data

    def check_update(self, current: dict, changes: dict) -> None:
        target = changes.get('status')
        if target is not None and target != current['status']:
            if not domain.can_transition_appointment(current['status'], target):
                raise InvalidTransition(
                    f"Cannot change appointment from {current['status']} to {target}"
                )
        slot = {k: changes[k] for k in ('date', 'time') if k in changes}
        old = self.mapping.to_row({k: current[k] for k in slot})
        moving = self.mapping.to_row(slot) != old
        if moving and current['status'] != domain.APPOINTMENT_SCHEDULED:
            raise InvalidTransition('Only scheduled appointments can be rescheduled')

    def after_create(self, record: dict) -> None:
        from clinic.services.notifications import create_notification
        message = f"New appointment scheduled for {record['patientName']} with {record['doctorName'] or 'a doctor'}"
        # best effort: the appointment exists whatever happens here
        result = create_notification(domain.NOTIFY_APPOINTMENT, message, related_id=record['id'])
        if not result.success:
            logger.warning("appointment %s created without notification: %s", record['id'], result.error)


class BillRepository(EntityRepository):
    def prepare_create(self, data: dict) -> dict:
        items = []
        for item in data.get('items') or []:
            if not isinstance(item, dict) or item.get('quantity') is None or item.get('unitPrice') is None:
                raise DomainError('Each item needs a quantity and unit price')
            amount = domain.line_amount(item['quantity'], item['unitPrice'])
            items.append({**item, 'amount': amount})
        if not items:
            raise DomainError('A bill needs at least one item')
        data['items'] = items
        data['totalAmount'] = domain.bill_total(items)
        data['paidAmount'] = Decimal('0')
        return data

    def check_update(self, current: dict, changes: dict) -> None:
        if 'paidAmount' in changes:
            new_paid = Decimal(str(changes['paidAmount']))
            if new_paid < Decimal(str(current['paidAmount'] or 0)):
                raise DomainError('Paid amount cannot decrease')
            total = Decimal(str(changes.get('totalAmount', current['totalAmount']) or 0))
            if new_paid > total:
                raise DomainError('Paid amount cannot exceed the bill total')


class LabTestRepository(EntityRepository):
    def prepare_create(self, data: dict) -> dict:
        data['status'] = domain.LAB_PENDING
        data.pop('result', None)
        data.pop('reportDate', None)
        return data

    def prepare_update(self, current: dict, changes: dict) -> dict:
        completing = changes.get('status') == domain.LAB_COMPLETED and current['status'] != domain.LAB_COMPLETED
        if completing and not changes.get('reportDate') and not current['reportDate']:
            changes['reportDate'] = timezone.localdate()
        return changes

    def check_update(self, current: dict, changes: dict) -> None:
        target = changes.get('status', current['status'])
        if target != current['status'] and not domain.can_advance_lab_test(current['status'], target):
            raise InvalidTransition(f"Cannot move lab test from {current['status']} to {target}")
        if changes.get('result') and target != domain.LAB_COMPLETED:
            raise DomainError('A result can only be recorded on a completed test')


class MedicineRepository(EntityRepository):
    def check_update(self, current: dict, changes: dict) -> None:
        if 'quantity' in changes and int(changes['quantity']) < 0:
            raise DomainError('Quantity cannot be negative')


class StaffUserRepository(EntityRepository):
    """Staff accounts; a plain ``password`` is hashed into ``passwordHash``."""

    def _hash_password(self, data: dict) -> dict:
        password = data.pop('password', None)
        data.pop('passwordHash', None)
        if password:
            data['passwordHash'] = make_password(password)
        return data

    def _check_doctor_link(self, role, doctor_id) -> None:
        if role not in domain.STAFF_ROLES:
            raise DomainError(f"Unknown staff role: {role}")
        if doctor_id and role != domain.ROLE_DOCTOR:
            raise DomainError('Only doctor accounts can be linked to a doctor record')

    def prepare_create(self, data: dict) -> dict:
        if not data.get('password'):
            raise DomainError('A password is required')
        self._check_doctor_link(data.get('role'), data.get('doctor_id'))
        return self._hash_password(data)

    def update(self, pk, changes: dict) -> Result:
        try:
            changes = self._hash_password(dict(changes))
        except (ValueError, TypeError) as exc:
            return Result.fail(_describe(exc), KIND_VALIDATION)
        return super().update(pk, changes)

    def check_update(self, current: dict, changes: dict) -> None:
        role = changes.get('role', current['role'])
        doctor_id = changes.get('doctor_id', current['doctor_id'])
        self._check_doctor_link(role, doctor_id)


patients = EntityRepository(transforms.PATIENT)
doctors = EntityRepository(transforms.DOCTOR)
appointments = AppointmentRepository(transforms.APPOINTMENT)
bills = BillRepository(transforms.BILL)
lab_tests = LabTestRepository(transforms.LAB_TEST)
medicines = MedicineRepository(transforms.MEDICINE)
staff_users = StaffUserRepository(transforms.STAFF_USER)
notifications = EntityRepository(transforms.NOTIFICATION)
consultations = EntityRepository(transforms.CONSULTATION)

REGISTRY: dict[str, EntityRepository] = {
    repo.resource: repo
    for repo in (
        patients, doctors, appointments, bills, lab_tests, medicines,
        staff_users, notifications, consultations,
    )
}
