"""
Field mapping between API records and database rows.

API records use camelCase keys and JSON-friendly values (ISO date
strings, ``"HH:MM"`` times, floats for money).  Rows use the snake_case
column names of the tables and the Python types the ORM expects.  Each
entity declares its fields once in an :class:`EntityMapping`; the column
name is derived from the field name unless it is given explicitly.
"""
from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from django.db import models as dj_models

from clinic import models

TEXT = 'text'
INT = 'int'
DECIMAL = 'decimal'
DATE = 'date'
TIME = 'time'
BOOL = 'bool'
LIST = 'list'
DATETIME = 'datetime'
ITEMS = 'items'

_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')


def camel_to_snake(name: str) -> str:
    return _CAMEL_RE.sub('_', name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------
def _date_to_row(value):
    if value in (None, ''):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def _date_from_row(value):
    if value is None:
        return None
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)


def _time_to_row(value):
    if value in (None, ''):
        return None
    if isinstance(value, datetime.time):
        return value.replace(second=0, microsecond=0)
    return datetime.time.fromisoformat(str(value))


def _time_from_row(value):
    if value is None:
        return None
    if isinstance(value, datetime.time):
        return value.strftime('%H:%M')
    return str(value)[:5]


def _decimal_to_row(value):
    if value in (None, ''):
        return None
    return Decimal(str(value))


def _decimal_from_row(value):
    if value is None:
        return None
    return float(value)


def _datetime_from_row(value):
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    return str(value)


def _items_to_row(value):
    """Bill line items as stored in the JSON column."""
    rows = []
    for item in value or []:
        if not isinstance(item, dict):
            raise ValueError('Bill items must be objects')
        rows.append({
            'description': str(item.get('description', '')),
            'quantity': int(item.get('quantity', 0)),
            'unitPrice': float(item.get('unitPrice', 0)),
            'amount': float(item.get('amount', 0)),
        })
    return rows


def _identity(value):
    return value


def _int_or_none(value):
    if value in (None, ''):
        return None
    return int(value)


def _bool(value):
    if isinstance(value, str):
        return value.strip().lower() in {'1', 'true', 'yes'}
    return bool(value)


def _text(value):
    return value if value is None else str(value)


def _list(value):
    return list(value or [])


_TO_ROW: dict[str, Callable[[Any], Any]] = {
    TEXT: _text,
    INT: _int_or_none,
    DECIMAL: _decimal_to_row,
    DATE: _date_to_row,
    TIME: _time_to_row,
    BOOL: _bool,
    LIST: _list,
    DATETIME: _identity,
    ITEMS: _items_to_row,
}

_FROM_ROW: dict[str, Callable[[Any], Any]] = {
    TEXT: _identity,
    INT: _identity,
    DECIMAL: _decimal_from_row,
    DATE: _date_from_row,
    TIME: _time_from_row,
    BOOL: bool,
    LIST: _list,
    DATETIME: _datetime_from_row,
    ITEMS: _items_to_row,
}


# ---------------------------------------------------------------------------
# Mappings
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Field:
    name: str
    column: str = ''
    kind: str = TEXT
    writable: bool = True

    @property
    def column_name(self) -> str:
        return self.column or camel_to_snake(self.name)


@dataclass(frozen=True)
class EntityMapping:
    """How one table's rows look as API records."""
    resource: str
    model: type[dj_models.Model]
    fields: tuple[Field, ...]
    ordering: tuple[str, ...] = ('-created_at',)
    search_columns: tuple[str, ...] = ()
    hidden_columns: tuple[str, ...] = field(default=())

    def field_for(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def to_row(self, record: dict, *, partial: bool = False) -> dict:
        """Translate the keys present in ``record`` into column values.

        ``id`` and read-only fields are never written.  Keys the entity
        does not know are ignored.
        """
        row: dict[str, Any] = {}
        for f in self.fields:
            if not f.writable or f.name not in record:
                continue
            row[f.column_name] = _TO_ROW[f.kind](record[f.name])
        return row

    def from_row(self, row: dict) -> dict:
        """Full API record for a row dict (or a model instance)."""
        if isinstance(row, dj_models.Model):
            row = row_of(row)
        record: dict[str, Any] = {'id': str(row['id']) if row.get('id') is not None else None}
        for f in self.fields:
            column = f.column_name
            if column in self.hidden_columns:
                continue
            record[f.name] = _FROM_ROW[f.kind](row.get(column))
        return record

    def columns(self) -> Iterable[str]:
        return (f.column_name for f in self.fields)


def row_of(instance: dj_models.Model) -> dict:
    """Column values of a saved instance."""
    return {f.attname: getattr(instance, f.attname) for f in instance._meta.concrete_fields}


PATIENT = EntityMapping(
    resource='patients',
    model=models.Patient,
    fields=(
        Field('name'),
        Field('age', kind=INT),
        Field('gender'),
        Field('phone'),
        Field('email'),
        Field('address'),
        Field('bloodGroup'),
        Field('registrationDate', kind=DATE),
        Field('status'),
    ),
    search_columns=('name', 'phone', 'email'),
)

DOCTOR = EntityMapping(
    resource='doctors',
    model=models.Doctor,
    fields=(
        Field('name'),
        Field('specialization'),
        Field('phone'),
        Field('email'),
        Field('availability', kind=LIST),
        Field('status'),
        Field('consultationFee', kind=DECIMAL),
    ),
    search_columns=('name', 'specialization'),
)

APPOINTMENT = EntityMapping(
    resource='appointments',
    model=models.Appointment,
    fields=(
        Field('patientId'),
        Field('patientName'),
        Field('doctorId'),
        Field('doctorName'),
        Field('date', kind=DATE),
        Field('time', kind=TIME),
        Field('duration', kind=INT),
        Field('status'),
        Field('type'),
        Field('notes'),
    ),
    ordering=('-date', '-time', '-created_at'),
    search_columns=('patient_name', 'doctor_name'),
)

BILL = EntityMapping(
    resource='bills',
    model=models.Bill,
    fields=(
        Field('patientId'),
        Field('patientName'),
        Field('items', kind=ITEMS),
        Field('totalAmount', kind=DECIMAL),
        Field('paidAmount', kind=DECIMAL),
        Field('status', writable=False),
        Field('date', kind=DATE),
        Field('dueDate', kind=DATE),
    ),
    search_columns=('patient_name',),
)

LAB_TEST = EntityMapping(
    resource='lab-tests',
    model=models.LabTest,
    fields=(
        Field('patientId'),
        Field('patientName'),
        Field('testName'),
        Field('testType'),
        Field('requestedBy'),
        Field('status'),
        Field('result'),
        Field('date', kind=DATE),
        Field('reportDate', kind=DATE),
    ),
    ordering=('-date', '-created_at'),
    search_columns=('patient_name', 'test_name'),
)

MEDICINE = EntityMapping(
    resource='medicines',
    model=models.Medicine,
    fields=(
        Field('name'),
        Field('category'),
        Field('quantity', kind=INT),
        Field('unitPrice', kind=DECIMAL),
        Field('expiryDate', kind=DATE),
        Field('manufacturer'),
        Field('status', writable=False),
    ),
    search_columns=('name', 'category'),
)

STAFF_USER = EntityMapping(
    resource='staff-users',
    model=models.StaffUser,
    fields=(
        Field('name'),
        Field('role'),
        Field('username'),
        Field('passwordHash', column='password_hash'),
        Field('is_active', column='is_active', kind=BOOL),
        Field('doctor_id', column='doctor_id'),
    ),
    search_columns=('name', 'username'),
    hidden_columns=('password_hash',),
)

NOTIFICATION = EntityMapping(
    resource='notifications',
    model=models.Notification,
    fields=(
        Field('type'),
        Field('message'),
        Field('read', kind=BOOL),
        Field('created_at', column='created_at', kind=DATETIME, writable=False),
        Field('related_id', column='related_id'),
    ),
    search_columns=('message',),
)

CONSULTATION = EntityMapping(
    resource='consultations',
    model=models.Consultation,
    fields=(
        Field('appointmentId'),
        Field('patientId'),
        Field('doctorId'),
        Field('diagnosis'),
        Field('prescription'),
        Field('notes'),
        Field('date', kind=DATE),
        Field('followUpDate', kind=DATE),
    ),
    search_columns=('diagnosis',),
)

HOSPITAL_SETTINGS = EntityMapping(
    resource='hospital-settings',
    model=models.HospitalSettings,
    fields=(
        Field('hospital_name', column='hospital_name'),
        Field('logo_url', column='logo_url'),
        Field('updated_at', column='updated_at', kind=DATETIME, writable=False),
    ),
)
