"""
Database models for the hospital management backend.

Every record is flat and keyed by a UUID.  Cross-record links are plain
string columns (``patient_id``, ``doctor_id``) with a copy of the
display name stored alongside; those copies are written once and are
not refreshed when the source record is renamed.  Table names match the
ones the front-end talks about (``patients``, ``lab_tests`` ...).
"""
from __future__ import annotations

import uuid

from django.db import models
from django.utils import timezone

from clinic import domain


class Record(models.Model):
    """Common id/created_at columns."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        abstract = True


class Patient(Record):
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(default=0)
    gender = models.CharField(max_length=10, choices=domain.choices(domain.GENDERS), default='Other')
    phone = models.CharField(max_length=32)
    email = models.CharField(max_length=255, blank=True, default='')
    address = models.TextField(blank=True, default='')
    blood_group = models.CharField(max_length=8, blank=True, default='')
    registration_date = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=10, choices=domain.choices(domain.PATIENT_STATUSES),
        default=domain.PATIENT_ACTIVE, db_index=True,
    )

    class Meta:
        db_table = 'patients'

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Doctor(Record):
    name = models.CharField(max_length=255)
    specialization = models.CharField(max_length=255, blank=True, default='')
    phone = models.CharField(max_length=32, blank=True, default='')
    email = models.CharField(max_length=255, blank=True, default='')
    availability = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=10, choices=domain.choices(domain.DOCTOR_STATUSES),
        default=domain.DOCTOR_AVAILABLE, db_index=True,
    )
    # Added after the first release; older rows pick up the default.
    consultation_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=domain.DEFAULT_CONSULTATION_FEE,
    )

    class Meta:
        db_table = 'doctors'

    def __str__(self) -> str:
        return f"{self.name} ({self.specialization})"


class Appointment(Record):
    patient_id = models.CharField(max_length=64, blank=True, default='', db_index=True)
    patient_name = models.CharField(max_length=255)
    doctor_id = models.CharField(max_length=64, db_index=True)
    doctor_name = models.CharField(max_length=255, blank=True, default='')
    date = models.DateField(db_index=True)
    time = models.TimeField()
    duration = models.PositiveIntegerField(default=domain.DEFAULT_APPOINTMENT_DURATION)
    status = models.CharField(
        max_length=12, choices=domain.choices(domain.APPOINTMENT_STATUSES),
        default=domain.APPOINTMENT_SCHEDULED, db_index=True,
    )
    type = models.CharField(
        max_length=16, choices=domain.choices(domain.APPOINTMENT_TYPES), default='Consultation',
    )
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'appointments'
        indexes = [models.Index(fields=['doctor_id', 'date', 'time'])]

    def __str__(self) -> str:
        return f"{self.patient_name} with {self.doctor_name} @ {self.date} {self.time}"


class Bill(Record):
    patient_id = models.CharField(max_length=64, blank=True, default='', db_index=True)
    patient_name = models.CharField(max_length=255)
    items = models.JSONField(default=list, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(
        max_length=10, choices=domain.choices(domain.BILL_STATUSES),
        default=domain.BILL_PENDING, db_index=True,
    )
    date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'bills'

    def save(self, *args, **kwargs):
        # status is always a function of the stored amounts
        self.status = domain.bill_status(self.total_amount, self.paid_amount)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'status' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['status']
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Bill {self.id} for {self.patient_name} ({self.status})"


class LabTest(Record):
    patient_id = models.CharField(max_length=64, blank=True, default='', db_index=True)
    patient_name = models.CharField(max_length=255)
    test_name = models.CharField(max_length=255)
    test_type = models.CharField(max_length=64, blank=True, default='')
    requested_by = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(
        max_length=12, choices=domain.choices(domain.LAB_STATUSES),
        default=domain.LAB_PENDING, db_index=True,
    )
    result = models.TextField(blank=True, null=True)
    date = models.DateField(default=timezone.localdate)
    report_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'lab_tests'

    def __str__(self) -> str:
        return f"{self.test_name} for {self.patient_name} ({self.status})"


class Medicine(Record):
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=128, blank=True, default='')
    quantity = models.PositiveIntegerField(default=0)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    expiry_date = models.DateField(null=True, blank=True)
    manufacturer = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(
        max_length=14, choices=domain.choices(domain.STOCK_STATUSES),
        default=domain.STOCK_OUT, db_index=True,
    )

    class Meta:
        db_table = 'medicines'

    def save(self, *args, **kwargs):
        self.status = domain.medicine_status(self.quantity)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'status' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['status']
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity}"


class StaffUser(Record):
    """A non-admin operational account scoped to one panel."""
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=domain.choices(domain.STAFF_ROLES), db_index=True)
    username = models.CharField(max_length=150, unique=True)
    password_hash = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)
    # Only meaningful for role == 'doctor'.
    doctor_id = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        db_table = 'staff_users'

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Notification(Record):
    type = models.CharField(
        max_length=12, choices=domain.choices(domain.NOTIFICATION_TYPES), default=domain.NOTIFY_OTHER,
    )
    message = models.TextField()
    read = models.BooleanField(default=False, db_index=True)
    related_id = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        db_table = 'notifications'

    def __str__(self) -> str:
        return f"[{self.type}] {self.message[:40]}"


class AdminUser(Record):
    """The administrator identity; separate from staff accounts."""
    username = models.CharField(max_length=150, unique=True)
    password_hash = models.CharField(max_length=255)

    class Meta:
        db_table = 'admin_users'

    def __str__(self) -> str:
        return self.username


class HospitalSettings(Record):
    hospital_name = models.CharField(max_length=255, default='Hospital Management System')
    logo_url = models.CharField(max_length=1024, null=True, blank=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'hospital_settings'
        verbose_name_plural = 'hospital settings'

    def __str__(self) -> str:
        return self.hospital_name


class Consultation(Record):
    """Diagnosis and prescription recorded against an appointment."""
    appointment_id = models.CharField(max_length=64, blank=True, default='')
    patient_id = models.CharField(max_length=64, db_index=True)
    doctor_id = models.CharField(max_length=64, db_index=True)
    diagnosis = models.TextField()
    prescription = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')
    date = models.DateField(default=timezone.localdate)
    follow_up_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'consultations'

    def __str__(self) -> str:
        return f"consultation p={self.patient_id} d={self.doctor_id} {self.date}"


class AuditEvent(models.Model):
    actor = models.CharField(max_length=150, blank=True, default='')
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]

    def __str__(self):
        return f"{self.action}:{self.actor}@{self.created_at:%F %T}"
