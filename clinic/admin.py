"""
Django admin registrations for the clinic models.
"""
from django.contrib import admin

from .models import (
    AdminUser,
    Appointment,
    AuditEvent,
    Bill,
    Consultation,
    Doctor,
    HospitalSettings,
    LabTest,
    Medicine,
    Notification,
    Patient,
    StaffUser,
)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('name', 'age', 'gender', 'phone', 'status', 'registration_date')
    list_filter = ('status', 'gender')
    search_fields = ('name', 'phone', 'email')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('name', 'specialization', 'status', 'consultation_fee')
    list_filter = ('status', 'specialization')
    search_fields = ('name', 'specialization')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'doctor_name', 'date', 'time', 'status', 'type')
    list_filter = ('status', 'type', 'date')
    search_fields = ('patient_name', 'doctor_name')


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'total_amount', 'paid_amount', 'status', 'date', 'due_date')
    list_filter = ('status',)
    search_fields = ('patient_name',)
    readonly_fields = ('status',)


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ('test_name', 'patient_name', 'test_type', 'status', 'date', 'report_date')
    list_filter = ('status', 'test_type')
    search_fields = ('test_name', 'patient_name')


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'quantity', 'unit_price', 'status', 'expiry_date')
    list_filter = ('status', 'category')
    search_fields = ('name', 'category', 'manufacturer')
    readonly_fields = ('status',)


@admin.register(StaffUser)
class StaffUserAdmin(admin.ModelAdmin):
    list_display = ('username', 'name', 'role', 'is_active', 'doctor_id')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'name')
    exclude = ('password_hash',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('type', 'message', 'read', 'created_at')
    list_filter = ('type', 'read')


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('patient_id', 'doctor_id', 'diagnosis', 'date', 'follow_up_date')
    search_fields = ('diagnosis',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'actor', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('actor', 'object_id')


admin.site.register(AdminUser)
admin.site.register(HospitalSettings)
