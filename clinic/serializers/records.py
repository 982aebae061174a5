"""
Input validation for the record endpoints.

Field names are the camelCase keys of the API records.  Serializers only
validate; the repositories own the mapping to columns and the business
rules.  ``partial=True`` is used for updates so only the keys sent are
checked and forwarded.
"""
import bleach
from rest_framework import serializers

from clinic import domain


def _clean(v):
    if v is None:
        return v
    return bleach.clean(v.strip(), strip=True)


class PatientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=0, max_value=150)
    gender = serializers.ChoiceField(choices=domain.GENDERS)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    bloodGroup = serializers.CharField(required=False, allow_blank=True, max_length=8)
    registrationDate = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=domain.PATIENT_STATUSES, required=False)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_address(self, v):
        return _clean(v)


class DoctorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    specialization = serializers.CharField(max_length=255)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    availability = serializers.ListField(child=serializers.ChoiceField(choices=domain.WEEKDAYS), required=False)
    status = serializers.ChoiceField(choices=domain.DOCTOR_STATUSES, required=False)
    consultationFee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)

    def validate_name(self, v):
        return _clean(v)


class AppointmentSerializer(serializers.Serializer):
    patientId = serializers.CharField(required=False, allow_blank=True, max_length=64)
    patientName = serializers.CharField(max_length=255)
    doctorId = serializers.CharField(max_length=64)
    doctorName = serializers.CharField(required=False, allow_blank=True, max_length=255)
    date = serializers.DateField()
    time = serializers.TimeField()
    duration = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=domain.APPOINTMENT_STATUSES, required=False)
    type = serializers.ChoiceField(choices=domain.APPOINTMENT_TYPES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_notes(self, v):
        return _clean(v)


class BillItemSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    unitPrice = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    def validate_description(self, v):
        return _clean(v)


class BillSerializer(serializers.Serializer):
    patientId = serializers.CharField(required=False, allow_blank=True, max_length=64)
    patientName = serializers.CharField(max_length=255)
    items = BillItemSerializer(many=True, allow_empty=False)
    paidAmount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    date = serializers.DateField(required=False)
    dueDate = serializers.DateField(required=False, allow_null=True)

    def validate_items(self, items):
        # amounts are kept on the record for display; totals are not recomputed on edit
        return [
            {**item, 'amount': domain.line_amount(item['quantity'], item['unitPrice'])}
            for item in items
        ]


class LabTestSerializer(serializers.Serializer):
    patientId = serializers.CharField(required=False, allow_blank=True, max_length=64)
    patientName = serializers.CharField(max_length=255)
    testName = serializers.CharField(max_length=255)
    testType = serializers.CharField(required=False, allow_blank=True, max_length=64)
    requestedBy = serializers.CharField(required=False, allow_blank=True, max_length=255)
    status = serializers.ChoiceField(choices=domain.LAB_STATUSES, required=False)
    result = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    date = serializers.DateField(required=False)
    reportDate = serializers.DateField(required=False, allow_null=True)

    def validate_result(self, v):
        return _clean(v)


class MedicineSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(required=False, allow_blank=True, max_length=128)
    quantity = serializers.IntegerField(min_value=0)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    expiryDate = serializers.DateField(required=False, allow_null=True)
    manufacturer = serializers.CharField(required=False, allow_blank=True, max_length=255)


class StaffUserSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=domain.STAFF_ROLES)
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, min_length=4)
    is_active = serializers.BooleanField(required=False)
    doctor_id = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=64)

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_doctor_id(self, v):
        return v or None


class ConsultationSerializer(serializers.Serializer):
    appointmentId = serializers.CharField(required=False, allow_blank=True, max_length=64)
    patientId = serializers.CharField(max_length=64)
    doctorId = serializers.CharField(max_length=64)
    diagnosis = serializers.CharField()
    prescription = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateField(required=False)
    followUpDate = serializers.DateField(required=False, allow_null=True)

    def validate_diagnosis(self, v):
        return _clean(v)

    def validate_prescription(self, v):
        return _clean(v)

    def validate_notes(self, v):
        return _clean(v)


RECORD_SERIALIZERS = {
    'patients': PatientSerializer,
    'doctors': DoctorSerializer,
    'appointments': AppointmentSerializer,
    'bills': BillSerializer,
    'lab-tests': LabTestSerializer,
    'medicines': MedicineSerializer,
    'staff-users': StaffUserSerializer,
    'consultations': ConsultationSerializer,
}
