import bleach
from rest_framework import serializers

from clinic import domain


class SearchQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=domain.APPOINTMENT_STATUSES)


class RescheduleSerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.TimeField()


class DayQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class PaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)

    def validate_amount(self, v):
        if v <= 0:
            raise serializers.ValidationError('Please enter a valid amount')
        return v


class LabResultSerializer(serializers.Serializer):
    result = serializers.CharField()

    def validate_result(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Please enter a result')
        return v


class StockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(required=False, min_value=0)
    delta = serializers.IntegerField(required=False)

    def validate(self, attrs):
        if ('quantity' in attrs) == ('delta' in attrs):
            raise serializers.ValidationError('Give either a quantity or an adjustment')
        return attrs


class PortalAppointmentSerializer(serializers.Serializer):
    doctorId = serializers.CharField(max_length=64)
    date = serializers.DateField()
    time = serializers.TimeField()
    type = serializers.ChoiceField(choices=domain.APPOINTMENT_TYPES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class SettingsFunctionSerializer(serializers.Serializer):
    action = serializers.CharField()
    hospitalName = serializers.CharField(required=False, allow_blank=True, max_length=255)
    logoUrl = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1024)


class DatastoreFunctionSerializer(serializers.Serializer):
    action = serializers.CharField()
    collection = serializers.CharField(required=False, allow_blank=True)
    filter = serializers.DictField(required=False)
    data = serializers.DictField(required=False)
    update = serializers.DictField(required=False)
    pipeline = serializers.ListField(child=serializers.DictField(), required=False)


class LogoUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
