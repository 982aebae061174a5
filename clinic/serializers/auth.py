from rest_framework import serializers

from clinic import domain


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class StaffLoginSerializer(LoginSerializer):
    role = serializers.ChoiceField(choices=domain.STAFF_ROLES)


class AuthFunctionSerializer(serializers.Serializer):
    """Body of ``/functions/v1/auth``; per-action fields are checked by the view."""
    action = serializers.CharField()
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True)
    token = serializers.CharField(required=False, allow_blank=True)


class PortalRegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=6, write_only=True)
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)

    def validate_username(self, v):
        from django.contrib.auth import get_user_model
        v = (v or '').strip()
        if get_user_model().objects.filter(username=v).exists():
            raise serializers.ValidationError('Username already taken')
        return v
