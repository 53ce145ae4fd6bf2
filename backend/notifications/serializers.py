"""Request/response shapes for the WhatsApp admin endpoints."""

from rest_framework import serializers


class WhatsAppMessageSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=32)
    message = serializers.CharField(max_length=4096)

    def validate_phone(self, value: str) -> str:
        if not any(ch.isdigit() for ch in value):
            raise serializers.ValidationError("Phone number must contain digits.")
        return value.strip()


class WhatsAppSettingsSerializer(serializers.Serializer):
    configured = serializers.BooleanField(read_only=True)
    instance_id = serializers.CharField(read_only=True)
    api_key = serializers.CharField(read_only=True)
    base_url = serializers.CharField(read_only=True)
    default_country_code = serializers.CharField(read_only=True)


class WhatsAppSendResultSerializer(serializers.Serializer):
    success = serializers.BooleanField(read_only=True)
    chat_id = serializers.CharField(read_only=True)
    status_code = serializers.IntegerField(read_only=True, allow_null=True)
    error = serializers.CharField(read_only=True, allow_blank=True)
