"""
WhatsApp admin views.

    GET  /api/notifications/whatsapp/test/      → configured flag + connection state
    POST /api/notifications/whatsapp/test/      → send the test template
    GET  /api/notifications/whatsapp/settings/  → masked gateway settings
    POST /api/notifications/whatsapp/send/      → send an arbitrary message
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .admin_services import WhatsAppAdminService
from .serializers import (
    WhatsAppMessageSerializer,
    WhatsAppSendResultSerializer,
    WhatsAppSettingsSerializer,
)


class WhatsAppTestView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="WhatsApp connection status",
        responses={200: OpenApiResponse(description="Configured flag and connection state.")},
        tags=["WhatsApp"],
    )
    def get(self, request: Request) -> Response:
        return Response(WhatsAppAdminService.connection_status(request.user))

    @extend_schema(
        summary="Send WhatsApp test message",
        request=WhatsAppMessageSerializer,
        responses={200: WhatsAppSendResultSerializer},
        tags=["WhatsApp"],
    )
    def post(self, request: Request) -> Response:
        serializer = WhatsAppMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = WhatsAppAdminService.send(
            request.user,
            serializer.validated_data["phone"],
            serializer.validated_data["message"],
            as_test=True,
        )
        return Response(WhatsAppSendResultSerializer(result).data)


class WhatsAppSettingsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="WhatsApp gateway settings",
        description="API key is masked.",
        responses={200: WhatsAppSettingsSerializer},
        tags=["WhatsApp"],
    )
    def get(self, request: Request) -> Response:
        settings = WhatsAppAdminService.masked_settings(request.user)
        return Response(WhatsAppSettingsSerializer(settings).data)


class WhatsAppSendView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Send WhatsApp message",
        request=WhatsAppMessageSerializer,
        responses={200: WhatsAppSendResultSerializer},
        tags=["WhatsApp"],
    )
    def post(self, request: Request) -> Response:
        serializer = WhatsAppMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = WhatsAppAdminService.send(
            request.user,
            serializer.validated_data["phone"],
            serializer.validated_data["message"],
        )
        return Response(WhatsAppSendResultSerializer(result).data)
