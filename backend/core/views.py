"""
Core app views.

Cross-app endpoints that are not owned by a single domain app:

- ``SystemSettingsView``  — routing configuration (admin).
- ``UploadView``          — single-file upload and admin listing.
- ``BulkUploadView``      — multi-file upload.
- ``SystemConstantsView`` — choice enumerations for the frontend.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    BulkUploadSerializer,
    StoredFileSerializer,
    SystemConstantsSerializer,
    SystemSettingsSerializer,
    UploadedFileSerializer,
    UploadSerializer,
)
from .services import SystemConstantsService, SystemSettingsService, UploadService


class SystemSettingsView(APIView):
    """
    **GET / PUT / POST /api/core/settings/**

    Admin-only read and replace of the auto-routing configuration.
    ``POST`` is accepted as an alias of ``PUT``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get system settings",
        responses={200: SystemSettingsSerializer},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        system = SystemSettingsService.get_settings(request.user)
        return Response(SystemSettingsSerializer(system).data)

    @extend_schema(
        summary="Update system settings",
        request=SystemSettingsSerializer,
        responses={
            200: SystemSettingsSerializer,
            400: OpenApiResponse(description="Unknown department or malformed payload."),
        },
        tags=["System"],
    )
    def put(self, request: Request) -> Response:
        serializer = SystemSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        system = SystemSettingsService.update_settings(request.user, serializer.validated_data)
        return Response(SystemSettingsSerializer(system).data)

    @extend_schema(
        summary="Update system settings",
        request=SystemSettingsSerializer,
        responses={200: SystemSettingsSerializer},
        tags=["System"],
    )
    def post(self, request: Request) -> Response:
        return self.put(request)


class UploadView(APIView):
    """
    **POST /api/core/uploads/** — store one file (any authenticated user).
    **GET  /api/core/uploads/** — list stored files (admin).
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="Upload a file",
        request={"multipart/form-data": UploadSerializer},
        responses={
            201: UploadedFileSerializer,
            400: OpenApiResponse(description="Missing file, bad type or too large."),
        },
        tags=["Uploads"],
    )
    def post(self, request: Request) -> Response:
        serializer = UploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        stored = UploadService.store(data["file"], data["type"])
        return Response(UploadedFileSerializer(stored).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="List uploaded files",
        responses={200: StoredFileSerializer(many=True)},
        tags=["Uploads"],
    )
    def get(self, request: Request) -> Response:
        files = UploadService.list_files(request.user)
        return Response({"files": StoredFileSerializer(files, many=True).data})


class BulkUploadView(APIView):
    """**POST /api/core/uploads/bulk/** — store several files at once."""

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="Upload several files",
        request={"multipart/form-data": BulkUploadSerializer},
        responses={200: OpenApiResponse(description="Stored files and per-file errors.")},
        tags=["Uploads"],
    )
    def post(self, request: Request) -> Response:
        serializer = BulkUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = UploadService.store_many(data["files"], data["type"])
        return Response({
            "files": UploadedFileSerializer(result["files"], many=True).data,
            "errors": result["errors"],
        })


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Complaint statuses, roles, reaction types and upload types, so the
    frontend does not hardcode them.  Public.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="System constants",
        responses={200: SystemConstantsSerializer},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        return Response(SystemConstantsSerializer(data).data)
