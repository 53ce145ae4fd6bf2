"""
Departments app views.

Thin ``ViewSet``: parse input, delegate to ``DepartmentService``,
serialize the result.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    DepartmentDetailSerializer,
    DepartmentFilterSerializer,
    DepartmentListSerializer,
    DepartmentWriteSerializer,
)
from .services import DepartmentService


class DepartmentViewSet(viewsets.ViewSet):
    """
    /api/departments/

    Any authenticated user may list and read departments; writes are
    admin-only (enforced in the service).
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List departments",
        parameters=[DepartmentFilterSerializer],
        responses={200: DepartmentListSerializer(many=True)},
        tags=["Departments"],
    )
    def list(self, request: Request) -> Response:
        filters = DepartmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        departments = DepartmentService.list_departments(
            request.user,
            include_inactive=filters.validated_data["include_inactive"],
        )
        return Response(DepartmentListSerializer(departments, many=True).data)

    @extend_schema(
        summary="Create department",
        request=DepartmentWriteSerializer,
        responses={
            201: DepartmentListSerializer,
            409: OpenApiResponse(description="Department name already exists."),
        },
        tags=["Departments"],
    )
    def create(self, request: Request) -> Response:
        serializer = DepartmentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        department = DepartmentService.create_department(request.user, serializer.validated_data)
        return Response(
            DepartmentListSerializer(department).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        summary="Department detail",
        description="Department with active members and complaint statistics.",
        responses={200: DepartmentDetailSerializer},
        tags=["Departments"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        department = DepartmentService.get_department_detail(pk)
        return Response(DepartmentDetailSerializer(department).data)

    @extend_schema(
        summary="Update department",
        request=DepartmentWriteSerializer,
        responses={200: DepartmentListSerializer},
        tags=["Departments"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = DepartmentWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        department = DepartmentService.update_department(
            request.user, pk, serializer.validated_data
        )
        return Response(DepartmentListSerializer(department).data)

    @extend_schema(summary="Delete department", responses={204: None}, tags=["Departments"])
    def destroy(self, request: Request, pk: str = None) -> Response:
        DepartmentService.delete_department(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
