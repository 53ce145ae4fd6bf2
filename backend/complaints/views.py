"""
Complaints app ViewSets.

Views are intentionally thin:

    1. Parse / validate input via a serializer.
    2. Delegate to the matching service class.
    3. Serialize the result and return a DRF ``Response``.

ViewSets
--------
- ``ComplaintViewSet``  — complaint CRUD plus ``status``, ``assign`` and
  ``bulk`` actions.
- ``NatureTypeViewSet`` — nature-type catalogue.
- ``CommentViewSet``    — comment thread nested under a complaint, plus
  the ``react`` action.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.access import can
from core.permissions_constants import CommentActions

from .pagination import ComplaintPagination
from .serializers import (
    CommentCreateSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
    ComplaintAssignSerializer,
    ComplaintBulkActionSerializer,
    ComplaintCreateSerializer,
    ComplaintDetailSerializer,
    ComplaintFilterSerializer,
    ComplaintHistorySerializer,
    ComplaintListSerializer,
    ComplaintStatusSerializer,
    ComplaintUpdateSerializer,
    NatureTypeFilterSerializer,
    NatureTypeSerializer,
    NatureTypeWriteSerializer,
    ReactionSerializer,
)
from .services import (
    CommentService,
    ComplaintQueryService,
    ComplaintService,
    NatureTypeService,
)


# ═══════════════════════════════════════════════════════════════════
#  Complaints
# ═══════════════════════════════════════════════════════════════════


class ComplaintViewSet(viewsets.ViewSet):
    """
    /api/complaints/

    Uses ``viewsets.ViewSet`` so every endpoint is declared explicitly.
    Role scoping and object-level access live in the services.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def _detail_response(self, user, pk, *, http_status=status.HTTP_200_OK, enforce_access=True) -> Response:
        complaint = ComplaintQueryService.get_complaint_detail(user, pk, enforce_access=enforce_access)
        return Response(ComplaintDetailSerializer(complaint).data, status=http_status)

    @extend_schema(
        summary="List complaints",
        description=(
            "Paginated list scoped by role: admins see everything, managers "
            "their department and own assignments, employees their "
            "assignments, clients their own complaints."
        ),
        parameters=[ComplaintFilterSerializer],
        responses={200: ComplaintListSerializer(many=True)},
        tags=["Complaints"],
    )
    def list(self, request: Request) -> Response:
        filters = ComplaintFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        queryset = ComplaintQueryService.list_complaints(request.user, filters.validated_data)

        paginator = ComplaintPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = ComplaintListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(
        summary="File a complaint",
        description=(
            "Creates the complaint, routes it to a department and assigns the "
            "department manager. Stakeholders are notified over WhatsApp."
        ),
        request=ComplaintCreateSerializer,
        responses={
            201: ComplaintDetailSerializer,
            400: OpenApiResponse(description="Validation or routing error."),
            403: OpenApiResponse(description="Not allowed to file for another client."),
        },
        tags=["Complaints"],
    )
    def create(self, request: Request) -> Response:
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = ComplaintService.create_complaint(request.user, serializer.validated_data)
        return self._detail_response(
            request.user,
            complaint.pk,
            http_status=status.HTTP_201_CREATED,
            enforce_access=False,
        )

    @extend_schema(
        summary="Complaint detail",
        responses={
            200: ComplaintDetailSerializer,
            403: OpenApiResponse(description="Access denied."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        return self._detail_response(request.user, pk)

    @extend_schema(
        summary="Update complaint",
        request=ComplaintUpdateSerializer,
        responses={200: ComplaintDetailSerializer},
        tags=["Complaints"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = ComplaintUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = ComplaintService.update_complaint(request.user, pk, serializer.validated_data)
        return self._detail_response(request.user, complaint.pk)

    @extend_schema(
        summary="Delete complaint",
        responses={204: None, 403: OpenApiResponse(description="Admin access required.")},
        tags=["Complaints"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        ComplaintService.delete_complaint(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Change complaint status",
        request=ComplaintStatusSerializer,
        responses={
            200: ComplaintDetailSerializer,
            400: OpenApiResponse(description="Invalid status."),
        },
        tags=["Complaints"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request: Request, pk: str = None) -> Response:
        serializer = ComplaintStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        complaint = ComplaintService.change_status(
            request.user, pk, data["status"], remark=data.get("remark")
        )
        return self._detail_response(request.user, complaint.pk)

    @extend_schema(
        summary="Reassign complaint to a department",
        request=ComplaintAssignSerializer,
        responses={
            200: ComplaintDetailSerializer,
            400: OpenApiResponse(description="Invalid department."),
            403: OpenApiResponse(description="Admin access required."),
        },
        tags=["Complaints"],
    )
    @action(detail=True, methods=["post"], url_path="assign")
    def assign(self, request: Request, pk: str = None) -> Response:
        serializer = ComplaintAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        complaint = ComplaintService.assign_to_department(
            request.user, pk, data["department"], notes=data["notes"]
        )
        return self._detail_response(request.user, complaint.pk)

    @extend_schema(
        summary="Complaint history",
        description="Audit trail, newest first.",
        responses={200: ComplaintHistorySerializer(many=True)},
        tags=["Complaints"],
    )
    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request: Request, pk: str = None) -> Response:
        entries = ComplaintQueryService.list_history(request.user, pk)
        return Response(ComplaintHistorySerializer(entries, many=True).data)

    @extend_schema(
        summary="Bulk complaint action",
        request=ComplaintBulkActionSerializer,
        responses={200: OpenApiResponse(description="Action summary or exported rows.")},
        tags=["Complaints"],
    )
    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request: Request) -> Response:
        serializer = ComplaintBulkActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = ComplaintService.bulk_action(
            request.user,
            data["action"],
            data["complaint_ids"],
            new_status=data.get("new_status"),
            assignee_id=data.get("assignee_id"),
        )
        return Response(result)


# ═══════════════════════════════════════════════════════════════════
#  Nature Types
# ═══════════════════════════════════════════════════════════════════


class NatureTypeViewSet(viewsets.ViewSet):
    """/api/nature-types/ — readable by everyone, writable by admins."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List nature types",
        parameters=[NatureTypeFilterSerializer],
        responses={200: NatureTypeSerializer(many=True)},
        tags=["Nature Types"],
    )
    def list(self, request: Request) -> Response:
        filters = NatureTypeFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        nature_types = NatureTypeService.list_nature_types(
            request.user, include_inactive=filters.validated_data["include_inactive"]
        )
        return Response(NatureTypeSerializer(nature_types, many=True).data)

    @extend_schema(
        summary="Create nature type",
        request=NatureTypeWriteSerializer,
        responses={
            201: NatureTypeSerializer,
            409: OpenApiResponse(description="Name already exists."),
        },
        tags=["Nature Types"],
    )
    def create(self, request: Request) -> Response:
        serializer = NatureTypeWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        nature_type = NatureTypeService.create_nature_type(request.user, serializer.validated_data)
        return Response(NatureTypeSerializer(nature_type).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Nature type detail", responses={200: NatureTypeSerializer}, tags=["Nature Types"])
    def retrieve(self, request: Request, pk: str = None) -> Response:
        return Response(NatureTypeSerializer(NatureTypeService.get_nature_type(pk)).data)

    @extend_schema(
        summary="Update nature type",
        request=NatureTypeWriteSerializer,
        responses={200: NatureTypeSerializer},
        tags=["Nature Types"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = NatureTypeWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        nature_type = NatureTypeService.update_nature_type(
            request.user, pk, serializer.validated_data
        )
        return Response(NatureTypeSerializer(nature_type).data)

    @extend_schema(
        summary="Deactivate nature type",
        description="Soft delete: the type stays attached to existing complaints.",
        responses={200: NatureTypeSerializer},
        tags=["Nature Types"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        nature_type = NatureTypeService.deactivate_nature_type(request.user, pk)
        return Response(NatureTypeSerializer(nature_type).data)


# ═══════════════════════════════════════════════════════════════════
#  Comments
# ═══════════════════════════════════════════════════════════════════


class CommentViewSet(viewsets.ViewSet):
    """/api/complaints/{complaint_pk}/comments/"""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def _context(self, request: Request) -> dict:
        return {
            "request": request,
            "hide_internal": not can(request.user, CommentActions.VIEW_INTERNAL),
        }

    def _comment_response(self, request, complaint_pk, comment_pk, *, http_status=status.HTTP_200_OK):
        comment = CommentService.get_comment(request.user, complaint_pk, comment_pk)
        return Response(
            CommentSerializer(comment, context=self._context(request)).data,
            status=http_status,
        )

    @extend_schema(
        summary="List comments",
        description="Top-level comments, newest first, each with its replies.",
        responses={200: CommentSerializer(many=True)},
        tags=["Comments"],
    )
    def list(self, request: Request, complaint_pk: str = None) -> Response:
        comments = CommentService.list_comments(request.user, complaint_pk)
        return Response(CommentSerializer(comments, many=True, context=self._context(request)).data)

    @extend_schema(
        summary="Add comment",
        request=CommentCreateSerializer,
        responses={
            201: CommentSerializer,
            400: OpenApiResponse(description="Empty comment or foreign parent."),
        },
        tags=["Comments"],
    )
    def create(self, request: Request, complaint_pk: str = None) -> Response:
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = CommentService.create_comment(request.user, complaint_pk, serializer.validated_data)
        return self._comment_response(
            request, complaint_pk, comment.pk, http_status=status.HTTP_201_CREATED
        )

    @extend_schema(summary="Comment detail", responses={200: CommentSerializer}, tags=["Comments"])
    def retrieve(self, request: Request, complaint_pk: str = None, pk: str = None) -> Response:
        return self._comment_response(request, complaint_pk, pk)

    @extend_schema(
        summary="Edit comment",
        request=CommentUpdateSerializer,
        responses={200: CommentSerializer},
        tags=["Comments"],
    )
    def partial_update(self, request: Request, complaint_pk: str = None, pk: str = None) -> Response:
        serializer = CommentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = CommentService.update_comment(
            request.user, complaint_pk, pk, serializer.validated_data["content"]
        )
        return self._comment_response(request, complaint_pk, comment.pk)

    @extend_schema(summary="Delete comment", responses={204: None}, tags=["Comments"])
    def destroy(self, request: Request, complaint_pk: str = None, pk: str = None) -> Response:
        CommentService.delete_comment(request.user, complaint_pk, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="React to comment",
        description="Same reaction again removes it; a different one replaces it.",
        request=ReactionSerializer,
        responses={200: CommentSerializer},
        tags=["Comments"],
    )
    @action(detail=True, methods=["post"], url_path="react")
    def react(self, request: Request, complaint_pk: str = None, pk: str = None) -> Response:
        serializer = ReactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = CommentService.react(
            request.user, complaint_pk, pk, serializer.validated_data["type"]
        )
        return Response(CommentSerializer(comment, context=self._context(request)).data)
