"""
Complaints app URL configuration.

Included from ``backend/urls.py`` as::

    path("api/", include("complaints.urls")),

    GET/POST          /api/complaints/
    GET/PATCH/DELETE  /api/complaints/{id}/
    PATCH             /api/complaints/{id}/status/
    GET               /api/complaints/{id}/history/
    POST              /api/complaints/{id}/assign/
    POST              /api/complaints/bulk/
    GET/POST          /api/complaints/{complaint_pk}/comments/
    GET/PATCH/DELETE  /api/complaints/{complaint_pk}/comments/{id}/
    POST              /api/complaints/{complaint_pk}/comments/{id}/react/
    GET/POST          /api/nature-types/
    GET/PATCH/DELETE  /api/nature-types/{id}/
"""

from rest_framework.routers import DefaultRouter
from rest_framework_nested.routers import NestedDefaultRouter

from .views import CommentViewSet, ComplaintViewSet, NatureTypeViewSet

router = DefaultRouter()
router.register(r"complaints", ComplaintViewSet, basename="complaint")
router.register(r"nature-types", NatureTypeViewSet, basename="nature-type")

complaints_router = NestedDefaultRouter(router, r"complaints", lookup="complaint")
complaints_router.register(r"comments", CommentViewSet, basename="complaint-comment")

urlpatterns = router.urls + complaints_router.urls
