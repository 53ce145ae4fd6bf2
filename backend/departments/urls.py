"""
Departments app URL configuration.

Included from ``backend/urls.py`` as::

    path("api/", include("departments.urls")),

    GET    /api/departments/         → list
    POST   /api/departments/         → create (admin)
    GET    /api/departments/{id}/    → retrieve (with members + statistics)
    PATCH  /api/departments/{id}/    → partial_update (admin)
    DELETE /api/departments/{id}/    → destroy (admin)
"""

from rest_framework.routers import DefaultRouter

from .views import DepartmentViewSet

router = DefaultRouter()
router.register(r"departments", DepartmentViewSet, basename="department")

urlpatterns = router.urls
