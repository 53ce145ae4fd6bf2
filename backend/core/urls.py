"""
Core app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET/PUT/POST  /api/core/settings/      — Routing configuration (admin).
POST          /api/core/uploads/       — Upload one file.
GET           /api/core/uploads/       — List stored files (admin).
POST          /api/core/uploads/bulk/  — Upload several files.
GET           /api/core/constants/     — Choice enumerations.
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    path("settings/", views.SystemSettingsView.as_view(), name="system-settings"),
    path("uploads/", views.UploadView.as_view(), name="uploads"),
    path("uploads/bulk/", views.BulkUploadView.as_view(), name="uploads-bulk"),
    path("constants/", views.SystemConstantsView.as_view(), name="system-constants"),
]
