"""
Notifications app URL configuration.

Included from ``backend/urls.py`` as::

    path("api/notifications/", include("notifications.urls")),
"""

from django.urls import path

from .views import WhatsAppSendView, WhatsAppSettingsView, WhatsAppTestView

app_name = "notifications"

urlpatterns = [
    path("whatsapp/test/", WhatsAppTestView.as_view(), name="whatsapp-test"),
    path("whatsapp/settings/", WhatsAppSettingsView.as_view(), name="whatsapp-settings"),
    path("whatsapp/send/", WhatsAppSendView.as_view(), name="whatsapp-send"),
]
