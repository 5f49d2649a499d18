"""Root URL configuration."""

from django.urls import include, path

urlpatterns = [
    path("notifications/api/", include("core.urls")),
]
