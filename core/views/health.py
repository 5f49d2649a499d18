"""Health probe and version endpoints."""

from django.conf import settings
from django.http import HttpResponse

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.services import health_service


class VersionView(APIView):
    """Service version as plain text."""

    authentication_classes = ()
    permission_classes = (AllowAny,)

    def get(self, _request):
        return HttpResponse(settings.SERVICE_VERSION, content_type="text/plain")


class LivenessCheckView(APIView):
    """Liveness probe endpoint for Kubernetes.

    Returns 200 if the service is alive and running. Dependencies are not
    checked. Exempt from authentication so probes can reach it.
    """

    authentication_classes = ()
    permission_classes = (AllowAny,)

    def get(self, _request):
        liveness = health_service.get_liveness_status()
        return Response(liveness.model_dump(), status=status.HTTP_200_OK)


class ReadinessCheckView(APIView):
    """Readiness probe endpoint for Kubernetes.

    Returns 200 if the service is ready to serve traffic, with a degraded
    status when the database, cache or push provider is unhealthy.
    Exempt from authentication so probes can reach it.
    """

    authentication_classes = ()
    permission_classes = (AllowAny,)

    def get(self, _request):
        readiness = health_service.get_readiness_status()
        return Response(readiness.model_dump(mode="json"), status=status.HTTP_200_OK)
