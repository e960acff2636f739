"""Core app views."""
from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthView(APIView):
    """Return a simple liveness response."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        return Response({"ok": True, "service": "pgconnect"})
