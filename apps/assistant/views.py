"""Views for the assistant app."""
from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import ChatMessageSerializer, ChatReplySerializer
from .services import AssistantService


class ChatView(APIView):
    """Answer a visitor's question about the platform."""

    permission_classes = [AllowAny]
    service_class = AssistantService

    def post(self, request, *args, **kwargs):
        serializer = ChatMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reply = self.service_class().respond(serializer.validated_data["message"])
        return Response(ChatReplySerializer(reply).data)
