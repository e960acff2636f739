from __future__ import annotations

from rest_framework import serializers


class ChatMessageSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=2000, trim_whitespace=True)


class ChatReplySerializer(serializers.Serializer):
    reply = serializers.CharField()
    source = serializers.CharField()
