"""Assistant app URL configuration."""
from __future__ import annotations

from django.urls import path

from .views import ChatView

app_name = "assistant"

urlpatterns = [
    path("chat/", ChatView.as_view(), name="chat"),
]
