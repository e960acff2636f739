"""Admin configuration for the listings app."""
from __future__ import annotations

from django.contrib import admin

from .models import PGDocument


@admin.register(PGDocument)
class PGDocumentAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "owner_id", "version", "created_at", "updated_at")
    search_fields = ("id", "owner_id")
    readonly_fields = ("id", "version", "created_at", "updated_at")

    @admin.display(description="Name")
    def name(self, obj: PGDocument) -> str:
        return obj.data.get("name", "")
