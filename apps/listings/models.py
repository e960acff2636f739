"""Listings app models."""
from __future__ import annotations

import secrets
import string

from django.db import models

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_document_id() -> str:
    """Return a random 20-character document id."""

    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(20))


class PGDocument(models.Model):
    """A PG listing stored as one schemaless JSON document.

    ``data`` holds the persisted property shape (registration fields plus an
    optional ``buildingConfiguration`` or legacy ``buildingLayout``). Writes
    replace top-level keys wholesale and bump ``version``.
    """

    id = models.CharField(primary_key=True, max_length=40, default=generate_document_id, editable=False)
    owner_id = models.CharField(max_length=128, db_index=True)
    data = models.JSONField(default=dict)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["owner_id", "-created_at"], name="pgdoc_owner_created_idx")]

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return f"PGDocument(id={self.id}, name={self.data.get('name', '')})"
