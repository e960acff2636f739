"""Document-store gateway for PG listings.

Each listing is one JSON document addressed by an opaque id. Writes merge
top-level keys only: any nested value (notably ``buildingConfiguration``) is
replaced wholesale by whatever the caller passes. Two sessions that read the
same document, change its layout locally and write it back will overwrite each
other; the last write wins. :meth:`DocumentStoreGateway.update_if_version` is
available to callers that want the conflict surfaced instead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.exceptions import NotFoundError, ValidationError, WriteError

from .models import PGDocument

logger = logging.getLogger(__name__)

_PROTECTED_KEYS = frozenset({"ownerId", "createdAt"})


@dataclass(frozen=True, slots=True)
class CallerContext:
    """Identity of the caller, supplied explicitly to owner-scoped calls."""

    owner_id: str
    name: str = ""
    email: str = ""

    @classmethod
    def from_user(cls, user) -> "CallerContext":
        full_name = user.get_full_name() if hasattr(user, "get_full_name") else ""
        return cls(
            owner_id=user.get_username(),
            name=full_name or user.get_username(),
            email=getattr(user, "email", "") or "",
        )


@dataclass(frozen=True, slots=True)
class PropertyDocument:
    id: str
    owner_id: str
    data: dict[str, Any] = field(default_factory=dict)
    version: int = 1


def _to_document(row: PGDocument) -> PropertyDocument:
    return PropertyDocument(id=row.id, owner_id=row.owner_id, data=dict(row.data), version=row.version)


def _now() -> str:
    return timezone.now().isoformat()


class DocumentStoreGateway:
    """Narrow read/write interface over the ``PGDocument`` table."""

    def fetch_property(self, doc_id: str) -> PropertyDocument:
        try:
            row = PGDocument.objects.get(pk=doc_id)
        except PGDocument.DoesNotExist as exc:
            raise NotFoundError(f"PG {doc_id} not found.", code="pg_not_found") from exc
        return _to_document(row)

    def fetch_properties_by_owner(self, context: CallerContext) -> list[PropertyDocument]:
        rows = PGDocument.objects.filter(owner_id=context.owner_id).order_by("-created_at")
        return [_to_document(row) for row in rows]

    def fetch_all_properties(self) -> list[PropertyDocument]:
        return [_to_document(row) for row in PGDocument.objects.order_by("-created_at")]

    def create_property(self, context: CallerContext, fields: Mapping[str, Any]) -> PropertyDocument:
        now = _now()
        data = dict(fields)
        data["ownerId"] = context.owner_id
        data.setdefault("ownerName", context.name)
        data.setdefault("ownerEmail", context.email)
        data.setdefault("status", "active")
        data.setdefault("createdAt", now)
        data["updatedAt"] = now
        try:
            row = PGDocument.objects.create(owner_id=context.owner_id, data=data)
        except DatabaseError as exc:
            raise WriteError(f"Could not create PG: {exc}") from exc
        logger.info("Created PG document %s for owner %s", row.id, context.owner_id)
        return _to_document(row)

    def update_property(self, doc_id: str, fields: Mapping[str, Any]) -> PropertyDocument:
        """Replace the given top-level keys of ``doc_id``; no version check."""

        return self._write(doc_id, fields, expected_version=None)

    def update_if_version(
        self,
        doc_id: str,
        fields: Mapping[str, Any],
        expected_version: int,
    ) -> PropertyDocument:
        """Like :meth:`update_property`, but only if nobody wrote since ``expected_version``."""

        return self._write(doc_id, fields, expected_version=expected_version)

    def delete_property(self, context: CallerContext, doc_id: str) -> None:
        try:
            deleted, _ = PGDocument.objects.filter(pk=doc_id, owner_id=context.owner_id).delete()
        except DatabaseError as exc:
            raise WriteError(f"Could not delete PG {doc_id}: {exc}") from exc
        if not deleted:
            raise NotFoundError(f"PG {doc_id} not found.", code="pg_not_found")
        logger.info("Deleted PG document %s", doc_id)

    def _write(
        self,
        doc_id: str,
        fields: Mapping[str, Any],
        *,
        expected_version: int | None,
    ) -> PropertyDocument:
        protected = _PROTECTED_KEYS.intersection(fields)
        if protected:
            raise ValidationError(
                f"Field(s) {', '.join(sorted(protected))} cannot be changed.",
                code="protected_field",
            )
        try:
            with transaction.atomic():
                try:
                    row = PGDocument.objects.select_for_update().get(pk=doc_id)
                except PGDocument.DoesNotExist as exc:
                    raise NotFoundError(f"PG {doc_id} not found.", code="pg_not_found") from exc
                if expected_version is not None and row.version != expected_version:
                    logger.warning(
                        "Version conflict on PG %s: expected %s, stored %s",
                        doc_id,
                        expected_version,
                        row.version,
                    )
                    raise WriteError(
                        f"PG {doc_id} was modified by someone else; reload and try again.",
                        code="version_conflict",
                    )
                data = dict(row.data)
                data.update(fields)
                data["updatedAt"] = _now()
                row.data = data
                row.version += 1
                row.save(update_fields=["data", "version", "updated_at"])
        except DatabaseError as exc:
            raise WriteError(f"Could not update PG {doc_id}: {exc}") from exc
        logger.info("Updated PG %s keys=%s version=%s", doc_id, sorted(fields), row.version)
        return _to_document(row)
