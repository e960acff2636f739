"""Page-level operations on PG listings.

Every mutation reads the whole document, applies a pure domain function and
writes the complete ``buildingConfiguration`` back. There is no merge with
concurrent edits made elsewhere.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Mapping

from django.conf import settings
from django.utils import timezone

from apps.core.exceptions import NotFoundError, ValidationError

from . import domain
from .domain import Floor, OwnerDashboard, Property, Room
from .gateway import CallerContext, DocumentStoreGateway, PropertyDocument
from .layout import empty_configuration, fallback_layout, generate_layout
from .normalizers import SOURCE_GENERATED, normalize_property, serialize_configuration

logger = logging.getLogger(__name__)


def _to_property(document: PropertyDocument) -> Property:
    return normalize_property(document.id, document.data, version=document.version)


def load_property(gateway: DocumentStoreGateway, doc_id: str, *, allow_generated: bool = True) -> Property:
    """Fetch and normalize a PG; without a stored layout, attach a generated one."""

    prop = _to_property(gateway.fetch_property(doc_id))
    if prop.has_layout or not allow_generated:
        return prop
    floors = fallback_layout(
        seed=prop.id,
        total_rooms=prop.total_rooms or settings.PG_DEFAULT_TOTAL_ROOMS,
        rooms_per_floor=settings.PG_DEFAULT_ROOMS_PER_FLOOR,
        base_rent=prop.monthly_rent or settings.PG_DEFAULT_MONTHLY_RENT,
    )
    return replace(prop, floors=floors, layout_source=SOURCE_GENERATED)


def _load_owned(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
) -> tuple[PropertyDocument, Property]:
    document = gateway.fetch_property(doc_id)
    if document.owner_id != context.owner_id:
        raise NotFoundError(f"PG {doc_id} not found.", code="pg_not_found")
    return document, _to_property(document)


def load_owned_property(gateway: DocumentStoreGateway, context: CallerContext, doc_id: str) -> Property:
    return _load_owned(gateway, context, doc_id)[1]


def register_property(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    fields: Mapping[str, Any],
) -> Property:
    data = dict(fields)
    data.setdefault("availableRooms", data.get("totalRooms", 0))
    data.setdefault("availability", "open")
    return _to_property(gateway.create_property(context, data))


def edit_property(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    fields: Mapping[str, Any],
    *,
    expected_version: int | None = None,
) -> Property:
    _load_owned(gateway, context, doc_id)
    return _to_property(_write(gateway, doc_id, fields, expected_version))


def delete_property(gateway: DocumentStoreGateway, context: CallerContext, doc_id: str) -> None:
    gateway.delete_property(context, doc_id)


def _write(
    gateway: DocumentStoreGateway,
    doc_id: str,
    fields: Mapping[str, Any],
    expected_version: int | None,
) -> PropertyDocument:
    if expected_version is None:
        return gateway.update_property(doc_id, fields)
    return gateway.update_if_version(doc_id, fields, expected_version)


def _layout_fields(floors: tuple[Floor, ...], previous: Any = None) -> dict[str, Any]:
    config = serialize_configuration(floors)
    if isinstance(previous, Mapping) and previous.get("configuredAt"):
        config["configuredAt"] = previous["configuredAt"]
    stats = sum((domain.floor_stats(floor) for floor in floors), domain.PropertyStats())
    return {
        "buildingConfiguration": config,
        "totalRooms": stats.total_rooms,
        "availableRooms": stats.available_rooms,
    }


def configure_layout(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    *,
    total_rooms: int,
    rooms_per_floor: int | None = None,
    base_rent: int | None = None,
    capacity: int | None = None,
    expected_version: int | None = None,
) -> Property:
    """Replace the layout of an unoccupied PG with an empty building."""

    document, prop = _load_owned(gateway, context, doc_id)
    occupied = sum(room.occupant_count for room in prop.rooms())
    if occupied:
        raise ValidationError(
            f"{prop.name} still has {occupied} tenant(s); vacate them before changing the layout.",
            code="layout_occupied",
        )
    floors = empty_configuration(
        total_rooms,
        rooms_per_floor or settings.PG_DEFAULT_ROOMS_PER_FLOOR,
        base_rent or prop.monthly_rent or settings.PG_DEFAULT_MONTHLY_RENT,
        capacity=capacity,
    )
    fields = _layout_fields(floors)
    fields["buildingConfiguration"]["configuredAt"] = timezone.now().isoformat()
    return _to_property(_write(gateway, document.id, fields, expected_version))


def backfill_configuration(
    gateway: DocumentStoreGateway,
    document: PropertyDocument,
    *,
    rooms_per_floor: int = 4,
    populated: bool = False,
    rng: random.Random | None = None,
) -> PropertyDocument | None:
    """Give ``document`` a building configuration unless it has a layout.

    The building is empty, or filled with sample students when ``populated``.
    Returns the updated document, or ``None`` when it was left alone.
    """

    data = document.data
    config, layout = data.get("buildingConfiguration"), data.get("buildingLayout")
    if isinstance(config, Mapping) and config.get("floors"):
        return None
    if isinstance(layout, Mapping) and layout.get("rooms"):
        return None
    build = generate_layout if populated else empty_configuration
    floors = build(
        _positive_int(data.get("totalRooms"), settings.PG_BACKFILL_TOTAL_ROOMS),
        rooms_per_floor,
        _positive_int(data.get("monthlyRent"), settings.PG_DEFAULT_MONTHLY_RENT),
        rng=rng,
    )
    config = serialize_configuration(floors)
    config["configuredAt"] = timezone.now().isoformat()
    return gateway.update_property(document.id, {"buildingConfiguration": config})


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _mutate_room(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    room_number: str,
    change: Callable[[Room], Room],
    expected_version: int | None,
) -> Property:
    document, prop = _load_owned(gateway, context, doc_id)
    if not prop.has_layout:
        raise NotFoundError(
            f"{prop.name} has no building configuration.",
            code="no_building_configuration",
        )
    updated = domain.replace_room(prop, change(domain.find_room(prop, room_number)))
    fields = _layout_fields(updated.floors, document.data.get("buildingConfiguration"))
    return _to_property(_write(gateway, document.id, fields, expected_version))


def add_tenant(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    room_number: str,
    *,
    name: str,
    email: str,
    phone: str = "",
    advance_payment: int = 0,
    today: date | None = None,
    expected_version: int | None = None,
) -> Property:
    tenant = domain.new_tenant(
        name,
        email,
        phone,
        advance_payment,
        today=today or timezone.localdate(),
        due_day=settings.PG_RENT_DUE_DAY,
    )
    return _mutate_room(
        gateway,
        context,
        doc_id,
        room_number,
        lambda room: domain.assign_occupant(room, tenant),
        expected_version,
    )


def edit_tenant(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    room_number: str,
    index: int,
    changes: Mapping[str, Any],
    *,
    expected_version: int | None = None,
) -> Property:
    return _mutate_room(
        gateway,
        context,
        doc_id,
        room_number,
        lambda room: domain.edit_occupant(room, index, **changes),
        expected_version,
    )


def vacate_tenant(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    room_number: str,
    index: int,
    *,
    expected_version: int | None = None,
) -> Property:
    return _mutate_room(
        gateway,
        context,
        doc_id,
        room_number,
        lambda room: domain.vacate_occupant(room, index),
        expected_version,
    )


def toggle_rent(
    gateway: DocumentStoreGateway,
    context: CallerContext,
    doc_id: str,
    room_number: str,
    index: int,
    *,
    expected_version: int | None = None,
) -> Property:
    return _mutate_room(
        gateway,
        context,
        doc_id,
        room_number,
        lambda room: domain.toggle_room_rent(room, index),
        expected_version,
    )


def owner_dashboard(gateway: DocumentStoreGateway, context: CallerContext) -> OwnerDashboard:
    return domain.owner_dashboard(
        _to_property(document) for document in gateway.fetch_properties_by_owner(context)
    )


@dataclass(frozen=True, slots=True)
class SearchFilters:
    city: str = ""
    college: str = ""
    min_rent: int | None = None
    max_rent: int | None = None
    pg_type: str = ""
    amenities: tuple[str, ...] = ()
    has_vacancy: bool = False
    ordering: str = ""


_ORDERINGS: dict[str, Callable[[Property], Any]] = {
    "rent": lambda prop: prop.monthly_rent,
    "distance": lambda prop: prop.distance if prop.distance is not None else float("inf"),
}


def _has_vacancy(prop: Property) -> bool:
    if prop.has_layout:
        return any(room.free_beds > 0 for room in prop.rooms())
    return bool(prop.available_rooms)


def _matches(prop: Property, filters: SearchFilters) -> bool:
    if prop.status != "active" or prop.availability != "open":
        return False
    if filters.city and prop.city.lower() != filters.city.lower():
        return False
    if filters.college and prop.nearest_college.lower() != filters.college.lower():
        return False
    if filters.min_rent is not None and prop.monthly_rent < filters.min_rent:
        return False
    if filters.max_rent is not None and prop.monthly_rent > filters.max_rent:
        return False
    if filters.pg_type and prop.pg_type not in {"any", filters.pg_type}:
        return False
    offered = {amenity.lower() for amenity in prop.amenities}
    if any(amenity.lower() not in offered for amenity in filters.amenities):
        return False
    if filters.has_vacancy and not _has_vacancy(prop):
        return False
    return True


def search_properties(gateway: DocumentStoreGateway, filters: SearchFilters) -> list[Property]:
    """Open, active PGs matching ``filters``; unreadable documents are skipped."""

    results = []
    for document in gateway.fetch_all_properties():
        try:
            prop = _to_property(document)
        except ValidationError as exc:
            logger.warning("Skipping PG %s in search: %s", document.id, exc)
            continue
        if _matches(prop, filters):
            results.append(prop)
    key = _ORDERINGS.get(filters.ordering.lstrip("-"))
    if key is not None:
        results.sort(key=key, reverse=filters.ordering.startswith("-"))
    return results


@dataclass(frozen=True, slots=True)
class BookingAttempt:
    name: str
    email: str
    phone: str
    check_in: date
    duration_months: int = 1


@dataclass(frozen=True, slots=True)
class BookingQuote:
    pg_id: str
    pg_name: str
    monthly_rent: int
    security_deposit: int
    duration_months: int
    check_in: date

    @property
    def amount_due(self) -> int:
        """First month's rent plus the deposit, payable at booking."""
        return self.monthly_rent + self.security_deposit


def booking_quote(prop: Property, attempt: BookingAttempt, *, today: date | None = None) -> BookingQuote:
    today = today or timezone.localdate()
    if prop.availability != "open":
        raise ValidationError(f"{prop.name} is not accepting bookings.", code="pg_closed")
    if attempt.check_in < today:
        raise ValidationError("Check-in date cannot be in the past.", code="invalid_check_in")
    if not 1 <= attempt.duration_months <= 12:
        raise ValidationError("Duration must be between 1 and 12 months.", code="invalid_duration")
    return BookingQuote(
        pg_id=prop.id,
        pg_name=prop.name,
        monthly_rent=prop.monthly_rent,
        security_deposit=settings.PG_SECURITY_DEPOSIT,
        duration_months=attempt.duration_months,
        check_in=attempt.check_in,
    )
