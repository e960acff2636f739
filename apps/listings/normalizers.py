"""Adapters between persisted PG documents and the domain model.

Two layout shapes exist in stored documents:

* ``buildingConfiguration``: ``{"floors": [{"number", "rooms": [RoomV2]}], ...}``
* ``buildingLayout`` (legacy): ``{"floors": int, "roomsPerFloor": int,
  "rooms": [RoomV1]}`` with each room carrying a ``floorId``.

Both are read into :class:`~apps.listings.domain.Property`; only the
``buildingConfiguration`` shape is ever written back.
"""
from __future__ import annotations

import re
from collections import defaultdict
from typing import Any, Mapping

from apps.core.exceptions import ValidationError

from .domain import Floor, Occupant, Property, Room, sharing_type
from .layout import floor_name, room_number

SOURCE_CONFIGURATION = "configuration"
SOURCE_LAYOUT = "layout"
SOURCE_GENERATED = "generated"

_CAPACITY_BY_SHARING = {"single": 1, "double": 2, "triple": 3}
_TRAILING_DIGITS = re.compile(r"(\d+)$")


def _as_int(value: Any, default: int | None = 0) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _as_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _as_tuple(values: Any) -> tuple[str, ...]:
    if not values:
        return ()
    return tuple(str(value) for value in values)


def normalize_occupant(raw: Mapping[str, Any]) -> Occupant:
    return Occupant(
        name=_as_str(raw.get("name")),
        email=_as_str(raw.get("email")),
        phone=_as_str(raw.get("phone")),
        college=_as_str(raw.get("college")),
        year=_as_str(raw.get("year")),
        rent_paid=bool(raw.get("rentPaid") or raw.get("rentStatus") or False),
        rent_due_date=raw.get("rentDueDate") or None,
        advance_payment=_as_int(raw.get("advancePayment")),
        due_amount=_as_int(raw.get("dueAmount")),
        joined_date=raw.get("joinedDate") or None,
    )


def _capacity(raw: Mapping[str, Any]) -> int:
    capacity = _as_int(raw.get("capacity"), None)
    if capacity is None:
        capacity = _as_int(raw.get("sharing"), None)
    if capacity is None:
        capacity = _CAPACITY_BY_SHARING.get(_as_str(raw.get("sharingType")).lower(), 1)
    return capacity


def normalize_room(raw: Mapping[str, Any], *, default_number: str = "") -> Room:
    """Build a room from either room schema; stored ``status``/``occupied`` are ignored.

    ``default_number`` names rooms stored without a ``number``/``id``.
    """

    number = _as_str(raw.get("number") or raw.get("id") or raw.get("roomNo")).strip() or default_number
    occupants = tuple(normalize_occupant(item) for item in raw.get("occupants") or ())
    room = Room(
        number=number,
        capacity=_capacity(raw),
        rent=_as_int(raw.get("rent"), None),
        occupants=occupants,
        amenities=_as_tuple(raw.get("amenities")),
    )
    if not number:
        raise ValidationError("A room is stored without a number.", code="missing_room_number")
    if room.capacity < 1:
        raise ValidationError(
            f"Room {number} has an invalid capacity of {room.capacity}.",
            code="invalid_capacity",
        )
    if room.occupant_count > room.capacity:
        raise ValidationError(
            f"Room {number} lists {room.occupant_count} occupants for {room.capacity} beds.",
            code="over_capacity",
        )
    return room


def _check_unique_rooms(floors: tuple[Floor, ...]) -> tuple[Floor, ...]:
    seen: set[str] = set()
    for floor in floors:
        for room in floor.rooms:
            if room.number in seen:
                raise ValidationError(f"Room number {room.number} is used twice.", code="duplicate_room")
            seen.add(room.number)
    return floors


def _floors_from_configuration(config: Mapping[str, Any]) -> tuple[Floor, ...]:
    floors = []
    for index, raw_floor in enumerate(config.get("floors") or ()):
        number = _as_int(raw_floor.get("number"), None)
        if number is None:
            number = index + 1
        rooms = tuple(
            normalize_room(raw_room, default_number=room_number(number, seq))
            for seq, raw_room in enumerate(raw_floor.get("rooms") or (), start=1)
        )
        floors.append(Floor(number=number, rooms=rooms, name=_as_str(raw_floor.get("name")) or floor_name(index)))
    return _check_unique_rooms(tuple(floors))


def _floor_index(value: Any) -> int:
    """Zero-based floor of a legacy room: ``0``, ``"2"``, ``"ground"`` or ``"floor-2"``."""

    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    text = str(value).strip().lower()
    if text == "ground":
        return 0
    match = _TRAILING_DIGITS.search(text)
    if match is None:
        raise ValidationError(f"Unrecognised floor id {value!r}.", code="invalid_floor")
    return int(match.group(1))


def _floors_from_layout(layout: Mapping[str, Any]) -> tuple[Floor, ...]:
    grouped: dict[int, list[Room]] = defaultdict(list)
    for raw_room in layout.get("rooms") or ():
        floor_id = _floor_index(raw_room.get("floorId"))
        seq = len(grouped[floor_id]) + 1
        grouped[floor_id].append(normalize_room(raw_room, default_number=room_number(floor_id + 1, seq)))
    floors = tuple(
        Floor(number=floor_id + 1, rooms=tuple(grouped[floor_id]), name=floor_name(index))
        for index, floor_id in enumerate(sorted(grouped))
    )
    return _check_unique_rooms(floors)


def layout_from_document(document: Mapping[str, Any]) -> tuple[tuple[Floor, ...], str | None]:
    """Return the floors stored in ``document`` and the shape they came from."""

    config = document.get("buildingConfiguration")
    if isinstance(config, Mapping) and config.get("floors"):
        return _floors_from_configuration(config), SOURCE_CONFIGURATION
    layout = document.get("buildingLayout")
    if isinstance(layout, Mapping) and layout.get("rooms"):
        return _floors_from_layout(layout), SOURCE_LAYOUT
    return (), None


def normalize_property(doc_id: str, document: Mapping[str, Any], *, version: int = 0) -> Property:
    floors, source = layout_from_document(document)
    return Property(
        id=doc_id,
        name=_as_str(document.get("name")) or "Unnamed PG",
        owner_id=_as_str(document.get("ownerId")),
        description=_as_str(document.get("description")),
        address=_as_str(document.get("address")),
        city=_as_str(document.get("city")),
        pg_type=_as_str(document.get("pgType")) or "any",
        total_rooms=_as_int(document.get("totalRooms")),
        available_rooms=_as_int(document.get("availableRooms"), None),
        monthly_rent=_as_int(document.get("monthlyRent")),
        nearest_college=_as_str(document.get("nearestCollege")),
        distance=_as_float(document.get("distance")),
        amenities=_as_tuple(document.get("amenities")),
        gate_opening=_as_str(document.get("gateOpening")),
        gate_closing=_as_str(document.get("gateClosing")),
        smoking_allowed=bool(document.get("smokingAllowed", False)),
        drinking_allowed=bool(document.get("drinkingAllowed", False)),
        availability=_as_str(document.get("availability")) or "open",
        owner_name=_as_str(document.get("ownerName")),
        owner_email=_as_str(document.get("ownerEmail")),
        owner_phone=_as_str(document.get("ownerPhone")),
        status=_as_str(document.get("status")) or "active",
        floors=floors,
        layout_source=source,
        version=version,
    )


def serialize_occupant(occupant: Occupant) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": occupant.name,
        "email": occupant.email,
        "rentPaid": occupant.rent_paid,
    }
    optional = {
        "phone": occupant.phone,
        "college": occupant.college,
        "year": occupant.year,
        "rentDueDate": occupant.rent_due_date,
        "advancePayment": occupant.advance_payment,
        "dueAmount": occupant.due_amount,
        "joinedDate": occupant.joined_date,
    }
    data.update({key: value for key, value in optional.items() if value})
    return data


def serialize_room(room: Room) -> dict[str, Any]:
    data: dict[str, Any] = {
        "number": room.number,
        "capacity": room.capacity,
        "sharingType": sharing_type(room.capacity),
        "occupants": [serialize_occupant(occupant) for occupant in room.occupants],
    }
    if room.rent is not None:
        data["rent"] = room.rent
    if room.amenities:
        data["amenities"] = list(room.amenities)
    return data


def serialize_configuration(floors: tuple[Floor, ...]) -> dict[str, Any]:
    """Canonical ``buildingConfiguration`` value for ``floors``."""

    return {
        "floors": [
            {
                "number": floor.number,
                "name": floor.name,
                "rooms": [serialize_room(room) for room in floor.rooms],
            }
            for floor in floors
        ],
        "totalFloors": len(floors),
        "totalRooms": sum(len(floor.rooms) for floor in floors),
    }
