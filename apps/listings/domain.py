"""Building, floor, room and occupant model for PG listings.

Everything in this module is pure: functions take value objects and return new
ones. Room status is never stored, it is always derived from ``capacity`` and
the number of occupants.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable

from apps.core.exceptions import NotFoundError, ValidationError


class RoomStatus(str, enum.Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    OCCUPIED = "occupied"


class PaymentStatus(str, enum.Enum):
    VACANT = "vacant"
    PAID = "paid"
    PARTIAL = "partial"
    PENDING = "pending"


SHARING_TYPES = {1: "Single", 2: "Double", 3: "Triple"}


@dataclass(frozen=True, slots=True)
class Occupant:
    """A tenant embedded in a room."""

    name: str
    email: str = ""
    phone: str = ""
    college: str = ""
    year: str = ""
    rent_paid: bool = False
    rent_due_date: str | None = None
    advance_payment: int = 0
    due_amount: int = 0
    joined_date: str | None = None


@dataclass(frozen=True, slots=True)
class Room:
    number: str
    capacity: int
    rent: int | None = None
    occupants: tuple[Occupant, ...] = ()
    amenities: tuple[str, ...] = ()

    @property
    def occupant_count(self) -> int:
        return len(self.occupants)

    @property
    def free_beds(self) -> int:
        return self.capacity - len(self.occupants)


@dataclass(frozen=True, slots=True)
class Floor:
    number: int
    rooms: tuple[Room, ...] = ()
    name: str = ""


@dataclass(frozen=True, slots=True)
class Property:
    """A PG listing normalized from any persisted schema."""

    id: str
    name: str
    owner_id: str = ""
    description: str = ""
    address: str = ""
    city: str = ""
    pg_type: str = "any"
    total_rooms: int = 0
    available_rooms: int | None = None
    monthly_rent: int = 0
    nearest_college: str = ""
    distance: float | None = None
    amenities: tuple[str, ...] = ()
    gate_opening: str = ""
    gate_closing: str = ""
    smoking_allowed: bool = False
    drinking_allowed: bool = False
    availability: str = "open"
    owner_name: str = ""
    owner_email: str = ""
    owner_phone: str = ""
    status: str = "active"
    floors: tuple[Floor, ...] = ()
    layout_source: str | None = None
    version: int = 0

    @property
    def has_layout(self) -> bool:
        return bool(self.floors)

    def rooms(self) -> Iterable[Room]:
        for floor in self.floors:
            yield from floor.rooms


@dataclass(frozen=True, slots=True)
class PropertyStats:
    total_rooms: int = 0
    occupied_rooms: int = 0
    partial_rooms: int = 0
    available_rooms: int = 0
    monthly_revenue: int = 0
    total_beds: int = 0
    occupied_beds: int = 0
    rent_paid_count: int = 0
    rent_pending_count: int = 0
    pending_dues: int = 0

    def __add__(self, other: "PropertyStats") -> "PropertyStats":
        if not isinstance(other, PropertyStats):
            return NotImplemented
        return PropertyStats(
            total_rooms=self.total_rooms + other.total_rooms,
            occupied_rooms=self.occupied_rooms + other.occupied_rooms,
            partial_rooms=self.partial_rooms + other.partial_rooms,
            available_rooms=self.available_rooms + other.available_rooms,
            monthly_revenue=self.monthly_revenue + other.monthly_revenue,
            total_beds=self.total_beds + other.total_beds,
            occupied_beds=self.occupied_beds + other.occupied_beds,
            rent_paid_count=self.rent_paid_count + other.rent_paid_count,
            rent_pending_count=self.rent_pending_count + other.rent_pending_count,
            pending_dues=self.pending_dues + other.pending_dues,
        )

    @property
    def occupancy_rate(self) -> float:
        """Percentage of rooms with at least one occupant."""
        if not self.total_rooms:
            return 0.0
        return round(self.occupied_rooms * 100 / self.total_rooms, 1)


def sharing_type(capacity: int) -> str:
    return SHARING_TYPES.get(capacity, f"{capacity}-Sharing")


def _check_capacity(room: Room) -> None:
    if room.capacity < 1:
        raise ValidationError(
            f"Room {room.number} has an invalid capacity of {room.capacity}.",
            code="invalid_capacity",
        )


def room_status(room: Room) -> RoomStatus:
    """Derive the status of ``room`` from its occupant count and capacity."""

    _check_capacity(room)
    count = room.occupant_count
    if count == 0:
        return RoomStatus.AVAILABLE
    if count < room.capacity:
        return RoomStatus.PARTIAL
    return RoomStatus.OCCUPIED


def room_payment_status(room: Room) -> PaymentStatus:
    if not room.occupants:
        return PaymentStatus.VACANT
    paid = sum(1 for occupant in room.occupants if occupant.rent_paid)
    if paid == len(room.occupants):
        return PaymentStatus.PAID
    if paid:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


def room_stats(room: Room, base_rent: int = 0) -> PropertyStats:
    """Stats contributed by a single room.

    Revenue is the flat room rent once the room has any occupant, regardless
    of how many beds are taken.
    """

    status = room_status(room)
    rent = room.rent if room.rent is not None else base_rent
    paid = sum(1 for occupant in room.occupants if occupant.rent_paid)
    return PropertyStats(
        total_rooms=1,
        occupied_rooms=int(status is not RoomStatus.AVAILABLE),
        partial_rooms=int(status is RoomStatus.PARTIAL),
        available_rooms=int(status is RoomStatus.AVAILABLE),
        monthly_revenue=rent if status is not RoomStatus.AVAILABLE else 0,
        total_beds=room.capacity,
        occupied_beds=room.occupant_count,
        rent_paid_count=paid,
        rent_pending_count=room.occupant_count - paid,
        pending_dues=sum(occupant.due_amount for occupant in room.occupants),
    )


def floor_stats(floor: Floor, base_rent: int = 0) -> PropertyStats:
    return sum((room_stats(room, base_rent) for room in floor.rooms), PropertyStats())


def property_stats(prop: Property) -> PropertyStats:
    """Occupancy and revenue for ``prop``.

    Without a layout the registration counters are used: every room that is
    not listed as available counts as occupied at the base rent.
    """

    if prop.floors:
        return sum(
            (floor_stats(floor, prop.monthly_rent) for floor in prop.floors),
            PropertyStats(),
        )
    total = max(prop.total_rooms, 0)
    available = total if prop.available_rooms is None else min(max(prop.available_rooms, 0), total)
    occupied = total - available
    return PropertyStats(
        total_rooms=total,
        occupied_rooms=occupied,
        available_rooms=available,
        monthly_revenue=occupied * prop.monthly_rent,
    )


def validate_occupant(occupant: Occupant) -> None:
    missing = [label for label, value in (("name", occupant.name), ("email", occupant.email)) if not value.strip()]
    if missing:
        raise ValidationError(
            f"Tenant {' and '.join(missing)} {'is' if len(missing) == 1 else 'are'} required.",
            code="missing_tenant_fields",
        )


def new_tenant(
    name: str,
    email: str,
    phone: str = "",
    advance_payment: int = 0,
    *,
    today: date,
    due_day: int = 5,
) -> Occupant:
    """Build a freshly joined tenant with rent pending for this month."""

    occupant = Occupant(
        name=name.strip(),
        email=email.strip(),
        phone=phone.strip(),
        rent_paid=False,
        rent_due_date=today.replace(day=min(max(due_day, 1), 28)).isoformat(),
        advance_payment=advance_payment or 0,
        joined_date=today.isoformat(),
    )
    validate_occupant(occupant)
    return occupant


def assign_occupant(room: Room, occupant: Occupant) -> Room:
    """Return ``room`` with ``occupant`` added.

    Raises :class:`ValidationError` when the room is already full; the given
    room is never modified.
    """

    _check_capacity(room)
    if room.occupant_count >= room.capacity:
        raise ValidationError(
            f"Room {room.number} is full ({room.occupant_count}/{room.capacity}).",
            code="room_full",
        )
    return replace(room, occupants=room.occupants + (occupant,))


def _check_index(room: Room, index: int) -> None:
    if not 0 <= index < room.occupant_count:
        raise NotFoundError(
            f"Room {room.number} has no occupant at position {index}.",
            code="occupant_not_found",
        )


def vacate_occupant(room: Room, index: int) -> Room:
    """Remove the occupant at ``index``; no history is kept."""

    _check_index(room, index)
    occupants = room.occupants[:index] + room.occupants[index + 1:]
    return replace(room, occupants=occupants)


def toggle_rent_paid(occupant: Occupant) -> Occupant:
    return replace(occupant, rent_paid=not occupant.rent_paid)


def toggle_room_rent(room: Room, index: int) -> Room:
    _check_index(room, index)
    occupants = list(room.occupants)
    occupants[index] = toggle_rent_paid(occupants[index])
    return replace(room, occupants=tuple(occupants))


_EDITABLE_FIELDS = {"name", "email", "phone", "advance_payment"}


def edit_occupant(room: Room, index: int, **changes) -> Room:
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Cannot edit tenant field(s): {', '.join(sorted(unknown))}.",
            code="invalid_tenant_fields",
        )
    _check_index(room, index)
    occupants = list(room.occupants)
    updated = replace(occupants[index], **changes)
    validate_occupant(updated)
    occupants[index] = updated
    return replace(room, occupants=tuple(occupants))


def _room_position(prop: Property, number: str) -> tuple[int, int]:
    for floor_index, floor in enumerate(prop.floors):
        for room_index, room in enumerate(floor.rooms):
            if room.number == number:
                return floor_index, room_index
    raise NotFoundError(
        f"Room {number} does not exist in {prop.name or prop.id}.",
        code="room_not_found",
    )


def find_room(prop: Property, number: str) -> Room:
    floor_index, room_index = _room_position(prop, number)
    return prop.floors[floor_index].rooms[room_index]


def replace_room(prop: Property, room: Room) -> Property:
    """Return ``prop`` with the first room numbered ``room.number`` swapped for ``room``.

    Only that one slot changes, even if another room shares the number.
    """

    floor_index, room_index = _room_position(prop, room.number)
    floor = prop.floors[floor_index]
    rooms = floor.rooms[:room_index] + (room,) + floor.rooms[room_index + 1:]
    floors = prop.floors[:floor_index] + (replace(floor, rooms=rooms),) + prop.floors[floor_index + 1:]
    return replace(prop, floors=floors)


@dataclass(frozen=True, slots=True)
class DashboardEntry:
    pg: Property
    stats: PropertyStats


@dataclass(frozen=True, slots=True)
class OwnerDashboard:
    entries: tuple[DashboardEntry, ...] = ()
    totals: PropertyStats = field(default_factory=PropertyStats)

    @property
    def total_properties(self) -> int:
        return len(self.entries)


def owner_dashboard(properties: Iterable[Property]) -> OwnerDashboard:
    entries = tuple(DashboardEntry(prop, property_stats(prop)) for prop in properties)
    totals = sum((entry.stats for entry in entries), PropertyStats())
    return OwnerDashboard(entries=entries, totals=totals)
