"""Synthetic building layouts for demos, seeding and display fallbacks."""
from __future__ import annotations

import math
import random

from apps.core.exceptions import ValidationError

from .domain import Floor, Occupant, Room

FLOOR_NAMES = ["Ground Floor", "First Floor", "Second Floor", "Third Floor", "Fourth Floor"]
SAMPLE_COLLEGES = ["RVCE", "PESIT", "Christ", "IIT", "IISc"]
SAMPLE_YEARS = ["1st Year", "2nd Year", "3rd Year", "4th Year"]
SAMPLE_ROOM_AMENITIES = ["WiFi", "AC", "Attached Bathroom", "Balcony"]
CAPACITIES = (1, 2, 3)


def floor_name(index: int) -> str:
    """Display name for the zero-based floor ``index``."""
    if index < len(FLOOR_NAMES):
        return FLOOR_NAMES[index]
    return f"Floor {index + 1}"


def room_number(floor_number: int, sequence: int) -> str:
    return f"{floor_number}{sequence:02d}"


def _check_dimensions(total_rooms: int, rooms_per_floor: int) -> None:
    if total_rooms < 1:
        raise ValidationError("A building needs at least one room.", code="invalid_layout")
    if rooms_per_floor < 1:
        raise ValidationError("A floor needs at least one room.", code="invalid_layout")


def _build_floors(total_rooms: int, rooms_per_floor: int, make_room) -> tuple[Floor, ...]:
    floors = []
    for index in range(math.ceil(total_rooms / rooms_per_floor)):
        number = index + 1
        count = min(rooms_per_floor, total_rooms - index * rooms_per_floor)
        rooms = tuple(make_room(room_number(number, seq)) for seq in range(1, count + 1))
        floors.append(Floor(number=number, rooms=rooms, name=floor_name(index)))
    return tuple(floors)


def generate_layout(
    total_rooms: int,
    rooms_per_floor: int,
    base_rent: int,
    rng: random.Random | None = None,
) -> tuple[Floor, ...]:
    """Return a populated building of ``total_rooms`` rooms.

    Each room draws its capacity from 1-3 and an occupant count between zero
    and that capacity; status is left to be derived from the occupants.
    """

    _check_dimensions(total_rooms, rooms_per_floor)
    rng = rng or random.Random()

    def make_room(number: str) -> Room:
        capacity = rng.choice(CAPACITIES)
        occupied = rng.randint(0, capacity)
        occupants = tuple(
            Occupant(
                name=f"Student {k + 1}",
                college=rng.choice(SAMPLE_COLLEGES),
                year=rng.choice(SAMPLE_YEARS),
                rent_paid=rng.random() < 0.7,
            )
            for k in range(occupied)
        )
        amenities = tuple(SAMPLE_ROOM_AMENITIES[: rng.randint(1, len(SAMPLE_ROOM_AMENITIES))])
        return Room(number=number, capacity=capacity, rent=base_rent, occupants=occupants, amenities=amenities)

    return _build_floors(total_rooms, rooms_per_floor, make_room)


def empty_configuration(
    total_rooms: int,
    rooms_per_floor: int,
    base_rent: int,
    capacity: int | None = None,
    rng: random.Random | None = None,
) -> tuple[Floor, ...]:
    """Return an unoccupied building, the starting point of a real layout."""

    _check_dimensions(total_rooms, rooms_per_floor)
    if capacity is not None and capacity not in CAPACITIES:
        raise ValidationError("Room capacity must be 1, 2 or 3.", code="invalid_capacity")
    rng = rng or random.Random()

    def make_room(number: str) -> Room:
        return Room(number=number, capacity=capacity or rng.choice(CAPACITIES), rent=base_rent)

    return _build_floors(total_rooms, rooms_per_floor, make_room)


def fallback_layout(seed: str, total_rooms: int, rooms_per_floor: int, base_rent: int) -> tuple[Floor, ...]:
    """Display layout for a property without one, stable for a given ``seed``."""
    return generate_layout(total_rooms, rooms_per_floor, base_rent, rng=random.Random(seed))
