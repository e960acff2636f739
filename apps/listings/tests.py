"""Tests for the listings app."""
from __future__ import annotations

import copy
import random
from datetime import date, timedelta
from io import StringIO

from django.contrib.auth.models import User
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import NotFoundError, ValidationError, WriteError

from . import domain, services
from .domain import Floor, Occupant, Property, Room, RoomStatus
from .gateway import CallerContext, DocumentStoreGateway
from .layout import empty_configuration, fallback_layout, generate_layout
from .models import PGDocument
from .normalizers import (
    SOURCE_CONFIGURATION,
    SOURCE_GENERATED,
    SOURCE_LAYOUT,
    normalize_property,
    normalize_room,
    serialize_configuration,
)
from .samples import SAMPLE_OWNER, SAMPLE_PGS

ALICE = Occupant(name="Alice", email="alice@example.com")
BOB = Occupant(name="Bob", email="bob@example.com")
CHARU = Occupant(name="Charu", email="charu@example.com")

LEGACY_PG = SAMPLE_PGS[3]


def _registration(**overrides):
    data = {
        "name": "Lakeside PG",
        "address": "12 Lake Road",
        "city": "bangalore",
        "pgType": "any",
        "totalRooms": 12,
        "availableRooms": 4,
        "monthlyRent": 8500,
        "nearestCollege": "rvce",
        "distance": 1.2,
        "amenities": ["WiFi", "AC"],
        "availability": "open",
    }
    data.update(overrides)
    return data


class RoomDomainTests(SimpleTestCase):
    """Occupancy rules for a single room."""

    def test_status_is_derived_from_occupant_count(self) -> None:
        self.assertEqual(domain.room_status(Room("101", 2)), RoomStatus.AVAILABLE)
        self.assertEqual(domain.room_status(Room("101", 2, occupants=(ALICE,))), RoomStatus.PARTIAL)
        self.assertEqual(domain.room_status(Room("101", 2, occupants=(ALICE, BOB))), RoomStatus.OCCUPIED)

    def test_status_ignores_fields_other_than_counts(self) -> None:
        first = Room("101", 3, rent=5000, occupants=(ALICE,), amenities=("AC",))
        second = Room("202", 3, rent=9000, occupants=(BOB,))
        self.assertEqual(domain.room_status(first), domain.room_status(second))

    def test_zero_capacity_is_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            domain.room_status(Room("101", 0))
        self.assertEqual(ctx.exception.code, "invalid_capacity")

    def test_assign_moves_through_adjacent_states(self) -> None:
        room = Room("101", 3)
        seen = [domain.room_status(room)]
        for occupant in (ALICE, BOB, CHARU):
            room = domain.assign_occupant(room, occupant)
            self.assertLessEqual(room.occupant_count, room.capacity)
            seen.append(domain.room_status(room))
        self.assertEqual(
            seen,
            [RoomStatus.AVAILABLE, RoomStatus.PARTIAL, RoomStatus.PARTIAL, RoomStatus.OCCUPIED],
        )

    def test_assign_to_full_room_fails_and_leaves_room_unchanged(self) -> None:
        room = Room("101", 2, occupants=(ALICE, BOB))
        with self.assertRaises(ValidationError) as ctx:
            domain.assign_occupant(room, CHARU)
        self.assertEqual(ctx.exception.code, "room_full")
        self.assertEqual(room.occupants, (ALICE, BOB))

    def test_vacate_then_assign_restores_count(self) -> None:
        room = Room("101", 3, occupants=(ALICE, BOB))
        vacated = domain.vacate_occupant(room, 1)
        self.assertEqual(vacated.occupants, (ALICE,))
        restored = domain.assign_occupant(vacated, BOB)
        self.assertEqual(restored.occupant_count, room.occupant_count)

    def test_vacating_last_occupant_makes_room_available(self) -> None:
        room = domain.vacate_occupant(Room("101", 1, occupants=(ALICE,)), 0)
        self.assertEqual(room.occupants, ())
        self.assertEqual(domain.room_status(room), RoomStatus.AVAILABLE)

    def test_vacate_out_of_range_raises_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            domain.vacate_occupant(Room("101", 2, occupants=(ALICE,)), 3)
        self.assertEqual(ctx.exception.code, "occupant_not_found")

    def test_toggle_rent_paid_flips_flag(self) -> None:
        self.assertTrue(domain.toggle_rent_paid(ALICE).rent_paid)
        self.assertFalse(domain.toggle_rent_paid(domain.toggle_rent_paid(ALICE)).rent_paid)

    def test_payment_status(self) -> None:
        paid = domain.toggle_rent_paid(ALICE)
        self.assertEqual(domain.room_payment_status(Room("1", 2)), domain.PaymentStatus.VACANT)
        self.assertEqual(domain.room_payment_status(Room("1", 2, occupants=(paid,))), domain.PaymentStatus.PAID)
        self.assertEqual(
            domain.room_payment_status(Room("1", 2, occupants=(paid, BOB))),
            domain.PaymentStatus.PARTIAL,
        )
        self.assertEqual(domain.room_payment_status(Room("1", 2, occupants=(BOB,))), domain.PaymentStatus.PENDING)

    def test_edit_occupant_rejects_unknown_fields(self) -> None:
        room = Room("101", 2, occupants=(ALICE,))
        with self.assertRaises(ValidationError):
            domain.edit_occupant(room, 0, rent_paid=True)
        edited = domain.edit_occupant(room, 0, phone="+91 9000000000")
        self.assertEqual(edited.occupants[0].phone, "+91 9000000000")

    def test_replace_room_changes_a_single_slot(self) -> None:
        other = Room("1", 3, occupants=(BOB,))
        prop = Property(id="pg", name="PG", floors=(Floor(1, rooms=(Room("1", 1), other)),))
        updated = domain.replace_room(prop, Room("1", 1, occupants=(ALICE,)))
        self.assertEqual(updated.floors[0].rooms[0].occupants, (ALICE,))
        self.assertEqual(updated.floors[0].rooms[1], other)

    def test_new_tenant(self) -> None:
        tenant = domain.new_tenant(" Meera ", "meera@example.com", today=date(2025, 3, 20), due_day=5)
        self.assertEqual(tenant.name, "Meera")
        self.assertFalse(tenant.rent_paid)
        self.assertEqual(tenant.rent_due_date, "2025-03-05")
        self.assertEqual(tenant.joined_date, "2025-03-20")
        with self.assertRaises(ValidationError) as ctx:
            domain.new_tenant("", "", today=date(2025, 3, 20))
        self.assertEqual(ctx.exception.code, "missing_tenant_fields")


class PropertyStatsTests(SimpleTestCase):
    """Occupancy and revenue aggregates."""

    def test_full_room_contributes_rent_once(self) -> None:
        prop = Property(
            id="pg-1",
            name="Green Valley PG",
            total_rooms=15,
            monthly_rent=12000,
            floors=(Floor(1, rooms=(Room("101", 2, occupants=(ALICE, BOB)),)),),
        )
        room = next(prop.rooms())
        self.assertEqual(domain.room_status(room), RoomStatus.OCCUPIED)
        self.assertEqual(domain.property_stats(prop).monthly_revenue, 12000)

    def test_partial_room_counts_its_whole_rent(self) -> None:
        floor = Floor(1, rooms=(Room("101", 3, rent=9000, occupants=(ALICE,)), Room("102", 2)))
        stats = domain.floor_stats(floor, base_rent=5000)
        self.assertEqual(stats.monthly_revenue, 9000)
        self.assertEqual(stats.partial_rooms, 1)
        self.assertEqual(stats.available_rooms, 1)
        self.assertEqual(stats.occupancy_rate, 50.0)

    def test_property_stats_equal_sum_of_floor_stats(self) -> None:
        floors = generate_layout(17, 5, 7000, rng=random.Random(3))
        prop = Property(id="pg-2", name="Sunrise", monthly_rent=7000, floors=floors)
        summed = sum((domain.floor_stats(floor, 7000) for floor in floors), domain.PropertyStats())
        self.assertEqual(domain.property_stats(prop), summed)
        self.assertEqual(summed.total_rooms, 17)

    def test_stats_without_layout_use_registration_counters(self) -> None:
        prop = Property(id="pg-3", name="Elite", total_rooms=15, available_rooms=3, monthly_rent=12000)
        stats = domain.property_stats(prop)
        self.assertEqual(stats.occupied_rooms, 12)
        self.assertEqual(stats.monthly_revenue, 144000)

    def test_owner_dashboard_totals(self) -> None:
        first = Property(id="a", name="A", total_rooms=10, available_rooms=4, monthly_rent=5000)
        second = Property(
            id="b",
            name="B",
            monthly_rent=6000,
            floors=(Floor(1, rooms=(Room("101", 1, occupants=(ALICE,)), Room("102", 2))),),
        )
        dashboard = domain.owner_dashboard([first, second])
        self.assertEqual(dashboard.total_properties, 2)
        self.assertEqual(dashboard.totals.total_rooms, 12)
        self.assertEqual(dashboard.totals.occupied_rooms, 7)
        self.assertEqual(dashboard.totals.monthly_revenue, 36000)


class LayoutGeneratorTests(SimpleTestCase):
    def test_twelve_rooms_six_per_floor(self) -> None:
        floors = generate_layout(12, 6, 8500, rng=random.Random(42))
        self.assertEqual(len(floors), 2)
        self.assertEqual([len(floor.rooms) for floor in floors], [6, 6])
        self.assertEqual(
            [room.number for room in floors[1].rooms],
            ["201", "202", "203", "204", "205", "206"],
        )
        for floor in floors:
            for room in floor.rooms:
                self.assertIn(room.capacity, (1, 2, 3))
                self.assertLessEqual(room.occupant_count, room.capacity)
                self.assertEqual(room.rent, 8500)
                expected = (
                    RoomStatus.AVAILABLE
                    if room.occupant_count == 0
                    else RoomStatus.OCCUPIED
                    if room.occupant_count == room.capacity
                    else RoomStatus.PARTIAL
                )
                self.assertEqual(domain.room_status(room), expected)

    def test_same_seed_gives_same_layout(self) -> None:
        self.assertEqual(
            generate_layout(12, 6, 8500, rng=random.Random(7)),
            generate_layout(12, 6, 8500, rng=random.Random(7)),
        )
        self.assertEqual(fallback_layout("pg-1", 10, 4, 5000), fallback_layout("pg-1", 10, 4, 5000))

    def test_last_floor_may_be_partial(self) -> None:
        floors = generate_layout(14, 6, 5000, rng=random.Random(1))
        self.assertEqual([len(floor.rooms) for floor in floors], [6, 6, 2])
        self.assertEqual(floors[0].name, "Ground Floor")

    def test_empty_configuration(self) -> None:
        floors = empty_configuration(5, 4, 6000, capacity=2)
        rooms = [room for floor in floors for room in floor.rooms]
        self.assertEqual(len(rooms), 5)
        self.assertTrue(all(room.capacity == 2 and not room.occupants for room in rooms))

    def test_invalid_dimensions_are_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            generate_layout(0, 6, 5000)
        with self.assertRaises(ValidationError):
            empty_configuration(4, 0, 5000)
        with self.assertRaises(ValidationError):
            empty_configuration(4, 2, 5000, capacity=4)


class NormalizerTests(SimpleTestCase):
    """Reading both stored layout shapes."""

    def test_legacy_layout_is_grouped_by_floor(self) -> None:
        prop = normalize_property("legacy", LEGACY_PG)
        self.assertEqual(prop.layout_source, SOURCE_LAYOUT)
        self.assertEqual(len(prop.floors), 1)
        self.assertEqual(prop.floors[0].number, 1)
        self.assertEqual([room.number for room in prop.rooms()], ["101", "102", "103"])
        self.assertEqual(domain.property_stats(prop).monthly_revenue, 22000)

    def test_stored_status_is_ignored(self) -> None:
        room = normalize_room({"id": "7", "capacity": 2, "occupied": 2, "status": "occupied", "occupants": []})
        self.assertEqual(room.number, "7")
        self.assertEqual(domain.room_status(room), RoomStatus.AVAILABLE)

    def test_capacity_fallbacks(self) -> None:
        self.assertEqual(normalize_room({"number": "1", "sharing": 3}).capacity, 3)
        self.assertEqual(normalize_room({"number": "2", "sharingType": "Double"}).capacity, 2)

    def test_over_capacity_room_is_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            normalize_room({"number": "1", "capacity": 1, "occupants": [{"name": "A"}, {"name": "B"}]})
        self.assertEqual(ctx.exception.code, "over_capacity")

    def test_rent_status_alias(self) -> None:
        room = normalize_room({"number": "1", "capacity": 1, "occupants": [{"name": "A", "rentStatus": True}]})
        self.assertTrue(room.occupants[0].rent_paid)

    def test_configuration_takes_precedence_over_legacy_layout(self) -> None:
        document = copy.deepcopy(LEGACY_PG)
        document["buildingConfiguration"] = serialize_configuration(empty_configuration(2, 2, 5000, capacity=1))
        prop = normalize_property("both", document, version=4)
        self.assertEqual(prop.layout_source, SOURCE_CONFIGURATION)
        self.assertEqual([room.number for room in prop.rooms()], ["101", "102"])
        self.assertEqual(prop.version, 4)

    def test_serialized_configuration_never_stores_status(self) -> None:
        floors = generate_layout(4, 2, 5000, rng=random.Random(9))
        config = serialize_configuration(floors)
        self.assertEqual(config["totalFloors"], 2)
        self.assertEqual(config["totalRooms"], 4)
        for floor in config["floors"]:
            for room in floor["rooms"]:
                self.assertNotIn("status", room)
                self.assertNotIn("occupied", room)
        self.assertEqual(normalize_property("x", {"buildingConfiguration": config}).floors, floors)

    def test_rooms_without_numbers_are_numbered_by_position(self) -> None:
        config = {
            "floors": [
                {"number": 2, "rooms": [{"capacity": 1}, {"number": " ", "capacity": 3, "occupants": [{"name": "X"}]}]},
            ],
        }
        prop = normalize_property("x", {"buildingConfiguration": config})
        self.assertEqual([(room.number, room.capacity) for room in prop.rooms()], [("201", 1), ("202", 3)])

        legacy = normalize_property("y", {"buildingLayout": {"rooms": [{"floorId": 1, "capacity": 2}]}})
        self.assertEqual([room.number for room in legacy.rooms()], ["201"])

        with self.assertRaises(ValidationError) as ctx:
            normalize_room({"number": "", "capacity": 1})
        self.assertEqual(ctx.exception.code, "missing_room_number")

    def test_duplicate_room_numbers_are_rejected(self) -> None:
        config = {
            "floors": [
                {"number": 1, "rooms": [{"number": "101", "capacity": 1}]},
                {"number": 2, "rooms": [{"number": "101", "capacity": 3}]},
            ],
        }
        with self.assertRaises(ValidationError) as ctx:
            normalize_property("x", {"buildingConfiguration": config})
        self.assertEqual(ctx.exception.code, "duplicate_room")

        layout = {"rooms": [{"id": "5", "floorId": 0, "capacity": 1}, {"id": "5", "floorId": 1, "capacity": 2}]}
        with self.assertRaises(ValidationError) as ctx:
            normalize_property("y", {"buildingLayout": layout})
        self.assertEqual(ctx.exception.code, "duplicate_room")

    def test_legacy_floor_ids(self) -> None:
        layout = {
            "rooms": [
                {"number": "301", "floorId": "floor-2", "capacity": 1},
                {"number": "001", "floorId": "ground", "capacity": 1},
                {"number": "201", "floorId": "floor-1", "capacity": 1},
                {"number": "202", "floorId": "1", "capacity": 1},
            ],
        }
        prop = normalize_property("x", {"buildingLayout": layout})
        self.assertEqual([floor.number for floor in prop.floors], [1, 2, 3])
        self.assertEqual([room.number for room in prop.floors[1].rooms], ["201", "202"])

        with self.assertRaises(ValidationError) as ctx:
            normalize_property("y", {"buildingLayout": {"rooms": [{"number": "1", "floorId": "attic"}]}})
        self.assertEqual(ctx.exception.code, "invalid_floor")


class GatewayTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.gateway = DocumentStoreGateway()
        self.owner = CallerContext(owner_id="owner-1", name="Asha", email="asha@example.com")

    def test_create_stamps_owner_and_timestamps(self) -> None:
        document = self.gateway.create_property(self.owner, _registration())
        self.assertEqual(document.version, 1)
        self.assertEqual(document.data["ownerId"], "owner-1")
        self.assertEqual(document.data["ownerName"], "Asha")
        self.assertEqual(document.data["status"], "active")
        self.assertIn("createdAt", document.data)

    def test_update_merges_top_level_keys(self) -> None:
        document = self.gateway.create_property(self.owner, _registration(buildingLayout={"rooms": [{"id": "1"}]}))
        updated = self.gateway.update_property(document.id, {"monthlyRent": 9000, "buildingLayout": {"rooms": []}})
        self.assertEqual(updated.version, 2)
        self.assertEqual(updated.data["monthlyRent"], 9000)
        self.assertEqual(updated.data["name"], "Lakeside PG")
        self.assertEqual(updated.data["buildingLayout"], {"rooms": []})

    def test_update_if_version_rejects_stale_writes(self) -> None:
        document = self.gateway.create_property(self.owner, _registration())
        self.gateway.update_if_version(document.id, {"monthlyRent": 9000}, expected_version=1)
        with self.assertRaises(WriteError) as ctx:
            self.gateway.update_if_version(document.id, {"monthlyRent": 1}, expected_version=1)
        self.assertEqual(ctx.exception.code, "version_conflict")
        self.assertEqual(self.gateway.fetch_property(document.id).data["monthlyRent"], 9000)

    def test_owner_and_creation_time_are_protected(self) -> None:
        document = self.gateway.create_property(self.owner, _registration())
        with self.assertRaises(ValidationError):
            self.gateway.update_property(document.id, {"ownerId": "someone-else"})

    def test_missing_documents(self) -> None:
        with self.assertRaises(NotFoundError):
            self.gateway.fetch_property("missing")
        with self.assertRaises(NotFoundError):
            self.gateway.update_property("missing", {"name": "x"})

    def test_fetch_and_delete_are_owner_scoped(self) -> None:
        mine = self.gateway.create_property(self.owner, _registration())
        other = CallerContext(owner_id="owner-2")
        self.gateway.create_property(other, _registration(name="Other PG"))
        self.assertEqual([doc.id for doc in self.gateway.fetch_properties_by_owner(self.owner)], [mine.id])
        with self.assertRaises(NotFoundError):
            self.gateway.delete_property(other, mine.id)
        self.gateway.delete_property(self.owner, mine.id)
        self.assertFalse(PGDocument.objects.filter(pk=mine.id).exists())


class ServiceTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.gateway = DocumentStoreGateway()
        self.legacy = self.gateway.create_property(SAMPLE_OWNER, copy.deepcopy(LEGACY_PG))

    def test_adding_tenant_to_legacy_layout_writes_configuration(self) -> None:
        prop = services.add_tenant(
            self.gateway,
            SAMPLE_OWNER,
            self.legacy.id,
            "103",
            name="Meera",
            email="meera@example.com",
            today=date(2025, 1, 10),
        )
        self.assertEqual(prop.layout_source, SOURCE_CONFIGURATION)
        self.assertEqual(domain.room_status(domain.find_room(prop, "103")), RoomStatus.OCCUPIED)

        stored = PGDocument.objects.get(pk=self.legacy.id)
        self.assertEqual(stored.data["buildingLayout"], LEGACY_PG["buildingLayout"])
        self.assertEqual(stored.data["totalRooms"], 3)
        self.assertEqual(stored.data["availableRooms"], 0)
        room = stored.data["buildingConfiguration"]["floors"][0]["rooms"][2]
        self.assertEqual(room["occupants"][0]["rentDueDate"], "2025-01-05")

    def test_adding_tenant_to_full_room_does_not_write(self) -> None:
        with self.assertRaises(ValidationError):
            services.add_tenant(self.gateway, SAMPLE_OWNER, self.legacy.id, "101", name="X", email="x@example.com")
        self.assertEqual(PGDocument.objects.get(pk=self.legacy.id).version, 1)

    def test_toggle_and_vacate(self) -> None:
        prop = services.toggle_rent(self.gateway, SAMPLE_OWNER, self.legacy.id, "102", 1)
        self.assertTrue(domain.find_room(prop, "102").occupants[1].rent_paid)
        prop = services.vacate_tenant(self.gateway, SAMPLE_OWNER, self.legacy.id, "102", 0, expected_version=2)
        room = domain.find_room(prop, "102")
        self.assertEqual([occupant.name for occupant in room.occupants], ["Sneha Patel", "Kavya Reddy"])
        self.assertEqual(prop.version, 3)

    def test_tenant_add_keeps_neighbouring_unnumbered_rooms(self) -> None:
        config = {
            "floors": [
                {"rooms": [{"capacity": 1}, {"capacity": 3, "occupants": [{"name": "X", "email": "x@example.com"}]}]},
            ],
        }
        document = self.gateway.create_property(SAMPLE_OWNER, _registration(buildingConfiguration=config))
        services.add_tenant(self.gateway, SAMPLE_OWNER, document.id, "101", name="A", email="a@example.com")

        rooms = PGDocument.objects.get(pk=document.id).data["buildingConfiguration"]["floors"][0]["rooms"]
        self.assertEqual(
            [(room["number"], room["capacity"], [o["name"] for o in room["occupants"]]) for room in rooms],
            [("101", 1, ["A"]), ("102", 3, ["X"])],
        )

    def test_duplicate_rooms_block_mutations(self) -> None:
        config = {
            "floors": [
                {"rooms": [{"number": "1", "capacity": 1}, {"number": "1", "capacity": 3, "occupants": [{"name": "X"}]}]},
            ],
        }
        document = self.gateway.create_property(SAMPLE_OWNER, _registration(buildingConfiguration=config))
        with self.assertRaises(ValidationError) as ctx:
            services.add_tenant(self.gateway, SAMPLE_OWNER, document.id, "1", name="A", email="a@example.com")
        self.assertEqual(ctx.exception.code, "duplicate_room")
        stored = PGDocument.objects.get(pk=document.id)
        self.assertEqual(stored.version, 1)
        self.assertEqual(stored.data["buildingConfiguration"], config)

    def test_unknown_room(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            services.toggle_rent(self.gateway, SAMPLE_OWNER, self.legacy.id, "999", 0)
        self.assertEqual(ctx.exception.code, "room_not_found")

    def test_other_owner_cannot_mutate(self) -> None:
        stranger = CallerContext(owner_id="stranger")
        with self.assertRaises(NotFoundError):
            services.vacate_tenant(self.gateway, stranger, self.legacy.id, "101", 0)

    def test_generated_layout_is_display_only(self) -> None:
        document = self.gateway.create_property(SAMPLE_OWNER, _registration())
        prop = services.load_property(self.gateway, document.id)
        self.assertEqual(prop.layout_source, SOURCE_GENERATED)
        self.assertEqual(len(prop.floors), 2)
        self.assertNotIn("buildingConfiguration", PGDocument.objects.get(pk=document.id).data)

        with self.assertRaises(NotFoundError) as ctx:
            services.add_tenant(self.gateway, SAMPLE_OWNER, document.id, "101", name="A", email="a@example.com")
        self.assertEqual(ctx.exception.code, "no_building_configuration")

    def test_configure_layout(self) -> None:
        document = self.gateway.create_property(SAMPLE_OWNER, _registration())
        prop = services.configure_layout(
            self.gateway,
            SAMPLE_OWNER,
            document.id,
            total_rooms=6,
            rooms_per_floor=3,
            capacity=2,
        )
        self.assertEqual([len(floor.rooms) for floor in prop.floors], [3, 3])
        self.assertEqual(prop.total_rooms, 6)
        self.assertEqual(prop.available_rooms, 6)
        self.assertTrue(all(room.rent == 8500 for room in prop.rooms()))

    def test_configure_layout_refuses_occupied_building(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            services.configure_layout(self.gateway, SAMPLE_OWNER, self.legacy.id, total_rooms=4)
        self.assertEqual(ctx.exception.code, "layout_occupied")

    def test_search_filters(self) -> None:
        owner = CallerContext(owner_id="owner-1")
        self.gateway.create_property(owner, _registration(name="Mysore PG", city="mysore"))
        self.gateway.create_property(owner, _registration(name="Closed PG", availability="closed"))
        self.gateway.create_property(owner, _registration(name="Cheap PG", monthlyRent=4000, amenities=["WiFi"]))

        def names(**filters):
            results = services.search_properties(self.gateway, services.SearchFilters(**filters))
            return [prop.name for prop in results]

        self.assertNotIn("Closed PG", names())
        self.assertNotIn("Mysore PG", names(city="Bangalore"))
        self.assertEqual(names(city="bangalore", max_rent=5000), ["Cheap PG"])
        self.assertNotIn("Cheap PG", names(amenities=("ac",)))
        self.assertEqual(names(city="bangalore", ordering="rent")[0], "Cheap PG")

    def test_booking_quote(self) -> None:
        prop = normalize_property("pg-1", _registration())
        today = date(2025, 6, 1)
        attempt = services.BookingAttempt("Ravi", "ravi@example.com", "9876543210", date(2025, 6, 10), 3)
        quote = services.booking_quote(prop, attempt, today=today)
        self.assertEqual(quote.amount_due, 8500 + 500)

        past = services.BookingAttempt("Ravi", "ravi@example.com", "9876543210", date(2025, 5, 1))
        with self.assertRaises(ValidationError) as ctx:
            services.booking_quote(prop, past, today=today)
        self.assertEqual(ctx.exception.code, "invalid_check_in")

        closed = normalize_property("pg-2", _registration(availability="closed"))
        with self.assertRaises(ValidationError):
            services.booking_quote(closed, attempt, today=today)


class OwnerAPITests(APITestCase):
    """Owner endpoints: registration, layout and tenants."""

    def setUp(self) -> None:
        super().setUp()
        self.user = User.objects.create_user(username="owner1", email="owner1@example.com", password="Own3rPass")
        self.client.force_authenticate(self.user)

    def _create_pg(self, **overrides) -> dict:
        payload = {
            "name": "Green Valley PG",
            "address": "123 Koramangala",
            "city": "bangalore",
            "total_rooms": 4,
            "monthly_rent": 6000,
            "amenities": ["WiFi", "wifi", "AC"],
        }
        payload.update(overrides)
        response = self.client.post(reverse("listings:owner-pgs-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def _configure(self, pg_id: str) -> dict:
        response = self.client.post(
            reverse("listings:owner-pgs-layout", args=[pg_id]),
            {"total_rooms": 4, "rooms_per_floor": 2, "capacity": 2},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        return response.data

    def _tenants_url(self, pg_id: str, room: str = "101") -> str:
        return reverse("listings:owner-tenants", args=[pg_id, room])

    def test_requires_authentication(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.get(reverse("listings:owner-pgs-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_register_pg(self) -> None:
        data = self._create_pg()
        self.assertEqual(data["version"], 1)
        self.assertEqual(data["amenities"], ["WiFi", "AC"])
        self.assertEqual(data["owner_email"], "owner1@example.com")
        self.assertEqual(data["stats"]["available_rooms"], 4)
        self.assertEqual(PGDocument.objects.get(pk=data["id"]).owner_id, "owner1")

    def test_register_pg_validates_available_rooms(self) -> None:
        response = self.client.post(
            reverse("listings:owner-pgs-list"),
            {"name": "X", "address": "Y", "city": "Z", "total_rooms": 2, "available_rooms": 5, "monthly_rent": 1},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("available_rooms", response.data)

    def test_list_only_returns_own_pgs(self) -> None:
        self._create_pg()
        DocumentStoreGateway().create_property(CallerContext(owner_id="someone"), _registration())
        response = self.client.get(reverse("listings:owner-pgs-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["name"] for item in response.data], ["Green Valley PG"])

    def test_other_owners_pg_is_not_found(self) -> None:
        document = DocumentStoreGateway().create_property(CallerContext(owner_id="someone"), _registration())
        response = self.client.get(reverse("listings:owner-pgs-detail", args=[document.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["ok"])
        self.assertEqual(response.data["code"], "pg_not_found")

    def test_layout_and_tenant_lifecycle(self) -> None:
        pg_id = self._create_pg()["id"]
        data = self._configure(pg_id)
        self.assertEqual(data["layout_source"], "configuration")
        self.assertEqual(
            [room["number"] for floor in data["floors"] for room in floor["rooms"]],
            ["101", "102", "201", "202"],
        )

        response = self.client.post(self._tenants_url(pg_id), {"name": "Alice", "email": "alice@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        room = response.data["floors"][0]["rooms"][0]
        self.assertEqual(room["status"], "partial")
        self.assertEqual(room["payment_status"], "pending")
        self.assertEqual(room["rent"], 6000)

        response = self.client.post(self._tenants_url(pg_id), {"name": "Bob", "email": "bob@example.com"}, format="json")
        self.assertEqual(response.data["floors"][0]["rooms"][0]["status"], "occupied")
        self.assertEqual(response.data["stats"]["monthly_revenue"], 6000)

        response = self.client.post(self._tenants_url(pg_id), {"name": "Charu", "email": "charu@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "room_full")

        response = self.client.post(reverse("listings:owner-tenant-rent", args=[pg_id, "101", 0]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["floors"][0]["rooms"][0]["payment_status"], "partial")

        response = self.client.patch(
            reverse("listings:owner-tenant-detail", args=[pg_id, "101", 1]),
            {"phone": "+91 9000000000"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["floors"][0]["rooms"][0]["occupants"][1]["phone"], "+91 9000000000")

        response = self.client.delete(reverse("listings:owner-tenant-detail", args=[pg_id, "101", 0]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        occupants = response.data["floors"][0]["rooms"][0]["occupants"]
        self.assertEqual([occupant["name"] for occupant in occupants], ["Bob"])

    def test_vacate_unknown_index(self) -> None:
        pg_id = self._create_pg()["id"]
        self._configure(pg_id)
        response = self.client.delete(reverse("listings:owner-tenant-detail", args=[pg_id, "101", 5]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "occupant_not_found")

    def test_stale_version_conflicts(self) -> None:
        pg_id = self._create_pg()["id"]
        self._configure(pg_id)
        response = self.client.patch(
            reverse("listings:owner-pgs-detail", args=[pg_id]),
            {"monthly_rent": 7000, "expected_version": 1},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "version_conflict")

        response = self.client.patch(
            reverse("listings:owner-pgs-detail", args=[pg_id]),
            {"monthly_rent": 7000, "expected_version": 2},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["monthly_rent"], 7000)
        self.assertEqual(response.data["version"], 3)

    def test_delete_pg(self) -> None:
        pg_id = self._create_pg()["id"]
        response = self.client.delete(reverse("listings:owner-pgs-detail", args=[pg_id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PGDocument.objects.filter(pk=pg_id).exists())

    def test_dashboard(self) -> None:
        gateway = DocumentStoreGateway()
        owner = CallerContext(owner_id="owner1")
        gateway.create_property(owner, _registration(totalRooms=10, availableRooms=4, monthlyRent=5000))
        gateway.create_property(owner, copy.deepcopy(LEGACY_PG))
        response = self.client.get(reverse("listings:owner-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_properties"], 2)
        self.assertEqual(response.data["totals"]["total_rooms"], 13)
        self.assertEqual(response.data["totals"]["monthly_revenue"], 30000 + 22000)
        self.assertEqual(len(response.data["properties"]), 2)


class PublicAPITests(APITestCase):
    def setUp(self) -> None:
        super().setUp()
        gateway = DocumentStoreGateway()
        owner = CallerContext(owner_id="owner-1", name="Asha")
        self.open_pg = gateway.create_property(owner, _registration())
        self.female_pg = gateway.create_property(
            owner,
            _registration(name="Elite Heights", pgType="female", monthlyRent=15000, amenities=["WiFi"]),
        )
        gateway.create_property(owner, _registration(name="Closed PG", availability="closed"))

    def test_search(self) -> None:
        response = self.client.get(reverse("listings:pgs-list"), {"city": "Bangalore", "ordering": "-rent"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["name"] for item in response.data], ["Elite Heights", "Lakeside PG"])

        response = self.client.get(reverse("listings:pgs-list"), {"amenities": "ac"})
        self.assertEqual([item["name"] for item in response.data], ["Lakeside PG"])

        response = self.client.get(reverse("listings:pgs-list"), {"min_rent": 9000, "max_rent": 1000})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_falls_back_to_generated_layout(self) -> None:
        response = self.client.get(reverse("listings:pgs-detail", args=[self.open_pg.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["layout_source"], "generated")
        self.assertEqual([len(floor["rooms"]) for floor in response.data["floors"]], [6, 6])
        again = self.client.get(reverse("listings:pgs-detail", args=[self.open_pg.id]))
        self.assertEqual(again.data["floors"], response.data["floors"])

    def test_detail_missing(self) -> None:
        response = self.client.get(reverse("listings:pgs-detail", args=["nope"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_hides_tenant_contact_details(self) -> None:
        config = {
            "floors": [
                {
                    "number": 1,
                    "rooms": [
                        {
                            "number": "101",
                            "capacity": 2,
                            "occupants": [
                                {
                                    "name": "Meera",
                                    "email": "meera@example.com",
                                    "phone": "+91 9000000001",
                                    "college": "rvce",
                                    "year": "2",
                                    "rentPaid": True,
                                    "dueAmount": 1200,
                                },
                            ],
                        },
                    ],
                },
            ],
        }
        owner = CallerContext(owner_id="owner-1", name="Asha")
        document = DocumentStoreGateway().create_property(owner, _registration(buildingConfiguration=config))

        response = self.client.get(reverse("listings:pgs-detail", args=[document.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        room = response.data["floors"][0]["rooms"][0]
        self.assertEqual(room["occupant_count"], 1)
        self.assertNotIn("payment_status", room)
        self.assertEqual(dict(room["occupants"][0]), {"name": "Meera", "college": "rvce", "year": "2"})
        self.assertNotIn("monthly_revenue", response.data["stats"])
        self.assertNotIn("pending_dues", response.data["floors"][0]["stats"])
        self.assertNotIn("meera@example.com", str(response.data))

        listing = self.client.get(reverse("listings:pgs-list"))
        self.assertNotIn("monthly_revenue", listing.data[0]["stats"])

        self.client.force_authenticate(User.objects.create_user(username="owner-1", password="Own3rPass"))
        response = self.client.get(reverse("listings:owner-pgs-detail", args=[document.id]))
        occupant = response.data["floors"][0]["rooms"][0]["occupants"][0]
        self.assertEqual(occupant["email"], "meera@example.com")
        self.assertEqual(occupant["phone"], "+91 9000000001")
        self.assertEqual(response.data["stats"]["monthly_revenue"], 8500)

    def test_booking_quote(self) -> None:
        check_in = timezone.localdate() + timedelta(days=7)
        response = self.client.post(
            reverse("listings:pgs-booking-quote", args=[self.female_pg.id]),
            {
                "name": "Priya",
                "email": "priya@example.com",
                "phone": "+91 9876543210",
                "check_in": check_in.isoformat(),
                "duration_months": 3,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["monthly_rent"], 15000)
        self.assertEqual(response.data["amount_due"], 15500)


class CommandTests(TestCase):
    def test_seed_and_backfill(self) -> None:
        call_command("seed_sample_pgs", stdout=StringIO())
        documents = PGDocument.objects.filter(owner_id=SAMPLE_OWNER.owner_id)
        self.assertEqual(documents.count(), len(SAMPLE_PGS))

        out = StringIO()
        call_command("add_building_config", stdout=out)
        self.assertIn("Updated 3 PGs", out.getvalue())

        green_valley = documents.get(data__name="Green Valley PG")
        config = green_valley.data["buildingConfiguration"]
        self.assertEqual(config["totalRooms"], 15)
        self.assertEqual(config["totalFloors"], 4)
        for floor in config["floors"]:
            self.assertLessEqual(len(floor["rooms"]), 4)
            for room in floor["rooms"]:
                self.assertIn(room["capacity"], (1, 2, 3))
                self.assertEqual(room["occupants"], [])

        annexe = documents.get(data__name="Green Valley Annexe")
        self.assertNotIn("buildingConfiguration", annexe.data)

        out = StringIO()
        call_command("add_building_config", stdout=out)
        self.assertIn("Updated 0 PGs", out.getvalue())

    def test_populated_backfill(self) -> None:
        call_command("seed_sample_pgs", stdout=StringIO())
        out = StringIO()
        call_command("add_building_config", "--populated", stdout=out)
        self.assertIn("Updated 3 PGs", out.getvalue())
        self.assertIn("Skipping Green Valley Annexe - already has config", out.getvalue())

        green_valley = PGDocument.objects.get(data__name="Green Valley PG")
        config = green_valley.data["buildingConfiguration"]
        self.assertEqual(config["totalRooms"], 15)
        self.assertEqual(config["totalFloors"], 3)
        self.assertIn("configuredAt", config)
        prop = normalize_property(green_valley.id, green_valley.data)
        for room in prop.rooms():
            self.assertLessEqual(room.occupant_count, room.capacity)
        self.assertEqual(len({room.number for room in prop.rooms()}), 15)
