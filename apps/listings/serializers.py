"""Serializers for the listings app.

Input serializers validate API payloads and translate them to document keys;
the read-only serializers project domain objects for display, adding the
derived room status, payment status and occupancy stats.
"""
from __future__ import annotations

from typing import Any

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from . import domain

PG_TYPES = ("any", "male", "female")

# API field name -> persisted document key
DOCUMENT_FIELDS = {
    "name": "name",
    "description": "description",
    "address": "address",
    "city": "city",
    "state": "state",
    "pincode": "pincode",
    "pg_type": "pgType",
    "total_rooms": "totalRooms",
    "available_rooms": "availableRooms",
    "monthly_rent": "monthlyRent",
    "nearest_college": "nearestCollege",
    "distance": "distance",
    "amenities": "amenities",
    "gate_opening": "gateOpening",
    "gate_closing": "gateClosing",
    "smoking_allowed": "smokingAllowed",
    "drinking_allowed": "drinkingAllowed",
    "availability": "availability",
    "owner_phone": "ownerPhone",
}


class PropertyInputSerializer(serializers.Serializer):
    """Registration and edit payload for a PG."""

    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=500)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    pincode = serializers.RegexField(r"^\d{6}$", required=False, allow_blank=True)
    pg_type = serializers.ChoiceField(choices=PG_TYPES, default="any")
    total_rooms = serializers.IntegerField(min_value=1, max_value=500)
    available_rooms = serializers.IntegerField(min_value=0, required=False)
    monthly_rent = serializers.IntegerField(min_value=0)
    nearest_college = serializers.CharField(max_length=255, required=False, allow_blank=True)
    distance = serializers.FloatField(min_value=0, required=False)
    amenities = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    gate_opening = serializers.RegexField(r"^\d{2}:\d{2}$", required=False, allow_blank=True)
    gate_closing = serializers.RegexField(r"^\d{2}:\d{2}$", required=False, allow_blank=True)
    smoking_allowed = serializers.BooleanField(default=False)
    drinking_allowed = serializers.BooleanField(default=False)
    availability = serializers.ChoiceField(choices=("open", "closed"), default="open")
    owner_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    expected_version = serializers.IntegerField(min_value=1, required=False, write_only=True)

    def validate_amenities(self, value: list[str]) -> list[str]:
        seen: set[str] = set()
        unique = []
        for amenity in value:
            key = amenity.strip().lower()
            if key and key not in seen:
                seen.add(key)
                unique.append(amenity.strip())
        return unique

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        total_rooms = attrs.get("total_rooms")
        available_rooms = attrs.get("available_rooms")
        if total_rooms is not None and available_rooms is not None and available_rooms > total_rooms:
            raise serializers.ValidationError(
                {"available_rooms": _("Available rooms cannot exceed the total number of rooms.")},
            )
        return attrs

    def to_document(self) -> dict[str, Any]:
        return {
            DOCUMENT_FIELDS[key]: value
            for key, value in self.validated_data.items()
            if key in DOCUMENT_FIELDS
        }


class LayoutInputSerializer(serializers.Serializer):
    total_rooms = serializers.IntegerField(min_value=1, max_value=500)
    rooms_per_floor = serializers.IntegerField(min_value=1, max_value=50, required=False)
    base_rent = serializers.IntegerField(min_value=0, required=False)
    capacity = serializers.ChoiceField(choices=(1, 2, 3), required=False)
    expected_version = serializers.IntegerField(min_value=1, required=False)


class TenantInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    advance_payment = serializers.IntegerField(min_value=0, required=False, default=0)
    expected_version = serializers.IntegerField(min_value=1, required=False)


class VersionInputSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField(min_value=1, required=False)


class SearchQuerySerializer(serializers.Serializer):
    city = serializers.CharField(required=False, allow_blank=True, default="")
    college = serializers.CharField(required=False, allow_blank=True, default="")
    min_rent = serializers.IntegerField(min_value=0, required=False)
    max_rent = serializers.IntegerField(min_value=0, required=False)
    pg_type = serializers.ChoiceField(choices=PG_TYPES, required=False)
    amenities = serializers.CharField(required=False, allow_blank=True, default="")
    has_vacancy = serializers.BooleanField(required=False, default=False)
    ordering = serializers.ChoiceField(
        choices=("rent", "-rent", "distance", "-distance"),
        required=False,
        default="",
    )

    def validate_amenities(self, value: str) -> list[str]:
        return [item.strip() for item in value.split(",") if item.strip()]

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        min_rent = attrs.get("min_rent")
        max_rent = attrs.get("max_rent")
        if min_rent is not None and max_rent is not None and min_rent > max_rent:
            raise serializers.ValidationError({"max_rent": _("Maximum rent must not be below minimum rent.")})
        return attrs


class BookingAttemptSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.RegexField(r"^\+?[\d\s-]{10,15}$")
    check_in = serializers.DateField()
    duration_months = serializers.IntegerField(min_value=1, max_value=12, default=1)


class PublicStatsSerializer(serializers.Serializer):
    total_rooms = serializers.IntegerField()
    occupied_rooms = serializers.IntegerField()
    partial_rooms = serializers.IntegerField()
    available_rooms = serializers.IntegerField()
    total_beds = serializers.IntegerField()
    occupied_beds = serializers.IntegerField()
    occupancy_rate = serializers.FloatField()


class StatsSerializer(PublicStatsSerializer):
    monthly_revenue = serializers.IntegerField()
    rent_paid_count = serializers.IntegerField()
    rent_pending_count = serializers.IntegerField()
    pending_dues = serializers.IntegerField()


class PublicOccupantSerializer(serializers.Serializer):
    """What visitors may see of a tenant."""

    name = serializers.CharField()
    college = serializers.CharField()
    year = serializers.CharField()


class OccupantSerializer(PublicOccupantSerializer):
    email = serializers.CharField()
    phone = serializers.CharField()
    rent_paid = serializers.BooleanField()
    rent_due_date = serializers.CharField(allow_null=True)
    advance_payment = serializers.IntegerField()
    due_amount = serializers.IntegerField()
    joined_date = serializers.CharField(allow_null=True)


class BaseRoomSerializer(serializers.Serializer):
    number = serializers.CharField()
    capacity = serializers.IntegerField()
    rent = serializers.SerializerMethodField()
    sharing_type = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()
    occupant_count = serializers.IntegerField()
    free_beds = serializers.IntegerField()
    amenities = serializers.ListField(child=serializers.CharField())

    def get_rent(self, room: domain.Room) -> int:
        return room.rent if room.rent is not None else self.context.get("base_rent", 0)

    def get_sharing_type(self, room: domain.Room) -> str:
        return domain.sharing_type(room.capacity)

    def get_status(self, room: domain.Room) -> str:
        return domain.room_status(room).value


class PublicRoomSerializer(BaseRoomSerializer):
    occupants = PublicOccupantSerializer(many=True)


class RoomSerializer(BaseRoomSerializer):
    payment_status = serializers.SerializerMethodField()
    occupants = OccupantSerializer(many=True)

    def get_payment_status(self, room: domain.Room) -> str:
        return domain.room_payment_status(room).value


class FloorSerializer(serializers.Serializer):
    stats_class = StatsSerializer

    number = serializers.IntegerField()
    name = serializers.CharField()
    rooms = RoomSerializer(many=True)
    stats = serializers.SerializerMethodField()

    def get_stats(self, floor: domain.Floor) -> dict[str, Any]:
        return self.stats_class(domain.floor_stats(floor, self.context.get("base_rent", 0))).data


class PublicFloorSerializer(FloorSerializer):
    stats_class = PublicStatsSerializer

    rooms = PublicRoomSerializer(many=True)


class PropertySummarySerializer(serializers.Serializer):
    stats_class = StatsSerializer

    id = serializers.CharField()
    name = serializers.CharField()
    address = serializers.CharField()
    city = serializers.CharField()
    pg_type = serializers.CharField()
    monthly_rent = serializers.IntegerField()
    nearest_college = serializers.CharField()
    distance = serializers.FloatField(allow_null=True)
    amenities = serializers.ListField(child=serializers.CharField())
    availability = serializers.CharField()
    status = serializers.CharField()
    owner_name = serializers.CharField()
    owner_phone = serializers.CharField()
    has_layout = serializers.BooleanField()
    stats = serializers.SerializerMethodField()

    def get_stats(self, prop: domain.Property) -> dict[str, Any]:
        return self.stats_class(domain.property_stats(prop)).data


class PublicPropertySummarySerializer(PropertySummarySerializer):
    stats_class = PublicStatsSerializer


class PropertyDetailSerializer(PropertySummarySerializer):
    description = serializers.CharField()
    total_rooms = serializers.IntegerField()
    available_rooms = serializers.IntegerField(allow_null=True)
    gate_opening = serializers.CharField()
    gate_closing = serializers.CharField()
    smoking_allowed = serializers.BooleanField()
    drinking_allowed = serializers.BooleanField()
    owner_email = serializers.CharField()
    layout_source = serializers.CharField(allow_null=True)
    version = serializers.IntegerField()
    floors = FloorSerializer(many=True)


class PublicPropertyDetailSerializer(PropertyDetailSerializer):
    """Listing detail for visitors: tenants reduced to name, college and year."""

    stats_class = PublicStatsSerializer

    floors = PublicFloorSerializer(many=True)


def property_detail(prop: domain.Property) -> dict[str, Any]:
    return PropertyDetailSerializer(prop, context={"base_rent": prop.monthly_rent}).data


def public_property_detail(prop: domain.Property) -> dict[str, Any]:
    return PublicPropertyDetailSerializer(prop, context={"base_rent": prop.monthly_rent}).data


class DashboardSerializer(serializers.Serializer):
    total_properties = serializers.IntegerField()
    totals = StatsSerializer()
    properties = serializers.SerializerMethodField()

    def get_properties(self, dashboard: domain.OwnerDashboard) -> list[dict[str, Any]]:
        return PropertySummarySerializer([entry.pg for entry in dashboard.entries], many=True).data


class BookingQuoteSerializer(serializers.Serializer):
    pg_id = serializers.CharField()
    pg_name = serializers.CharField()
    monthly_rent = serializers.IntegerField()
    security_deposit = serializers.IntegerField()
    duration_months = serializers.IntegerField()
    check_in = serializers.DateField()
    amount_due = serializers.IntegerField()
