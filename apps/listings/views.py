"""Views for the listings app."""
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .gateway import CallerContext, DocumentStoreGateway
from .serializers import (
    BookingAttemptSerializer,
    BookingQuoteSerializer,
    DashboardSerializer,
    LayoutInputSerializer,
    PropertyInputSerializer,
    PropertySummarySerializer,
    PublicPropertySummarySerializer,
    SearchQuerySerializer,
    TenantInputSerializer,
    VersionInputSerializer,
    property_detail,
    public_property_detail,
)


class GatewayMixin:
    """Give views a document-store gateway and the caller's identity."""

    gateway_class = DocumentStoreGateway

    def get_gateway(self) -> DocumentStoreGateway:
        return self.gateway_class()

    def get_caller(self) -> CallerContext:
        return CallerContext.from_user(self.request.user)

    def get_expected_version(self) -> int | None:
        data = self.request.data or self.request.query_params
        serializer = VersionInputSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data.get("expected_version")


class OwnerPGViewSet(GatewayMixin, viewsets.ViewSet):
    """Register, inspect, edit and delete the caller's PGs."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[A-Za-z0-9_-]+"

    def list(self, request):
        dashboard = services.owner_dashboard(self.get_gateway(), self.get_caller())
        data = PropertySummarySerializer([entry.pg for entry in dashboard.entries], many=True).data
        return Response(data)

    def create(self, request):
        serializer = PropertyInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prop = services.register_property(self.get_gateway(), self.get_caller(), serializer.to_document())
        return Response(property_detail(prop), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        prop = services.load_owned_property(self.get_gateway(), self.get_caller(), pk)
        return Response(property_detail(prop))

    def partial_update(self, request, pk=None):
        serializer = PropertyInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        prop = services.edit_property(
            self.get_gateway(),
            self.get_caller(),
            pk,
            serializer.to_document(),
            expected_version=serializer.validated_data.get("expected_version"),
        )
        return Response(property_detail(prop))

    def destroy(self, request, pk=None):
        services.delete_property(self.get_gateway(), self.get_caller(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def layout(self, request, pk=None):
        serializer = LayoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prop = services.configure_layout(self.get_gateway(), self.get_caller(), pk, **serializer.validated_data)
        return Response(property_detail(prop))


class OwnerTenantListView(GatewayMixin, APIView):
    """Add a tenant to a room with free beds."""

    permission_classes = [IsAuthenticated]

    def post(self, request, pk: str, room_number: str, *args, **kwargs):
        serializer = TenantInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prop = services.add_tenant(self.get_gateway(), self.get_caller(), pk, room_number, **serializer.validated_data)
        return Response(property_detail(prop), status=status.HTTP_201_CREATED)


class OwnerTenantDetailView(GatewayMixin, APIView):
    """Edit or vacate the tenant at ``index`` in a room."""

    permission_classes = [IsAuthenticated]

    def patch(self, request, pk: str, room_number: str, index: int, *args, **kwargs):
        serializer = TenantInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        expected_version = changes.pop("expected_version", None)
        prop = services.edit_tenant(
            self.get_gateway(),
            self.get_caller(),
            pk,
            room_number,
            index,
            changes,
            expected_version=expected_version,
        )
        return Response(property_detail(prop))

    def delete(self, request, pk: str, room_number: str, index: int, *args, **kwargs):
        prop = services.vacate_tenant(
            self.get_gateway(),
            self.get_caller(),
            pk,
            room_number,
            index,
            expected_version=self.get_expected_version(),
        )
        return Response(property_detail(prop))


class OwnerTenantRentView(GatewayMixin, APIView):
    """Flip the rent-paid flag of a tenant."""

    permission_classes = [IsAuthenticated]

    def post(self, request, pk: str, room_number: str, index: int, *args, **kwargs):
        prop = services.toggle_rent(
            self.get_gateway(),
            self.get_caller(),
            pk,
            room_number,
            index,
            expected_version=self.get_expected_version(),
        )
        return Response(property_detail(prop))


class OwnerDashboardView(GatewayMixin, APIView):
    """Occupancy and revenue across all of the caller's PGs."""

    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        dashboard = services.owner_dashboard(self.get_gateway(), self.get_caller())
        return Response(DashboardSerializer(dashboard).data)


class PGViewSet(GatewayMixin, viewsets.ViewSet):
    """Public browsing of PG listings."""

    permission_classes = [AllowAny]
    lookup_value_regex = r"[A-Za-z0-9_-]+"

    def list(self, request):
        query = SearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        filters = services.SearchFilters(
            city=params.get("city", ""),
            college=params.get("college", ""),
            min_rent=params.get("min_rent"),
            max_rent=params.get("max_rent"),
            pg_type=params.get("pg_type", ""),
            amenities=tuple(params.get("amenities") or ()),
            has_vacancy=params.get("has_vacancy", False),
            ordering=params.get("ordering", ""),
        )
        results = services.search_properties(self.get_gateway(), filters)
        return Response(PublicPropertySummarySerializer(results, many=True).data)

    def retrieve(self, request, pk=None):
        prop = services.load_property(self.get_gateway(), pk)
        return Response(public_property_detail(prop))

    @action(detail=True, methods=["post"], url_path="booking-quote")
    def booking_quote(self, request, pk=None):
        serializer = BookingAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prop = services.load_property(self.get_gateway(), pk, allow_generated=False)
        quote = services.booking_quote(prop, services.BookingAttempt(**serializer.validated_data))
        return Response(BookingQuoteSerializer(quote).data)
