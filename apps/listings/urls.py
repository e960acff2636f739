"""Listings app URL configuration."""
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    OwnerDashboardView,
    OwnerPGViewSet,
    OwnerTenantDetailView,
    OwnerTenantListView,
    OwnerTenantRentView,
    PGViewSet,
)

app_name = "listings"

router = DefaultRouter()
router.register(r"owner/pgs", OwnerPGViewSet, basename="owner-pgs")
router.register(r"pgs", PGViewSet, basename="pgs")

tenant_prefix = "owner/pgs/<str:pk>/rooms/<str:room_number>/tenants/"

urlpatterns = [
    path("owner/dashboard/", OwnerDashboardView.as_view(), name="owner-dashboard"),
    path(tenant_prefix, OwnerTenantListView.as_view(), name="owner-tenants"),
    path(f"{tenant_prefix}<int:index>/", OwnerTenantDetailView.as_view(), name="owner-tenant-detail"),
    path(f"{tenant_prefix}<int:index>/rent/", OwnerTenantRentView.as_view(), name="owner-tenant-rent"),
    path("", include(router.urls)),
]
