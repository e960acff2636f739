"""Listings app configuration."""
from __future__ import annotations

from django.apps import AppConfig


class ListingsConfig(AppConfig):
    name = "apps.listings"
    label = "listings"
    verbose_name = "PG listings"
