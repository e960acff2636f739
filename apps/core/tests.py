"""Tests for the core app."""
from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import exceptions, status
from rest_framework.test import APITestCase

from .exceptions import NotFoundError, ValidationError, WriteError
from .handlers import exception_handler


class HealthTests(APITestCase):
    def test_health(self) -> None:
        response = self.client.get(reverse("core:health"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"ok": True, "service": "pgconnect"})


class ExceptionHandlerTests(TestCase):
    """Domain errors become inline messages with a status and a code."""

    def test_status_mapping(self) -> None:
        cases = [
            (NotFoundError("gone"), status.HTTP_404_NOT_FOUND, "not_found"),
            (ValidationError("full", code="room_full"), status.HTTP_400_BAD_REQUEST, "room_full"),
            (WriteError("stale", code="version_conflict"), status.HTTP_409_CONFLICT, "version_conflict"),
            (WriteError("down"), status.HTTP_503_SERVICE_UNAVAILABLE, "write_rejected"),
        ]
        for exc, expected_status, code in cases:
            with self.subTest(code=code):
                response = exception_handler(exc, {})
                self.assertEqual(response.status_code, expected_status)
                self.assertEqual(response.data, {"ok": False, "detail": str(exc), "code": code})

    def test_other_errors_use_drf_handler(self) -> None:
        response = exception_handler(exceptions.ValidationError({"name": ["Required."]}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {"name": ["Required."]})
        self.assertIsNone(exception_handler(KeyError("x"), {}))
