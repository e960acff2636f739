"""Tests for the assistant app."""
from __future__ import annotations

from unittest import mock

from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .services import (
    HELP_REPLY,
    SOURCE_KNOWLEDGE_BASE,
    SOURCE_LLM,
    AssistantService,
    knowledge_base_reply,
)


class KnowledgeBaseTests(SimpleTestCase):
    def test_multiple_pgs(self) -> None:
        self.assertIn("multiple PGs", knowledge_base_reply("Can I manage multiple PGs?"))

    def test_first_matching_rule_wins(self) -> None:
        # "room" is checked before "book"
        self.assertEqual(
            knowledge_base_reply("How do I book a room?"),
            knowledge_base_reply("show me the floor plan"),
        )
        self.assertIn("Booking a PG", knowledge_base_reply("I want to reserve a bed"))

    def test_pricing_and_greeting(self) -> None:
        self.assertIn("PG pricing", knowledge_base_reply("What is the usual RENT?"))
        self.assertTrue(knowledge_base_reply("hello there").startswith("Hello!"))

    def test_default_reply(self) -> None:
        self.assertEqual(knowledge_base_reply("qwerty"), HELP_REPLY)


@override_settings(GEMINI_API_KEY="", GEMINI_MODEL="gemini-test")
class AssistantServiceTests(SimpleTestCase):
    def _client(self, **kwargs) -> mock.Mock:
        client = mock.Mock()
        client.models.generate_content.configure_mock(**kwargs)
        return client

    def test_without_key_uses_knowledge_base(self) -> None:
        with mock.patch("apps.assistant.services.genai.Client") as client_cls:
            reply = AssistantService().respond("hello")
        client_cls.assert_not_called()
        self.assertEqual(reply.source, SOURCE_KNOWLEDGE_BASE)

    def test_model_reply(self) -> None:
        client = self._client(return_value=mock.Mock(text="  Rooms start at 5,000.  "))
        reply = AssistantService(client=client).respond("hello")
        self.assertEqual(reply.reply, "Rooms start at 5,000.")
        self.assertEqual(reply.source, SOURCE_LLM)
        kwargs = client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-test")
        self.assertIn("User Question: hello", kwargs["contents"])

    def test_client_is_built_from_api_key(self) -> None:
        with mock.patch("apps.assistant.services.genai.Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = mock.Mock(text="Hi!")
            reply = AssistantService(api_key="test-key").generate_response("hi")
        client_cls.assert_called_once_with(api_key="test-key")
        self.assertEqual(reply, "Hi!")

    def test_model_errors_fall_back(self) -> None:
        client = self._client(side_effect=RuntimeError("quota exceeded"))
        reply = AssistantService(client=client).respond("Can I manage multiple PGs?")
        self.assertEqual(reply.source, SOURCE_KNOWLEDGE_BASE)
        self.assertEqual(reply.reply, knowledge_base_reply("Can I manage multiple PGs?"))

    def test_empty_model_reply_falls_back(self) -> None:
        client = self._client(return_value=mock.Mock(text=None))
        reply = AssistantService(client=client).respond("qwerty")
        self.assertEqual(reply.source, SOURCE_KNOWLEDGE_BASE)
        self.assertEqual(reply.reply, HELP_REPLY)


@override_settings(GEMINI_API_KEY="")
class ChatAPITests(APITestCase):
    def test_chat(self) -> None:
        response = self.client.post(reverse("assistant:chat"), {"message": "hello"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["source"], "knowledge_base")
        self.assertTrue(response.data["reply"].startswith("Hello!"))

    def test_message_is_required(self) -> None:
        response = self.client.post(reverse("assistant:chat"), {"message": "  "}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
