"""Chat assistant for PGConnect visitors.

Questions go to a hosted Gemini model when ``GEMINI_API_KEY`` is configured.
Without a key, or when the model errors or returns nothing, the reply comes
from a fixed set of keyword rules over the platform knowledge base.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

SOURCE_LLM = "llm"
SOURCE_KNOWLEDGE_BASE = "knowledge_base"

KNOWLEDGE_BASE = """
PGConnect connects students in Bangalore with paying-guest (PG) accommodation.

Students: search PGs by city, nearby college, rent range, PG type (male,
female or any) and amenities; view the building layout with room-wise
occupancy; request a booking quote (first month's rent plus a flat security
deposit); find compatible roommates.

Owners: register any number of PGs under one account; configure floors and
rooms (single, double or triple sharing); add, edit and vacate tenants; mark
rent as paid; follow occupancy, monthly revenue and pending dues per PG and
across all PGs on the owner dashboard.

Room status: available (no tenants), partially occupied, occupied (full).
Payment status per room: vacant, paid, partial, pending.

Typical rents: budget 5,000-8,000, standard 8,000-15,000 and premium
15,000-25,000 rupees per month. Colleges served include NMIT, RVCE, IISc,
BMSIT, RNSIT, PESIT, Christ University and GITAM.
""".strip()

PROMPT_TEMPLATE = """You are Chitti, a helpful AI assistant for PGConnect. Use this knowledge base to answer questions accurately:

{knowledge_base}

User Question: {message}

Provide a helpful, accurate response based on the knowledge base above. If the question is not covered in the knowledge base, provide a general helpful response about PGConnect."""

HELP_REPLY = """I'm here to help with PGConnect!

I can assist you with:
- Student services: smart PG search, roommate matching, booking
- Owner tools: property management, building layout, tenant tracking
- Platform info: pricing, amenities, colleges, technical details

What would you like to know?"""


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """Reply with ``reply`` when the message mentions any of ``keywords``.

    ``requires`` narrows the rule further: the message must also mention one
    of those words.
    """

    keywords: tuple[str, ...]
    reply: str
    requires: tuple[str, ...] = ()

    def matches(self, message: str) -> bool:
        if not any(keyword in message for keyword in self.keywords):
            return False
        return not self.requires or any(word in message for word in self.requires)


# Evaluated in order; the first matching rule answers.
RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        keywords=("multiple",),
        requires=("pg", "property"),
        reply="""Yes! PGConnect supports managing multiple PGs:

- Add any number of properties to your owner account
- Manage all of them from a single dashboard
- Separate occupancy and tenant tracking per PG
- Consolidated revenue and pending dues across PGs""",
    ),
    KeywordRule(
        keywords=("login", "sign in", "account"),
        reply="""Logging in to PGConnect:

Students: choose "Student Login" on the homepage to search PGs and find roommates.
Owners: choose "Owner Login" to reach the property management dashboard.

First time? Click "Sign Up" to create your account.""",
    ),
    KeywordRule(
        keywords=("launch", "start", "create", "register"),
        reply="""To launch your PG on PGConnect:

1. Sign up as a PG owner
2. Add property details (location, amenities, pricing)
3. Configure the building layout: floors, rooms and sharing
4. Publish the listing
5. Manage tenants and rent from your dashboard""",
    ),
    KeywordRule(
        keywords=("technology", "tech", "built", "framework"),
        reply="""PGConnect runs on a Python web stack:

- Django and Django REST Framework for the API
- JWT authentication for owners
- Google Gemini for the chat assistant
- A document store holding each PG and its building layout""",
    ),
    KeywordRule(
        keywords=("roommate", "match", "compatible"),
        reply="""Roommate matching compares:

1. Lifestyle: food habits, sleep schedule, smoking and drinking
2. Living standards: cleanliness and noise tolerance
3. Interests, hobbies and study habits
4. Sharing preference and guest policy""",
    ),
    KeywordRule(
        keywords=("price", "cost", "rent", "budget"),
        reply="""PG pricing in Bangalore:

- Budget: 5,000-8,000 per month
- Standard: 8,000-15,000 per month
- Premium: 15,000-25,000 per month

Prices vary with amenities, room sharing and distance to college. Use the rent filters to stay within budget.""",
    ),
    KeywordRule(
        keywords=("building", "visualizer", "room", "floor"),
        reply="""The building view shows every floor and room:

- Occupancy per room, e.g. 2/3 occupied
- Payment status: paid, partial, pending or vacant
- Owners can add or vacate tenants and mark rent as received from the same view""",
    ),
    KeywordRule(
        keywords=("college", "university", "nmit", "rvce"),
        reply="""PGConnect serves students from major Bangalore colleges, including NMIT, RVCE, IISc, BMSIT, RNSIT, PESIT, Christ University and GITAM.

Filter by nearest college and sort by distance to find PGs close to campus. Which college are you looking near?""",
    ),
    KeywordRule(
        keywords=("amenities", "facilities", "features"),
        reply="""Common amenities you can filter on:

- WiFi and power backup
- AC and attached bathrooms
- Food and laundry
- CCTV and security
- Parking""",
    ),
    KeywordRule(
        keywords=("book", "reserve", "payment"),
        reply="""Booking a PG:

1. Browse and filter listings
2. Contact the owner and schedule a visit
3. Request a booking quote: first month's rent plus the security deposit
4. Pay and move in""",
    ),
    KeywordRule(
        keywords=("girlfriend", "boyfriend", "personal", "relationship"),
        reply=HELP_REPLY,
    ),
    KeywordRule(
        keywords=("gemini", "ai", "integrate"),
        reply="""Yes! PGConnect's assistant uses Google Gemini.

When the model is unavailable, answers come from the built-in PGConnect knowledge base instead.""",
    ),
    KeywordRule(
        keywords=("hello", "hi", "hey"),
        reply="""Hello! I'm Chitti, the PGConnect assistant.

I can help you find PGs near your college, explain booking and pricing, and walk owners through managing their properties. What would you like to know?""",
    ),
)


def knowledge_base_reply(message: str) -> str:
    text = message.lower()
    for rule in RULES:
        if rule.matches(text):
            return rule.reply
    return HELP_REPLY


@dataclass(frozen=True, slots=True)
class AssistantReply:
    reply: str
    source: str


class AssistantService:
    """Answer visitor questions, preferring the hosted model when available."""

    def __init__(self, api_key: str | None = None, model: str | None = None, client=None):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.GEMINI_MODEL
        self._client = client

    def _get_client(self):
        if self._client is None and self.api_key:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _ask_model(self, message: str) -> str:
        response = self._get_client().models.generate_content(
            model=self.model,
            contents=PROMPT_TEMPLATE.format(knowledge_base=KNOWLEDGE_BASE, message=message),
            config=types.GenerateContentConfig(
                temperature=settings.ASSISTANT_TEMPERATURE,
                max_output_tokens=settings.ASSISTANT_MAX_OUTPUT_TOKENS,
            ),
        )
        return (response.text or "").strip()

    def respond(self, message: str) -> AssistantReply:
        if self._client is not None or self.api_key:
            try:
                text = self._ask_model(message)
            except Exception as exc:
                logger.info("Assistant falling back to knowledge base: %s", exc)
            else:
                if text:
                    return AssistantReply(reply=text, source=SOURCE_LLM)
                logger.info("Assistant falling back to knowledge base: empty model reply")
        return AssistantReply(reply=knowledge_base_reply(message), source=SOURCE_KNOWLEDGE_BASE)

    def generate_response(self, message: str) -> str:
        return self.respond(message).reply
