"""
TopicResponder base - Shared pipeline for the topic responders.

Every topic responder follows the same steps:

1. Merge the incoming params with the preferences extracted from the text
   (extracted values win)
2. Classify the sub-intent from the text
3. Dispatch to the sub-intent handler through an enum table
4. Listing handlers: primary catalog query, then the featured fallback
   ({is_featured: True, limit: 3}), then a terminal no-results reply
5. Compose the message (singular vs. " y "-joined plural) and exactly three
   suggested questions

The public entry point never raises: any exception becomes an apology
Response with error=True.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from agent.classification.preference_extractor import PreferenceExtractor
from agent.models import ResponderName, Response
from agent.services.catalog_gateway import CatalogGateway, CatalogRecord
from agent.state.schemas import HistoryTurn

logger = logging.getLogger(__name__)

CatalogLookup = Callable[[dict[str, Any]], Awaitable[list[CatalogRecord]]]

PRIMARY_LIMIT = 5
FALLBACK_FILTERS: dict[str, Any] = {"is_featured": True, "limit": 3}
MAX_TITLES_IN_MESSAGE = 3
SUGGESTED_QUESTION_COUNT = 3

# Value of the fall-through member in every sub-intent enum
GENERAL_SUB_INTENT = "general"

DEFAULT_LEAD = "Basándome en tus preferencias, te recomiendo "
COMPARISON_QUESTION = "¿Cuál es la diferencia entre {first} y {second}?"

# Appended after a topic pool so the list always reaches three entries
GENERIC_FILLER_QUESTIONS: tuple[str, ...] = (
    "¿Qué más puedo hacer en Samaná?",
    "¿Cuál es la mejor época para visitar Samaná?",
    "¿Qué lugares debo visitar en Samaná?",
)


# ============================================================================
# Listing helpers
# ============================================================================


@dataclass(frozen=True)
class ListingTemplate:
    """
    Wording and UI constants of one listing branch.

    `singular` and `first_question` are formatted with `title`;
    `description` with `title` and `description`.
    """

    result_type: str
    banner_type: str
    banner_title: str
    singular: str
    plural: str
    closing: str
    fallback_lead: str
    no_results_message: str
    no_results_questions: tuple[str, ...]
    first_question: str
    question_pool: tuple[str, ...]
    lead: str = DEFAULT_LEAD
    title_format: str = "{title}"
    description: str = "{title} ofrece {description}. "
    singular_note: str = ""
    plural_note: str = ". "


def join_titles(titles: list[str]) -> str:
    """
    Join titles with commas and a final " y ".

    Example:
        >>> join_titles(["A", "B", "C"])
        'A, B y C'
    """
    if len(titles) <= 1:
        return "".join(titles)
    return ", ".join(titles[:-1]) + " y " + titles[-1]


def compose_listing_message(
    records: list[CatalogRecord],
    template: ListingTemplate,
    used_fallback: bool = False,
) -> str:
    """
    Build the listing message for one or more records.

    One record produces the singular sentence plus its short description;
    two or more produce the joined title list (at most three) plus the first
    record's description. The closing invitation always ends the message.
    """
    first = records[0]
    lead = f"{template.fallback_lead} " if used_fallback else template.lead
    description = first.get("short_desc")
    message = lead

    if len(records) == 1:
        message += template.singular.format(title=first.get("title", ""))
        if description:
            message += f"{description} "
        if template.singular_note:
            message += f"{template.singular_note} "
    else:
        titles = [
            template.title_format.format(title=record.get("title", ""))
            for record in records[:MAX_TITLES_IN_MESSAGE]
        ]
        message += template.plural + join_titles(titles) + template.plural_note
        if description:
            message += template.description.format(
                title=first.get("title", ""), description=description
            )

    return message + template.closing


def build_suggested_questions(
    records: list[CatalogRecord],
    first_question: str,
    pool: tuple[str, ...] | list[str],
) -> list[str]:
    """
    Exactly three distinct follow-up questions.

    Order: question about the first record, comparison of the first two
    records (when there are two), then the first pool entries not already
    chosen.
    """
    questions: list[str] = []
    if records:
        questions.append(first_question.format(title=records[0].get("title", "")))
    if len(records) >= 2:
        questions.append(
            COMPARISON_QUESTION.format(
                first=records[0].get("title", ""), second=records[1].get("title", "")
            )
        )

    for question in (*pool, *GENERIC_FILLER_QUESTIONS):
        if len(questions) >= SUGGESTED_QUESTION_COUNT:
            break
        if question not in questions:
            questions.append(question)
    return questions


def banner_image(records: list[CatalogRecord]) -> str | None:
    """First gallery image of the first record (list or comma-joined string)."""
    if not records:
        return None
    gallery = records[0].get("gallery")
    if isinstance(gallery, str):
        gallery = [item.strip() for item in gallery.split(",") if item.strip()]
    return gallery[0] if gallery else None


async def search_with_fallback(
    lookup: CatalogLookup,
    filters: dict[str, Any],
) -> tuple[list[CatalogRecord], bool]:
    """
    Run the primary query, then the featured fallback if it is empty.

    Returns:
        (records, used_fallback). Empty records with used_fallback=True
        means both queries came back empty.
    """
    records = await lookup(filters)
    if records:
        return records, False

    logger.info(f"Primary lookup empty, trying featured | filters={filters}")
    records = await lookup(dict(FALLBACK_FILTERS))
    return records, True


def canned_response(
    message: str,
    questions: list[str] | tuple[str, ...],
    banner_type: str | None = None,
    banner_title: str | None = None,
) -> Response:
    """Fixed-text reply with banner directives and suggested questions."""
    ui: dict[str, Any] = {"suggested_questions": list(questions)}
    if banner_type:
        ui["update_banner"] = True
        ui["banner_type"] = banner_type
    if banner_title:
        ui["banner_title"] = banner_title
    return Response(message=message, ui=ui)


# ============================================================================
# Base class
# ============================================================================


class TopicResponder(ABC):
    """
    Stateless responder for one travel topic.

    Subclasses set `name`, `extractor`, `error_message`, the refinement
    listing (`refinement_lookup` names a CatalogGateway method) and implement
    `classify_sub_intent` and `handle`.
    """

    name: ResponderName
    extractor: PreferenceExtractor
    refinement_lookup: str
    refinement_template: ListingTemplate
    error_message: str = (
        "Lo siento, he tenido un problema al procesar tu consulta. "
        "¿Puedo ayudarte con algo más?"
    )

    def __init__(self, catalog: CatalogGateway):
        self.catalog = catalog

    async def respond(
        self,
        params: dict[str, Any] | None,
        text: str,
        history: list[HistoryTurn] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Response:
        """
        Answer a topic message.

        Args:
            params: Filter baseline (query params carried in the context)
            text: User message
            history: Previous turns (unused by rule-based responders)
            context: Conversation context (read-only)

        Returns:
            Response; error=True with the topic apology on any failure
        """
        try:
            extracted = self.extractor.extract(text)
            preferences = {**(params or {}), **extracted}
            sub_intent = self.classify_sub_intent(text, extracted)

            logger.info(
                f"Topic responder | responder={self.name.value} | "
                f"sub_intent={sub_intent.value}"
            )
            return await self.handle(sub_intent, preferences, text)

        except Exception as e:
            logger.error(
                f"Topic responder failed | responder={self.name.value} | error={e}",
                exc_info=True,
            )
            return Response(message=self.error_message, error=True)

    @abstractmethod
    def classify_sub_intent(self, text: str, extracted: dict[str, Any]) -> Enum:
        """Sub-intent of the message; `extracted` holds this turn's preferences only."""

    @abstractmethod
    async def handle(self, sub_intent: Enum, preferences: dict[str, Any], text: str) -> Response:
        ...

    async def respond_with_listing(
        self,
        lookup: CatalogLookup,
        filters: dict[str, Any],
        template: ListingTemplate,
        search_type: str,
    ) -> Response:
        """Query with fallback and render the listing reply."""
        records, used_fallback = await search_with_fallback(lookup, filters)
        last_search = {
            "type": search_type,
            "params": dict(filters),
            "result_count": len(records),
        }

        if not records:
            return Response(
                message=template.no_results_message,
                results=[],
                ui={
                    "show_results": False,
                    "suggested_questions": list(template.no_results_questions),
                },
                context={"last_search": last_search},
            )

        ui: dict[str, Any] = {
            "show_results": True,
            "result_type": template.result_type,
            "update_banner": True,
            "banner_type": template.banner_type,
            "banner_title": template.banner_title,
            "suggested_questions": build_suggested_questions(
                records, template.first_question, template.question_pool
            ),
        }
        image = banner_image(records)
        if image:
            ui["banner_image"] = image

        return Response(
            message=compose_listing_message(records, template, used_fallback),
            results=records,
            ui=ui,
            context={"last_search": last_search},
        )

    def names_no_sub_intent(self, text: str) -> bool:
        """True when the message falls through to the topic's general answer."""
        sub_intent = self.classify_sub_intent(text, self.extractor.extract(text))
        return sub_intent.value == GENERAL_SUB_INTENT

    async def list_refined(self, filters: dict[str, Any], search_type: str) -> Response:
        """Topic listing over already-built filters (follow-up refinements)."""
        lookup: CatalogLookup = getattr(self.catalog, self.refinement_lookup)
        logger.info(
            f"Refinement listing | responder={self.name.value} | filters={sorted(filters)}"
        )
        return await self.respond_with_listing(lookup, filters, self.refinement_template, search_type)

    async def attach_results(
        self,
        message: str,
        lookup: CatalogLookup,
        filters: dict[str, Any],
        banner_type: str,
        banner_title: str,
        questions: tuple[str, ...],
        result_type: str = "tour",
    ) -> Response:
        """Fixed text followed by whatever the lookup returns (no fallback)."""
        records = await lookup(filters)
        ui: dict[str, Any] = {
            "show_results": bool(records),
            "result_type": result_type,
            "update_banner": True,
            "banner_type": banner_type,
            "banner_title": banner_title,
            "suggested_questions": list(questions),
        }
        image = banner_image(records)
        if image:
            ui["banner_image"] = image
        return Response(
            message=message,
            results=records,
            ui=ui,
            context={
                "last_search": {
                    "type": result_type,
                    "params": dict(filters),
                    "result_count": len(records),
                }
            },
        )
