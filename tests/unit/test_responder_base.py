"""
Tests for the shared listing helpers in agent.responders.base.
"""

import pytest

from agent.responders.activities import ActivitiesResponder
from agent.responders.base import (
    FALLBACK_FILTERS,
    GENERIC_FILLER_QUESTIONS,
    banner_image,
    build_suggested_questions,
    canned_response,
    compose_listing_message,
    join_titles,
    search_with_fallback,
)
from agent.responders.lodging import HOTEL_TEMPLATE, LodgingResponder
from tests.fakes import FakeCatalogGateway, make_record


class TestJoinTitles:
    """Tests for join_titles."""

    @pytest.mark.parametrize(
        "titles, expected",
        [
            ([], ""),
            (["A"], "A"),
            (["A", "B"], "A y B"),
            (["A", "B", "C"], "A, B y C"),
        ],
    )
    def test_join(self, titles, expected):
        """Test comma joining with a final " y "."""
        assert join_titles(titles) == expected


class TestComposeListingMessage:
    """Tests for compose_listing_message."""

    def test_single_record(self):
        """Test singular sentence with description and closing."""
        message = compose_listing_message([make_record(1, "Hotel Bahía", "vistas a la bahía")], HOTEL_TEMPLATE)
        assert message.startswith("Basándome en tus preferencias, te recomiendo el hotel Hotel Bahía. ")
        assert "vistas a la bahía" in message
        assert message.endswith(HOTEL_TEMPLATE.closing)

    def test_plural_lists_at_most_three_titles(self):
        """Test plural sentence lists three titles at most."""
        records = [make_record(i, f"Hotel {i}") for i in range(1, 6)]
        records[0]["short_desc"] = "una gran piscina"
        message = compose_listing_message(records, HOTEL_TEMPLATE)
        assert "estos hoteles: Hotel 1, Hotel 2 y Hotel 3. " in message
        assert "Hotel 4" not in message
        assert "Hotel 1 ofrece una gran piscina. " in message

    def test_fallback_lead(self):
        """Test featured results use the fallback lead."""
        message = compose_listing_message([make_record(1, "Hotel X")], HOTEL_TEMPLATE, used_fallback=True)
        assert message.startswith(HOTEL_TEMPLATE.fallback_lead + " ")


class TestBuildSuggestedQuestions:
    """Tests for build_suggested_questions."""

    def test_two_records_add_comparison(self):
        """Test two records add a comparison question."""
        records = [make_record(1, "A"), make_record(2, "B")]
        questions = build_suggested_questions(records, "¿Qué ofrece {title}?", ("¿Pool?",))
        assert questions == ["¿Qué ofrece A?", "¿Cuál es la diferencia entre A y B?", "¿Pool?"]

    def test_single_record_uses_pool(self):
        """Test a single record is topped up from the pool."""
        questions = build_suggested_questions([make_record(1, "A")], "¿{title}?", ("P1", "P2", "P3"))
        assert questions == ["¿A?", "P1", "P2"]

    def test_always_three_distinct(self):
        """Test filler questions complete the list."""
        questions = build_suggested_questions([], "¿{title}?", ())
        assert questions == list(GENERIC_FILLER_QUESTIONS)
        assert len(set(questions)) == 3

    def test_duplicates_skipped(self):
        """Test questions already chosen are skipped."""
        questions = build_suggested_questions([make_record(1, "A")], "¿{title}?", ("¿A?", "P2"))
        assert questions == ["¿A?", "P2", GENERIC_FILLER_QUESTIONS[0]]


class TestBannerImage:
    """Tests for banner_image."""

    def test_list_gallery(self):
        """Test first image of a list gallery."""
        assert banner_image([make_record(1, "A", gallery=["/a.jpg", "/b.jpg"])]) == "/a.jpg"

    def test_comma_joined_gallery(self):
        """Test first image of a comma-joined gallery."""
        assert banner_image([make_record(1, "A", gallery=" /a.jpg, /b.jpg")]) == "/a.jpg"

    def test_no_gallery(self):
        """Test no gallery gives no image."""
        assert banner_image([make_record(1, "A")]) is None
        assert banner_image([]) is None


class TestSearchWithFallback:
    """Tests for search_with_fallback."""

    @pytest.mark.asyncio
    async def test_primary_results(self):
        """Test primary results skip the fallback."""
        calls = []

        async def lookup(filters):
            calls.append(filters)
            return [make_record(1, "A")]

        records, used_fallback = await search_with_fallback(lookup, {"limit": 5})
        assert len(records) == 1
        assert used_fallback is False
        assert calls == [{"limit": 5}]

    @pytest.mark.asyncio
    async def test_featured_fallback(self):
        """Test empty primary results trigger the featured query."""
        calls = []

        async def lookup(filters):
            calls.append(filters)
            return [make_record(9, "Featured")] if filters.get("is_featured") else []

        records, used_fallback = await search_with_fallback(lookup, {"limit": 5, "max_price": 100})
        assert [r["title"] for r in records] == ["Featured"]
        assert used_fallback is True
        assert calls[1] == FALLBACK_FILTERS

    @pytest.mark.asyncio
    async def test_both_empty(self):
        """Test both lookups empty reports the fallback."""
        async def lookup(filters):
            return []

        records, used_fallback = await search_with_fallback(lookup, {})
        assert records == []
        assert used_fallback is True


class TestCannedResponse:
    """Tests for canned_response."""

    def test_banner_directives(self):
        """Test banner type and title directives."""
        response = canned_response("Hola", ("Q1",), "activities", "Playas")
        assert response.ui == {
            "suggested_questions": ["Q1"],
            "update_banner": True,
            "banner_type": "activities",
            "banner_title": "Playas",
        }

    def test_without_banner(self):
        """Test no banner keys without a banner type."""
        assert canned_response("Hola", ["Q1"]).ui == {"suggested_questions": ["Q1"]}


class TestRefinementHooks:
    """Tests for the hooks used by query-stage refinements."""

    @pytest.mark.parametrize(
        "text, expected",
        [("¿Y más baratas?", True), ("El mejor hotel", False), ("Viajo con mi familia", False)],
    )
    def test_names_no_sub_intent(self, text, expected):
        """Test only fall-through messages report no sub-intent."""
        assert LodgingResponder(FakeCatalogGateway()).names_no_sub_intent(text) is expected

    @pytest.mark.asyncio
    async def test_list_refined_uses_topic_lookup(self):
        """Test refined listing runs the topic lookup with the given filters."""
        catalog = FakeCatalogGateway(tours=[make_record(1, "Cayo Levantado")])

        response = await ActivitiesResponder(catalog).list_refined({"limit": 10, "max_price": 100}, "tour")

        assert catalog.calls_to("query_tours") == [{"limit": 10, "max_price": 100}]
        assert response.ui["banner_title"] == "Tours y Excursiones en Samaná"
        assert response.context["last_search"] == {
            "type": "tour",
            "params": {"limit": 10, "max_price": 100},
            "result_count": 1,
        }
