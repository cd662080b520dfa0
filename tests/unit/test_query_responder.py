"""
Tests for QueryResponder.

Coverage:
- Delegation to the topic responder bound in query_params
- Follow-up turns reuse the carried filter baseline
- Topic re-binding when the user switches topic
- Refinement follow-ups re-run the topic listing with budget bands
- Information branch (location content, articles, overview)
- Undetermined topic
- Failures
"""

import pytest

from agent.models import Intent, IntentType
from agent.responders import QueryResponder, build_topic_responders
from agent.responders.query import (
    ARTICLES_CLOSING,
    INFORMATION_QUESTIONS,
    SAMANA_OVERVIEW,
    UNDETERMINED_MESSAGE,
)
from tests.fakes import FakeCatalogGateway, make_record


def build_responder(catalog: FakeCatalogGateway) -> QueryResponder:
    return QueryResponder(catalog, build_topic_responders(catalog))


class TestDelegation:
    """Tests for delegation to the carried topic."""

    @pytest.mark.asyncio
    async def test_delegates_to_carried_topic(self, hotel_records):
        """Test the carried topic responder answers with the query patch."""
        catalog = FakeCatalogGateway(lodging=hotel_records)
        params = {"search_type": "accommodation", "topic": "accommodation"}

        response = await build_responder(catalog).respond(params, "El mejor hotel cerca de la playa")

        assert response.error is False
        assert response.results == hotel_records
        assert response.context["query_params"]["topic"] == "accommodation"
        assert response.context["query_params"]["location"] == "playa"
        assert response.context["active_agents"] == ["query", "lodging"]
        assert "intent" not in response.context
        assert response.context["last_search"]["result_count"] == 3

    @pytest.mark.asyncio
    async def test_follow_up_uses_carried_params(self):
        """A bare follow-up reuses the filters of the previous turn."""
        catalog = FakeCatalogGateway(lodging=[make_record(1, "Hotel A")])
        params = {"search_type": "accommodation", "topic": "accommodation", "location": "downtown"}

        response = await build_responder(catalog).respond(params, "¿Y el mejor hotel?")

        assert catalog.calls_to("query_lodging")[0]["location"] == "downtown"
        assert response.context["query_params"]["location"] == "downtown"

    @pytest.mark.asyncio
    async def test_topic_from_search_type(self):
        """Test topic is derived from search_type when missing."""
        catalog = FakeCatalogGateway()
        response = await build_responder(catalog).respond({"search_type": "restaurant"}, "¿Qué es el mofongo?")
        assert "mofongo" in response.message
        assert response.context["query_params"]["topic"] == "gastronomy"

    @pytest.mark.asyncio
    async def test_params_not_mutated(self):
        """Test carried params are not modified."""
        params = {"search_type": "car", "topic": "transport"}
        await build_responder(FakeCatalogGateway()).respond(params, "Necesito un taxi para 4 personas")
        assert params == {"search_type": "car", "topic": "transport"}


class TestTopicRebinding:
    """Tests for switching topic mid-query."""

    def test_keeps_carried_topic_for_general_message(self):
        """Test general messages keep the carried topic."""
        detected = Intent(IntentType.GENERAL, 0.6)
        assert QueryResponder.resolve_topic(IntentType.ACCOMMODATION, detected) is IntentType.ACCOMMODATION

    def test_keeps_carried_topic_for_information_message(self):
        """Test information messages keep the carried topic."""
        detected = Intent(IntentType.INFORMATION, 0.8)
        assert QueryResponder.resolve_topic(IntentType.GASTRONOMY, detected) is IntentType.GASTRONOMY

    def test_rebinds_to_new_specific_topic(self):
        """Test a new specific topic replaces the carried one."""
        detected = Intent(IntentType.GASTRONOMY, 0.9)
        assert QueryResponder.resolve_topic(IntentType.ACCOMMODATION, detected) is IntentType.GASTRONOMY

    @pytest.mark.asyncio
    async def test_switch_topic_mid_query(self):
        """Test a switched topic queries its own catalog."""
        catalog = FakeCatalogGateway(restaurants=[make_record(1, "El Pescador")])
        params = {"search_type": "accommodation", "topic": "accommodation", "location": "playa"}

        response = await build_responder(catalog).respond(params, "Ahora busco un restaurante")

        assert catalog.calls_to("query_restaurants")
        assert catalog.calls_to("query_lodging") == []
        assert response.context["query_params"]["topic"] == "gastronomy"
        assert response.context["query_params"]["search_type"] == "restaurant"
        assert response.context["intent"]["type"] == "gastronomy"
        assert response.context["active_agents"] == ["query", "food"]


class TestInformation:
    """Tests for the information branch."""

    @pytest.mark.asyncio
    async def test_location_content_truncated(self):
        """Test location content is cut at 500 characters."""
        catalog = FakeCatalogGateway(
            locations=[{"id": 1, "title": "Samaná", "name": "Samaná", "slug": "samana", "content": "x" * 600}]
        )
        params = {"search_type": "information", "topic": "information", "name": "Samana"}

        response = await build_responder(catalog).respond(params, "Cuéntame sobre samana")

        assert catalog.calls_to("query_location_info") == ["Samana"]
        assert response.message == "x" * 500 + "..."
        assert response.results == []
        assert response.ui["banner_type"] == "information"
        assert response.ui["banner_title"] == "Información sobre Samaná"
        assert response.ui["suggested_questions"] == list(INFORMATION_QUESTIONS)
        assert response.context["active_agents"] == ["query"]

    @pytest.mark.asyncio
    async def test_articles_when_location_has_no_content(self):
        """Test articles are listed when the location has no content."""
        articles = [make_record(i, f"Artículo {i}") for i in range(1, 6)]
        catalog = FakeCatalogGateway(articles=articles)

        response = await build_responder(catalog).respond(
            {"topic": "information", "name": "Las Terrenas"}, "información"
        )

        assert catalog.calls_to("search_articles") == ["Las Terrenas"]
        assert response.message.startswith("He encontrado algunos artículos en nuestro blog sobre Las Terrenas:")
        assert "\n- Artículo 1\n- Artículo 2\n- Artículo 3" in response.message
        assert "Artículo 4" not in response.message
        assert response.message.endswith(ARTICLES_CLOSING)
        assert len(response.results) == 3
        assert response.ui["show_results"] is True

    @pytest.mark.asyncio
    async def test_overview_when_nothing_found(self):
        """Test the Samaná overview when nothing is found."""
        catalog = FakeCatalogGateway()
        response = await build_responder(catalog).respond({"topic": "information"}, "información")

        assert catalog.calls_to("query_location_info") == ["Samana"]
        assert response.message == SAMANA_OVERVIEW
        assert response.ui["show_results"] is False


class TestUndetermined:
    """Tests for turns without a topic."""

    @pytest.mark.asyncio
    async def test_general_topic(self):
        """Test general topic gets the undetermined reply."""
        response = await build_responder(FakeCatalogGateway()).respond({"search_type": "general"}, "hola")
        assert response.message == UNDETERMINED_MESSAGE
        assert response.results == []
        assert response.ui == {"show_results": False, "update_banner": True, "banner_type": "general"}

    @pytest.mark.asyncio
    async def test_missing_params(self):
        """Test missing params get the undetermined reply."""
        response = await build_responder(FakeCatalogGateway()).respond(None, "hola")
        assert response.message == UNDETERMINED_MESSAGE
        assert response.context["query_params"]["topic"] == "general"


class TestFailures:
    """Tests for query responder failures."""

    @pytest.mark.asyncio
    async def test_topic_error_passes_through_without_patch(self):
        """Test topic errors pass through without a patch."""
        catalog = FakeCatalogGateway(fail=True)
        response = await build_responder(catalog).respond(
            {"topic": "accommodation"}, "El mejor hotel"
        )
        assert response.error is True
        assert response.context == {}

    @pytest.mark.asyncio
    async def test_information_failure(self):
        """Test information failures become the query apology."""
        catalog = FakeCatalogGateway(fail=True)
        response = await build_responder(catalog).respond({"topic": "information"}, "información")
        assert response.error is True
        assert "buscar la información" in response.message


class TestRefinementFollowUp:
    """Tests for follow-ups that narrow the carried search."""

    @pytest.mark.asyncio
    async def test_cheaper_near_beach_runs_lodging_listing(self, hotel_records):
        """Test budget and location hints re-run the accommodation listing."""
        catalog = FakeCatalogGateway(lodging=hotel_records)
        params = {"search_type": "accommodation", "topic": "accommodation"}

        response = await build_responder(catalog).respond(
            params, "¿Y opciones más baratas cerca de la playa?"
        )

        assert catalog.calls_to("query_lodging") == [
            {"limit": 10, "location": "playa", "max_price": 100}
        ]
        assert response.results == hotel_records
        assert response.message.startswith("Basándome en tus preferencias, te recomiendo estos alojamientos: ")
        assert response.ui["banner_title"] == "Alojamientos en Samaná"
        assert response.context["query_params"]["budget"] == "bajo"
        assert response.context["last_search"]["params"]["max_price"] == 100
        assert response.context["active_agents"] == ["query", "lodging"]

    @pytest.mark.asyncio
    async def test_carried_location_kept_with_new_budget(self):
        """Test a luxury follow-up keeps the carried location."""
        catalog = FakeCatalogGateway(restaurants=[make_record(1, "El Pescador")])
        params = {"search_type": "restaurant", "topic": "gastronomy", "location": "centro"}

        response = await build_responder(catalog).respond(params, "¿Algo de lujo?")

        assert catalog.calls_to("query_restaurants") == [
            {"limit": 10, "location": "centro", "min_price": 300}
        ]
        assert response.results[0]["title"] == "El Pescador"

    @pytest.mark.asyncio
    async def test_empty_refinement_falls_back_to_featured(self):
        """Test an empty refined lookup falls back to featured."""
        catalog = FakeCatalogGateway(
            tours=lambda filters: [make_record(7, "Ballenas")] if filters.get("is_featured") else []
        )
        params = {"search_type": "tour", "topic": "activities"}

        response = await build_responder(catalog).respond(params, "¿Y algo más económico?")

        assert catalog.calls_to("query_tours") == [
            {"limit": 10, "max_price": 100},
            {"is_featured": True, "limit": 3},
        ]
        assert response.results[0]["title"] == "Ballenas"

    @pytest.mark.asyncio
    async def test_no_hint_keeps_fixed_answer(self):
        """Test the topic answer stands without location or budget."""
        catalog = FakeCatalogGateway()
        params = {"search_type": "accommodation", "topic": "accommodation", "location": "playa"}

        response = await build_responder(catalog).respond(params, "¿Qué opciones hay?")

        assert catalog.calls == []
        assert response.message.startswith("Samaná ofrece una amplia variedad")

    @pytest.mark.asyncio
    async def test_refinement_failure_is_apology(self):
        """Test a failing refined lookup becomes the query apology."""
        catalog = FakeCatalogGateway(fail=True)
        params = {"search_type": "accommodation", "topic": "accommodation"}

        response = await build_responder(catalog).respond(params, "¿Y más baratas?")

        assert response.error is True
        assert "buscar la información" in response.message

    @pytest.mark.parametrize(
        "budget, expected",
        [
            ("bajo", {"limit": 10, "max_price": 100}),
            ("medio", {"limit": 10, "min_price": 100, "max_price": 300}),
            ("alto", {"limit": 10, "min_price": 300}),
            (None, {"limit": 10}),
        ],
    )
    def test_budget_bands(self, budget, expected):
        """Test each budget maps to its price band."""
        assert QueryResponder.refinement_filters({"budget": budget}) == expected
