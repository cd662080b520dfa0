"""
Tests for GenericResponder and its query-type helpers.

The completion provider is scripted; no network access.
"""

import pytest

from agent.responders.generic import (
    ERROR_MESSAGE,
    GenericResponder,
    build_context_snippet,
    infer_query_type,
)
from agent.services.completion_provider import CompletionResult
from tests.fakes import ScriptedCompletionProvider


class TestInferQueryType:
    """Tests for infer_query_type."""

    def test_context_intent_wins(self):
        """Test the context intent beats keywords."""
        assert infer_query_type("hotel", {"intent": {"type": "gastronomy"}}) == "gastronomy"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("una habitación doble", "accommodation"),
            ("algo de comida", "gastronomy"),
            ("quiero visitar cosas", "activities"),
            ("¿cómo llegar?", "transport"),
            ("hola", "default"),
        ],
    )
    def test_keywords(self, text, expected):
        """Test keyword sets map to query types."""
        assert infer_query_type(text, {}) == expected


class TestContextSnippet:
    """Tests for build_context_snippet."""

    def test_snippet(self):
        """Test last search and topic are both described."""
        snippet = build_context_snippet(
            {"last_search": {"type": "accommodation", "result_count": 3}, "current_query_type": "accommodation"}
        )
        assert snippet == "última búsqueda de tipo accommodation con 3 resultados, tema actual accommodation"

    def test_empty(self):
        """Test empty context gives no snippet."""
        assert build_context_snippet({}) is None


class TestRespond:
    """Tests for GenericResponder.respond."""

    @pytest.mark.asyncio
    async def test_plain_answer(self):
        """Test request building and a plain answer patch."""
        provider = ScriptedCompletionProvider(
            CompletionResult(
                text="La mejor época para visitar Samaná es de enero a marzo.",
                intent={"type": "general", "confidence": 0.7},
                suggested_questions=["¿Qué hacer en Samaná?", "¿Dónde comer?"],
            )
        )
        history = [{"role": "user", "content": str(i)} for i in range(30)]
        responder = GenericResponder(provider, max_history=20)

        response = await responder.respond(
            None,
            "¿Cuándo es mejor ir?",
            history,
            {"user_preferences": {"budget": "bajo"}, "last_search": {"type": "tour", "result_count": 2}},
        )

        assert response.error is False
        assert response.message == "La mejor época para visitar Samaná es de enero a marzo."
        assert response.ui == {"suggested_questions": ["¿Qué hacer en Samaná?", "¿Dónde comer?"]}
        assert response.context == {
            "intent": {"type": "general", "confidence": 0.7},
            "current_query_type": "default",
            "active_agents": ["generic"],
        }

        request = provider.requests[0]
        assert len(request.history) == 20
        assert request.history[0]["content"] == "10"
        assert request.user_text == "¿Cuándo es mejor ir?"
        assert request.query_type == "default"
        assert "- Presupuesto: bajo" in request.system_instructions
        assert request.context_snippet == "última búsqueda de tipo tour con 2 resultados"

    @pytest.mark.asyncio
    async def test_search_action_binds_query_stage(self):
        """Test a search action moves the turn to the query stage."""
        provider = ScriptedCompletionProvider(
            CompletionResult(
                text="Te busco restaurantes de mariscos.",
                intent={"type": "gastronomy", "confidence": 0.9},
                suggested_action={"type": "search", "parameters": {"cuisine_type": "seafood"}},
                user_preferences={"interests": ["mariscos"]},
                suggested_questions=["¿Dónde comer pescado?"],
            )
        )

        response = await GenericResponder(provider).respond(None, "quiero algo de comida", [], {})

        assert response.context["processing_stage"] == "query"
        assert response.context["query_params"] == {
            "cuisine_type": "seafood",
            "search_type": "restaurant",
            "topic": "gastronomy",
        }
        assert response.context["user_preferences"] == {"interests": ["mariscos"]}
        assert response.context["last_action"] == {"type": "search", "parameters": {"cuisine_type": "seafood"}}
        assert response.context["current_query_type"] == "gastronomy"

    @pytest.mark.asyncio
    async def test_non_search_action_keeps_stage(self):
        """Test other actions leave the stage alone."""
        provider = ScriptedCompletionProvider(
            CompletionResult(
                text="Claro.",
                intent={"type": "accommodation", "confidence": 0.9},
                suggested_action={"type": "recommend"},
            )
        )
        response = await GenericResponder(provider).respond(None, "hotel", [], {})
        assert "processing_stage" not in response.context
        assert response.context["last_action"] == {"type": "recommend"}

    @pytest.mark.asyncio
    async def test_search_for_non_topic_intent_keeps_stage(self):
        """Test search on a non-topic intent keeps the stage."""
        provider = ScriptedCompletionProvider(
            CompletionResult(
                text="Samaná es preciosa.",
                intent={"type": "information", "confidence": 0.8},
                suggested_action={"type": "search"},
            )
        )
        response = await GenericResponder(provider).respond(None, "cuéntame", [], {})
        assert "processing_stage" not in response.context

    @pytest.mark.asyncio
    async def test_provider_failure_returns_apology(self, failing_provider):
        """Test provider errors become an apology without patch."""
        response = await GenericResponder(failing_provider).respond(None, "hola", [], {})
        assert response.error is True
        assert response.message == ERROR_MESSAGE
        assert response.context == {}

    @pytest.mark.asyncio
    async def test_unexpected_failure_returns_apology(self):
        """Test unexpected errors become an apology."""
        provider = ScriptedCompletionProvider(RuntimeError("boom"))
        response = await GenericResponder(provider).respond(None, "hola", [], {})
        assert response.error is True
