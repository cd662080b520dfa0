"""
Tests for agent.state.helpers and the value objects in agent.models.
"""

from agent.models import ActionType, Intent, IntentType, NextAction, Response
from agent.state.helpers import limit_history, merge_context, new_context


class TestMergeContext:
    """Context patch merge rules."""

    def test_patch_replaces_keys(self):
        """Test top-level patch keys replace the current ones."""
        merged = merge_context(
            {"processing_stage": "initial", "query_params": {"a": 1}},
            {"processing_stage": "query", "query_params": {"b": 2}},
        )
        assert merged["processing_stage"] == "query"
        assert merged["query_params"] == {"b": 2}

    def test_empty_patch_is_identity(self):
        """Test empty or missing patch leaves the context unchanged."""
        context = {"processing_stage": "query", "active_agents": ["coordinator"]}
        assert merge_context(context, {}) == context
        assert merge_context(context, None) == context

    def test_none_current(self):
        """Test a missing current context takes the patch."""
        assert merge_context(None, {"processing_stage": "booking"}) == {"processing_stage": "booking"}

    def test_inputs_not_mutated(self):
        """Test neither input dict is modified."""
        current = {"active_agents": ["coordinator"], "user_preferences": {"budget": "bajo"}}
        patch = {"active_agents": ["query"], "user_preferences": {"people": 2}}
        merge_context(current, patch)
        assert current == {"active_agents": ["coordinator"], "user_preferences": {"budget": "bajo"}}
        assert patch == {"active_agents": ["query"], "user_preferences": {"people": 2}}

    def test_active_agents_append_only(self):
        """Test active agents are appended without duplicates."""
        merged = merge_context(
            {"active_agents": ["coordinator", "query"]},
            {"active_agents": ["query", "lodging", "lodging"]},
        )
        assert merged["active_agents"] == ["coordinator", "query", "lodging"]

    def test_user_preferences_merged_per_key(self):
        """Test preferences merge key by key, patch wins."""
        merged = merge_context(
            {"user_preferences": {"budget": "bajo", "location": "playa"}},
            {"user_preferences": {"budget": "alto", "people": 4}},
        )
        assert merged["user_preferences"] == {"budget": "alto", "location": "playa", "people": 4}

    def test_interests_union_keeps_order(self):
        """Test interests are unioned in first-seen order."""
        merged = merge_context(
            {"user_preferences": {"interests": ["ballenas", "playas"]}},
            {"user_preferences": {"interests": ["playas", "senderismo"]}},
        )
        assert merged["user_preferences"]["interests"] == ["ballenas", "playas", "senderismo"]


class TestNewContext:
    """Tests for new_context."""

    def test_starts_in_initial_stage(self):
        """Test a new context starts in the initial stage."""
        assert new_context() == {"processing_stage": "initial"}


class TestLimitHistory:
    """Tests for limit_history."""

    def test_keeps_most_recent_turns(self):
        """Test only the newest turns are kept."""
        history = [{"role": "user", "content": str(i)} for i in range(25)]
        limited = limit_history(history, 20)
        assert len(limited) == 20
        assert limited[0]["content"] == "5"
        assert limited[-1]["content"] == "24"

    def test_short_history_unchanged(self):
        """Test history under the limit is returned as is."""
        history = [{"role": "user", "content": "hola"}]
        assert limit_history(history) == history

    def test_empty_history(self):
        """Test missing history becomes an empty list."""
        assert limit_history(None) == []


class TestValueObjects:
    """Tests for Intent, NextAction and Response."""

    def test_intent_round_trip(self):
        """Test Intent survives to_dict and from_dict."""
        intent = Intent(IntentType.GASTRONOMY, 0.9, {"search_type": "restaurant"})
        assert Intent.from_dict(intent.to_dict()) == intent

    def test_unknown_intent_type_degrades_to_general(self):
        """Test unknown intent types become general."""
        assert Intent.from_dict({"type": "weather"}).type is IntentType.GENERAL

    def test_next_action_keeps_unknown_type(self):
        """Test unknown action types are kept as strings."""
        action = NextAction.from_dict({"type": "teleport", "params": {}})
        assert action.type == "teleport"
        assert NextAction.from_dict({"type": "query"}).type is ActionType.QUERY

    def test_response_to_dict_omits_empty_members(self):
        """Test unset members are left out of the payload."""
        assert Response(message="Hola").to_dict() == {"message": "Hola"}

    def test_response_to_dict_full(self):
        """Test every set member is serialized."""
        payload = Response(
            message="Hola",
            results=[],
            ui={"show_results": False},
            error=True,
            validated_by="ResponseValidator",
        ).to_dict()
        assert payload == {
            "message": "Hola",
            "results": [],
            "ui": {"show_results": False},
            "error": True,
            "validated_by": "ResponseValidator",
        }
