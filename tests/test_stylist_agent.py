"""End-to-end tests for the per-turn stylist pipeline."""

from pathlib import Path
import logging
import random
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from agents.stylist_agent import StylistAgent, TurnRequest, apply_decision, detect_history_command
from logic.responses import WARNING_MARKER
from memory.preference_tracker import PreferenceTracker, ProfileStore
from memory.session_store import InMemorySessionStore
from models.decision import DecisionResult, RequestClassification
from models.outfit_item import OutfitItem

TEE = OutfitItem(name="White T-Shirt", zone="top", category="t-shirt", colors=("white",))
JEANS = OutfitItem(name="Blue Jeans", zone="bottom", category="jeans", colors=("blue",), brand="Levi's")
BLACK_JEANS = OutfitItem(name="Black Jeans", zone="bottom", category="jeans", colors=("black",))
SNEAKERS = OutfitItem(name="White Sneakers", zone="footwear", category="sneakers", colors=("white",))
DRESS = OutfitItem(name="Red Dress", zone="one_piece", category="dress", colors=("red",))
RED_TOP = OutfitItem(name="Red Top", zone="top", category="top", colors=("red",))
PINK_SKIRT = OutfitItem(name="Pink Skirt", zone="bottom", category="skirt", colors=("pink",))


def _agent(**kwargs) -> StylistAgent:
    return StylistAgent(store=InMemorySessionStore(), rng=random.Random(5), **kwargs)


def _turn(message, request_type="type_b_single_item", items=(), conversation_id="conv-1", **kwargs) -> TurnRequest:
    classification = RequestClassification(
        type=request_type,
        confidence=0.9,
        intent=kwargs.pop("intent", message),
        layering_keywords=kwargs.pop("layering_keywords", []),
        removal_keywords=kwargs.pop("removal_keywords", []),
    )
    return TurnRequest(
        conversation_id=conversation_id,
        message=message,
        classification=classification,
        new_items=list(items),
        **kwargs,
    )


def test_detect_history_command_requires_exact_phrase() -> None:
    assert detect_history_command("  Undo ") == "undo"
    assert detect_history_command("go back") == "undo"
    assert detect_history_command("restore") == "redo"
    assert detect_history_command("undo the jacket") is None
    assert detect_history_command("next outfit please") is None


def test_first_turn_builds_outfit_and_pushes_snapshot() -> None:
    agent = _agent()
    result = agent.process_turn(
        _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS], message_id="m-1")
    )

    assert result.decision.action == "execute"
    assert result.outfit_state.type == "separates"
    assert result.final_items == [TEE, JEANS]
    assert not result.needs_clarification
    assert len(result.compatibility_checks) == 4
    assert result.response_text.startswith("Updated your outfit with: White T-Shirt, Blue Jeans!")

    session = agent.store.get("conv-1")
    assert session.cursor == 0
    assert session.current_snapshot().message_id == "m-1"


def test_replacement_turn_records_removed_items_in_context() -> None:
    agent = _agent()
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS]))
    result = agent.process_turn(_turn("black jeans instead", items=[BLACK_JEANS]))

    assert [item.name for item in result.final_items] == ["White T-Shirt", "Black Jeans"]
    assert 'itemsToRemove: ["Blue Jeans"]' in result.decision_context
    assert "- replacementOperation: true" in result.decision_context
    assert "Compatibility Checks:" in result.decision_context
    assert agent.store.get("conv-1").cursor == 1


def test_ambiguous_request_short_circuits_with_pending_clarification() -> None:
    agent = _agent()
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS]))
    result = agent.process_turn(_turn("I want a new top", items=[RED_TOP]))

    assert result.needs_clarification
    assert result.decision.action == "clarify"
    assert result.response_text == "What kind of top are you looking for?"
    assert result.final_items == [TEE, JEANS]
    assert result.decision_context.endswith("Options: T-shirt, Blouse, Tank top, Crop top, Sweater, Hoodie")

    session = agent.store.get("conv-1")
    assert session.cursor == 0
    assert session.pending_clarification.conversation_id == "conv-1"
    assert session.pending_clarification.original_message == "I want a new top"


def test_impossible_combination_is_checked_first() -> None:
    agent = _agent()
    skirt = OutfitItem(name="Green Skirt", zone="bottom")
    result = agent.process_turn(_turn("a red dress with a green skirt", "type_a_complete_outfit", [DRESS, skirt]))

    assert result.needs_clarification
    assert result.response_text == "A dress is a complete outfit. Did you mean:"
    assert [option.id for option in result.clarification.options] == ["dress_only", "separates"]
    assert agent.store.get("conv-1").history == []


def test_one_piece_over_separates_is_suggested_not_applied() -> None:
    agent = _agent()
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS]))
    result = agent.process_turn(_turn("a red dress", items=[DRESS]))

    assert result.decision.action == "suggest"
    assert result.needs_clarification
    assert result.clarification is None
    assert result.final_items == [TEE, JEANS]
    assert result.response_text.startswith("Replace your White T-Shirt and Blue Jeans with Red Dress.")
    assert len(agent.store.get("conv-1").history) == 1


def test_decision_question_is_stored_as_pending_clarification() -> None:
    agent = _agent()
    agent.process_turn(_turn("a red dress", items=[DRESS]))
    result = agent.process_turn(_turn("add blue jeans", items=[JEANS]))

    assert result.decision.action == "clarify"
    assert result.response_text == "I'll add Blue Jeans! What would you like for the top?"
    assert result.clarification.type == "missing_info"
    assert agent.store.get("conv-1").pending_clarification.conversation_id == "conv-1"


def test_executed_turn_clears_pending_clarification() -> None:
    agent = _agent()
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS]))
    agent.process_turn(_turn("I want a new top", items=[RED_TOP]))
    agent.process_turn(_turn("black jeans", items=[BLACK_JEANS]))

    assert agent.store.get("conv-1").pending_clarification is None


def test_compatibility_warnings_reach_the_reply() -> None:
    agent = _agent()
    result = agent.process_turn(_turn("red crop top and pink skirt", "type_a_complete_outfit", [RED_TOP, PINK_SKIRT]))

    assert not result.compatibility_checks[0].passed
    assert f"{WARNING_MARKER} Color clash detected" in result.response_text


def test_removal_turn_uses_removal_reply() -> None:
    agent = _agent()
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS, SNEAKERS]))
    result = agent.process_turn(
        _turn("take off the sneakers", "type_f_removal", removal_keywords=["take off"])
    )

    assert result.response_text == "Removed White Sneakers. Still wearing: White T-Shirt, Blue Jeans."
    assert result.outfit_state.type == "separates"


def test_undo_and_redo_through_messages_and_methods() -> None:
    agent = _agent()
    assert agent.undo("conv-1").message == "Nothing to undo - this is your original outfit."

    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS]))
    agent.process_turn(_turn("black jeans", items=[BLACK_JEANS]))

    undone = agent.process_turn(_turn("undo"))
    assert undone.response_text == "Reverted to previous outfit!"
    assert undone.final_items == [TEE, JEANS]

    redone = agent.redo("conv-1")
    assert redone.success
    assert redone.message == "Restored next outfit!"
    assert redone.items == [TEE, BLACK_JEANS]
    assert agent.process_turn(_turn("redo")).response_text == "Nothing to redo - you're at the latest version."


def test_accepted_turns_update_preferences() -> None:
    tracker = PreferenceTracker()
    agent = _agent(preference_tracker=tracker)
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS], user_id="u-1"))

    profile = tracker.get_user_preferences("u-1")
    assert profile.color_preferences == {"white": 1.0, "blue": 1.0}
    assert profile.brand_affinities == {"Levi's": 1.0}
    assert profile.preferred_categories == {"t-shirt": 1, "jeans": 1}


def test_tracking_can_be_disabled() -> None:
    tracker = PreferenceTracker()
    agent = _agent(preference_tracker=tracker, track_preferences=False)
    agent.process_turn(_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS], user_id="u-1"))
    assert tracker.get_user_preferences("u-1").color_preferences == {}


class _BrokenStore(ProfileStore):
    def load(self, user_id):
        return None

    def save(self, profile):
        raise OSError("disk full")


def test_preference_failure_is_logged_and_turn_completes(caplog) -> None:
    agent = _agent(preference_tracker=PreferenceTracker(store=_BrokenStore()))
    with caplog.at_level(logging.WARNING, logger="agents.stylist_agent"):
        result = agent.process_turn(
            _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", [TEE, JEANS], user_id="u-1")
        )

    assert result.decision.action == "execute"
    assert any(record.getMessage() == "preference_tracking_failed" for record in caplog.records)


def test_apply_decision_matches_removals_by_name() -> None:
    decision = DecisionResult(
        action="execute",
        reasoning="Replace existing bottom with new bottom item",
        items_to_add=[BLACK_JEANS],
        items_to_remove=[OutfitItem(name="Blue Jeans", zone="bottom")],
    )
    assert apply_decision([TEE, JEANS], decision) == [TEE, BLACK_JEANS]


def test_layering_separates_over_a_dress_swaps_it_out() -> None:
    agent = _agent()
    agent.process_turn(_turn("a red dress", items=[DRESS]))
    result = agent.process_turn(
        _turn(
            "layer a white t-shirt and blue jeans over the dress",
            "type_e_layering",
            [TEE, JEANS],
            layering_keywords=["layer", "over"],
        )
    )

    assert result.decision.action == "execute"
    assert result.final_items == [TEE, JEANS]
    snapshot = agent.store.get("conv-1").current_snapshot()
    assert snapshot.outfit_state == "separates"
    assert {item.zone for item in snapshot.items} == {"top", "bottom"}
