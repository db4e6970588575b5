"""Unit tests for the session state machine and the in-memory store."""

from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from memory.session_store import InMemorySessionStore, SessionState
from models.clarification import ClarificationContext, ClarificationOption
from models.outfit_item import OutfitItem

TEE = OutfitItem(name="White T-Shirt", zone="top")
JEANS = OutfitItem(name="Blue Jeans", zone="bottom")
BLACK_JEANS = OutfitItem(name="Black Jeans", zone="bottom")
JACKET = OutfitItem(name="Denim Jacket", zone="outerwear")


def _session_with_history() -> SessionState:
    session = SessionState(conversation_id="conv-1")
    session.push_snapshot([TEE, JEANS])
    session.push_snapshot([TEE, BLACK_JEANS])
    session.push_snapshot([TEE, BLACK_JEANS, JACKET])
    return session


def test_new_session_is_empty() -> None:
    session = SessionState(conversation_id="conv-1")
    assert session.cursor == -1
    assert session.current_snapshot() is None
    assert session.current_outfit() == []
    assert not session.can_undo()
    assert not session.can_redo()


def test_undo_and_redo_move_the_cursor() -> None:
    session = _session_with_history()
    assert session.cursor == 2

    assert session.undo().outfit_state == "separates"
    assert session.current_outfit() == [TEE, BLACK_JEANS]
    assert session.undo().items == (TEE, JEANS)
    assert session.undo() is None
    assert session.cursor == 0

    assert session.redo().items == (TEE, BLACK_JEANS)
    assert session.can_redo()


def test_push_after_undo_discards_redo_branch() -> None:
    session = _session_with_history()
    session.undo()
    session.undo()
    session.push_snapshot([TEE, JEANS, JACKET])

    assert len(session.history) == 2
    assert session.cursor == 1
    assert not session.can_redo()
    assert session.redo() is None


def test_pending_clarification_and_metadata() -> None:
    session = SessionState(conversation_id="conv-1")
    clarification = ClarificationContext(
        question="Which layer would you like to replace?",
        original_message="swap the layer",
        conversation_id="conv-1",
        options=[ClarificationOption(id="layer_0", label="White T-Shirt", value="White T-Shirt")],
    )
    session.set_pending_clarification(clarification)
    session.update_user_preferences({"style": "casual"})
    session.update_user_preferences({"budget": "mid"})
    session.set_metadata("source", "upload")

    assert session.pending_clarification is clarification
    assert session.user_preferences == {"style": "casual", "budget": "mid"}
    assert session.get_metadata("source") == "upload"
    assert session.get_metadata("missing", "fallback") == "fallback"

    session.clear_pending_clarification()
    assert session.pending_clarification is None


def test_export_and_import_round_trip() -> None:
    session = _session_with_history()
    session.undo()
    session.set_pending_clarification(
        ClarificationContext(question="Which?", original_message="that one", conversation_id="conv-1")
    )

    restored = SessionState.import_state(session.export())

    assert restored.cursor == 1
    assert [snap.id for snap in restored.history] == [snap.id for snap in session.history]
    assert restored.current_outfit()[1].name == "Black Jeans"
    assert restored.pending_clarification.question == "Which?"
    assert restored.can_redo()


def test_import_rejects_out_of_range_cursor() -> None:
    exported = _session_with_history().export()
    exported["cursor"] = 5
    with pytest.raises(ValueError):
        SessionState.import_state(exported)


def test_clear_history_resets_cursor() -> None:
    session = _session_with_history()
    session.clear_history()
    assert session.cursor == -1
    assert session.history == []


def test_in_memory_store_lifecycle() -> None:
    store = InMemorySessionStore()
    session = store.get_or_create("conv-1", preferences={"style": "edgy"})

    assert store.get_or_create("conv-1") is session
    assert session.user_preferences == {"style": "edgy"}
    assert store.exists("conv-1")
    assert len(store) == 1

    assert store.delete("conv-1")
    assert not store.delete("conv-1")
    assert store.get("conv-1") is None

    store.save(SessionState(conversation_id="conv-2"))
    store.clear()
    assert len(store) == 0
