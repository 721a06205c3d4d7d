"""Unit tests for session context history and the session stores."""

from pathlib import Path

import pytest

from memory.session_context import SessionContext
from memory.session_store import InMemorySessionStore, JSONSessionStore
from models.decision import ClarificationContext, ClarificationKind, ClarificationOption, OptionEffect
from models.garment import GarmentItem
from stylist_app.errors import SessionNotFoundError


def _outfit(*names: str):
    return [GarmentItem(name=name, category="top") for name in names]


def _question(text: str) -> ClarificationContext:
    return ClarificationContext(
        kind=ClarificationKind.AMBIGUOUS,
        question=text,
        options=[ClarificationOption(id="a", label="A", value="a", effect=OptionEffect.KEEP)],
        pending_items=_outfit("Blazer"),
    )


def test_undo_redo_walks_the_snapshot_history() -> None:
    session = SessionContext(conversation_id="c1")
    for name in ("One", "Two", "Three"):
        session.push_snapshot(_outfit(name))

    assert session.undo().items[0].name == "Two"
    assert session.undo().items[0].name == "One"
    assert session.undo() is None
    assert session.redo().items[0].name == "Two"
    assert session.current_items()[0].name == "Two"


def test_new_snapshot_discards_the_redo_tail() -> None:
    session = SessionContext(conversation_id="c1")
    for name in ("One", "Two", "Three"):
        session.push_snapshot(_outfit(name))
    session.undo()
    session.undo()

    session.push_snapshot(_outfit("Four"))

    assert [snapshot.items[0].name for snapshot in session.history] == ["One", "Four"]
    assert not session.can_redo()


def test_history_is_capped() -> None:
    session = SessionContext(conversation_id="c1", max_history=3)
    for index in range(5):
        session.push_snapshot(_outfit(f"Look {index}"))

    assert len(session.history) == 3
    assert session.history[0].items[0].name == "Look 2"
    assert session.current_index == 2


def test_pending_clarification_is_replaced_not_queued() -> None:
    session = SessionContext(conversation_id="c1")
    session.set_pending_clarification(_question("first?"))
    stamped = session.set_pending_clarification(_question("second?"))

    assert session.pending_clarification.question == "second?"
    assert stamped.conversation_id == "c1"
    assert stamped.created_at is not None
    session.clear_pending_clarification()
    assert session.pending_clarification is None


def test_turn_sequence_detects_superseded_turns() -> None:
    session = SessionContext(conversation_id="c1")
    first = session.begin_turn()
    second = session.begin_turn()

    assert (first, second) == (1, 2)
    assert not session.is_current_turn(first)
    assert session.is_current_turn(second)
    assert session.begin_turn(10) == 10
    assert session.begin_turn(4) == 4
    assert session.latest_turn == 10


def test_json_session_store_roundtrip(tmp_path: Path) -> None:
    store = JSONSessionStore(base_dir=tmp_path)
    session = store.get_or_create("conv/1", user_id="user-123")
    session.push_snapshot(_outfit("Tee"), note="starting outfit")
    session.set_pending_clarification(_question("which one?"))
    session.metadata["recent_turns"] = [{"role": "user", "content": "hello"}]
    store.save(session)

    loaded = store.get("conv/1")

    assert store.session_exists("conv/1")
    assert loaded.user_id == "user-123"
    assert loaded.current_items()[0].name == "Tee"
    assert loaded.pending_clarification.question == "which one?"
    assert loaded.pending_clarification.pending_items[0].name == "Blazer"
    assert loaded.metadata["recent_turns"][0]["content"] == "hello"
    assert list(tmp_path.glob("*.json"))[0].name == "conv_1.json"

    store.delete("conv/1")
    assert not store.session_exists("conv/1")


def test_require_raises_for_unknown_conversation() -> None:
    store = InMemorySessionStore()
    with pytest.raises(SessionNotFoundError):
        store.require("missing")
    assert store.lock_for("a") is store.lock_for("a")
