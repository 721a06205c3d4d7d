"""Per-conversation session context: undo/redo history and pending questions."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from models.decision import ClarificationContext
from models.garment import GarmentItem, from_raw

DEFAULT_MAX_HISTORY = 50


@dataclass
class OutfitSnapshot:
    """An outfit as it stood after a successful change."""

    items: List[GarmentItem]
    note: str = ""
    created_at: float = field(default_factory=lambda: time.time())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "note": self.note,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "OutfitSnapshot":
        return cls(
            items=[from_raw(item) for item in payload.get("items", [])],
            note=str(payload.get("note", "")),
            created_at=float(payload.get("created_at", time.time())),
        )


@dataclass
class SessionContext:
    """Conversation state kept across turns.

    Snapshots are only pushed after an executed change. At most one
    clarification is pending at a time; a newer one replaces it. The turn
    counter lets callers drop results from turns that were superseded while
    they were still running.
    """

    conversation_id: str
    user_id: Optional[str] = None
    history: List[OutfitSnapshot] = field(default_factory=list)
    current_index: int = -1
    pending_clarification: Optional[ClarificationContext] = None
    latest_turn: int = 0
    preferences: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    max_history: int = DEFAULT_MAX_HISTORY
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def _touch(self) -> None:
        self.updated_at = time.time()

    def begin_turn(self, sequence: Optional[int] = None) -> int:
        """Register a new turn and return its sequence number."""

        if sequence is None:
            sequence = self.latest_turn + 1
        self.latest_turn = max(self.latest_turn, sequence)
        self._touch()
        return sequence

    def is_current_turn(self, sequence: int) -> bool:
        return sequence == self.latest_turn

    def push_snapshot(self, items: Sequence[GarmentItem], note: str = "") -> OutfitSnapshot:
        """Record a new outfit, discarding anything that could have been redone."""

        snapshot = OutfitSnapshot(items=list(items), note=note)
        del self.history[self.current_index + 1 :]
        self.history.append(snapshot)
        overflow = len(self.history) - self.max_history
        if overflow > 0:
            del self.history[:overflow]
        self.current_index = len(self.history) - 1
        self._touch()
        return snapshot

    def current_snapshot(self) -> Optional[OutfitSnapshot]:
        if 0 <= self.current_index < len(self.history):
            return self.history[self.current_index]
        return None

    def current_items(self) -> List[GarmentItem]:
        snapshot = self.current_snapshot()
        return list(snapshot.items) if snapshot else []

    def can_undo(self) -> bool:
        return self.current_index > 0

    def can_redo(self) -> bool:
        return self.current_index < len(self.history) - 1

    def undo(self) -> Optional[OutfitSnapshot]:
        if not self.can_undo():
            return None
        self.current_index -= 1
        self._touch()
        return self.history[self.current_index]

    def redo(self) -> Optional[OutfitSnapshot]:
        if not self.can_redo():
            return None
        self.current_index += 1
        self._touch()
        return self.history[self.current_index]

    def set_pending_clarification(self, context: ClarificationContext) -> ClarificationContext:
        """Store a question, replacing any unanswered one."""

        stamped = replace(
            context,
            conversation_id=context.conversation_id or self.conversation_id,
            created_at=context.created_at or time.time(),
        )
        self.pending_clarification = stamped
        self._touch()
        return stamped

    def clear_pending_clarification(self) -> None:
        self.pending_clarification = None
        self._touch()

    def export(self) -> Dict[str, Any]:
        return {
            "conversation_id": self.conversation_id,
            "user_id": self.user_id,
            "history": [snapshot.to_dict() for snapshot in self.history],
            "current_index": self.current_index,
            "pending_clarification": (
                self.pending_clarification.to_dict() if self.pending_clarification else None
            ),
            "latest_turn": self.latest_turn,
            "preferences": dict(self.preferences),
            "metadata": dict(self.metadata),
            "max_history": self.max_history,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_export(cls, payload: Dict[str, Any]) -> "SessionContext":
        pending = payload.get("pending_clarification")
        history = [OutfitSnapshot.from_dict(item) for item in payload.get("history", [])]
        current_index = int(payload.get("current_index", len(history) - 1))
        return cls(
            conversation_id=str(payload["conversation_id"]),
            user_id=payload.get("user_id"),
            history=history,
            current_index=min(current_index, len(history) - 1),
            pending_clarification=ClarificationContext.from_dict(pending) if pending else None,
            latest_turn=int(payload.get("latest_turn", 0)),
            preferences=dict(payload.get("preferences", {})),
            metadata=dict(payload.get("metadata", {})),
            max_history=int(payload.get("max_history", DEFAULT_MAX_HISTORY)),
            created_at=float(payload.get("created_at", time.time())),
            updated_at=float(payload.get("updated_at", time.time())),
        )


__all__ = ["DEFAULT_MAX_HISTORY", "OutfitSnapshot", "SessionContext"]
