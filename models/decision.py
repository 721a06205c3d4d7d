"""Decision results and clarification contexts returned by the decision engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from models.garment import GarmentItem, from_raw


class DecisionAction(str, Enum):
    EXECUTE = "execute"
    CLARIFY = "clarify"
    SUGGEST = "suggest"


class ClarificationKind(str, Enum):
    MISSING_INFO = "missing_info"
    AMBIGUOUS = "ambiguous"
    CONFLICT = "conflict"
    CONFIRMATION = "confirmation"


class OptionEffect(str, Enum):
    """What happens when the user picks an option."""

    REPLACE = "replace"
    REMOVE = "remove"
    ADD_LAYER = "add_layer"
    CHOOSE_GARMENT = "choose_garment"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    KEEP = "keep"


@dataclass(frozen=True)
class ClarificationOption:
    id: str
    label: str
    value: str
    effect: OptionEffect
    description: str = ""
    target: Optional[GarmentItem] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "value": self.value,
            "effect": self.effect.value,
            "description": self.description,
            "target": self.target.to_dict() if self.target else None,
        }


@dataclass(frozen=True)
class ClarificationContext:
    """Question awaiting an answer, with everything needed to replay it."""

    kind: ClarificationKind
    question: str
    options: List[ClarificationOption] = field(default_factory=list)
    pending_items: List[GarmentItem] = field(default_factory=list)
    pending_removals: List[GarmentItem] = field(default_factory=list)
    original_message: str = ""
    request_type: str = ""
    conversation_id: Optional[str] = None
    created_at: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "question": self.question,
            "options": [option.to_dict() for option in self.options],
            "pending_items": [item.to_dict() for item in self.pending_items],
            "pending_removals": [item.to_dict() for item in self.pending_removals],
            "original_message": self.original_message,
            "request_type": self.request_type,
            "conversation_id": self.conversation_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ClarificationContext":
        options = [
            ClarificationOption(
                id=str(option["id"]),
                label=str(option["label"]),
                value=str(option.get("value", option["id"])),
                effect=OptionEffect(option["effect"]),
                description=str(option.get("description", "")),
                target=from_raw(option["target"]) if option.get("target") else None,
            )
            for option in payload.get("options", [])
        ]
        return cls(
            kind=ClarificationKind(payload["kind"]),
            question=str(payload["question"]),
            options=options,
            pending_items=[from_raw(item) for item in payload.get("pending_items", [])],
            pending_removals=[from_raw(item) for item in payload.get("pending_removals", [])],
            original_message=str(payload.get("original_message", "")),
            request_type=str(payload.get("request_type", "")),
            conversation_id=payload.get("conversation_id"),
            created_at=payload.get("created_at"),
        )


@dataclass(frozen=True)
class DecisionResult:
    """Mutation plan for one turn.

    Clarify results never carry items to add or remove; the pending items ride
    in ``clarification`` until the user answers.
    """

    action: DecisionAction
    items_to_add: List[GarmentItem] = field(default_factory=list)
    items_to_remove: List[GarmentItem] = field(default_factory=list)
    should_regenerate_from_scratch: bool = False
    reasoning: str = ""
    clarification: Optional[ClarificationContext] = None
    suggestion: Optional[str] = None
    requires_approval: bool = False
    follow_up_query: Optional[str] = None

    @property
    def changes_outfit(self) -> bool:
        return self.action == DecisionAction.EXECUTE and bool(self.items_to_add or self.items_to_remove)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "items_to_add": [item.to_dict() for item in self.items_to_add],
            "items_to_remove": [item.to_dict() for item in self.items_to_remove],
            "should_regenerate_from_scratch": self.should_regenerate_from_scratch,
            "reasoning": self.reasoning,
            "clarification": self.clarification.to_dict() if self.clarification else None,
            "suggestion": self.suggestion,
            "requires_approval": self.requires_approval,
            "follow_up_query": self.follow_up_query,
        }


__all__ = [
    "DecisionAction",
    "ClarificationKind",
    "OptionEffect",
    "ClarificationOption",
    "ClarificationContext",
    "DecisionResult",
]
