"""User-facing response text for each decision outcome.

Everything here is a pure function of its arguments. The follow-up prompt pool
is only sampled when the caller passes an explicitly seeded ``random.Random``;
otherwise the first prompt is used so responses stay reproducible.
"""

from __future__ import annotations

import random
import re
from typing import List, Optional, Sequence

from logic.compatibility import CompatibilityCheck, compatibility_warnings
from logic.tree_helpers import describe_items
from models.classification import RequestType
from models.decision import ClarificationContext, DecisionAction, DecisionResult
from models.garment import GarmentItem
from models.outfit_state import OutfitState
from models.taxonomy import Zone

_UNDO_PATTERN = re.compile(r"^(undo|go back|previous|revert)$", re.IGNORECASE)
_REDO_PATTERN = re.compile(r"^(redo|go forward|next|restore)$", re.IGNORECASE)

FALLBACK_MESSAGE = "Sorry, I had trouble with that one. Could you try asking again in a different way?"

_MISSING_ZONE_PROMPTS = {
    Zone.FOOTWEAR: "Want to pick some shoes to finish the look?",
    Zone.BOTTOM: "Should we find a bottom to go with it?",
    Zone.TOP: "Want to add a top?",
}

FOLLOW_UP_PROMPTS: List[str] = [
    "Want to add an accessory?",
    "Should we try a different color?",
    "Want to see it with a jacket?",
    "Anything you'd like to swap?",
]

_OPENERS = {
    RequestType.COMPLETE_OUTFIT: "Here's your new outfit!",
    RequestType.SINGLE_ITEM: "Done!",
    RequestType.ATTRIBUTE_MODIFICATION: "Updated!",
    RequestType.STYLE_MOOD: "New vibe applied!",
    RequestType.LAYERING: "Layered it on!",
    RequestType.REMOVAL: "Done!",
}


def _clean(message: str) -> str:
    return " ".join((message or "").strip().lower().rstrip(".!?").split())


def is_undo_command(message: str, explicit_only: bool = False) -> bool:
    """``explicit_only`` accepts just "undo", for when a question is waiting."""

    cleaned = _clean(message)
    if explicit_only:
        return cleaned == "undo"
    return bool(_UNDO_PATTERN.match(cleaned))


def is_redo_command(message: str, explicit_only: bool = False) -> bool:
    cleaned = _clean(message)
    if explicit_only:
        return cleaned == "redo"
    return bool(_REDO_PATTERN.match(cleaned))


def confirmation_message(added: Sequence[GarmentItem], removed: Sequence[GarmentItem]) -> str:
    if added and removed:
        return f"Swapped {describe_items(removed)} for {describe_items(added)}."
    if added:
        return f"Added {describe_items(added)}."
    if removed:
        return f"Removed {describe_items(removed)}."
    return "Your outfit is unchanged."


def removal_message(removed: Sequence[GarmentItem], remaining: Sequence[GarmentItem]) -> str:
    return f"Removed {describe_items(removed)}. Still wearing: {describe_items(remaining)}."


def follow_up_prompt(state: OutfitState, rng: Optional[random.Random] = None) -> str:
    for zone in state.missing_zones:
        if zone in _MISSING_ZONE_PROMPTS and state.items:
            return _MISSING_ZONE_PROMPTS[zone]
    if rng is None:
        return FOLLOW_UP_PROMPTS[0]
    return rng.choice(FOLLOW_UP_PROMPTS)


def clarification_message(context: ClarificationContext) -> str:
    lines = [context.question]
    for index, option in enumerate(context.options, start=1):
        suffix = f" ({option.description})" if option.description else ""
        lines.append(f"{index}. {option.label}{suffix}")
    return "\n".join(lines)


def suggestion_message(decision: DecisionResult) -> str:
    text = decision.suggestion or "I have an idea for your outfit."
    if decision.requires_approval and "?" not in text:
        text += " Want me to go ahead?"
    return text


def warnings_message(compatibility: Sequence[CompatibilityCheck]) -> str:
    warnings = compatibility_warnings(compatibility)
    if not warnings:
        return ""
    return "Heads up: " + "; ".join(warnings) + "."


def undo_message(success: bool) -> str:
    return "Back to your previous look!" if success else "There's nothing to undo yet."


def redo_message(success: bool) -> str:
    return "Restored that change!" if success else "There's nothing to redo."


def generate_response(
    request_type: RequestType,
    state: OutfitState,
    items_changed: Sequence[GarmentItem],
    compatibility: Sequence[CompatibilityCheck] = (),
    action: DecisionAction = DecisionAction.EXECUTE,
    decision: Optional[DecisionResult] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Compose the reply for a turn.

    ``items_changed`` lists the added items for executes; removals are taken
    from ``decision`` when it is given.
    """

    if action == DecisionAction.CLARIFY:
        if decision and decision.clarification:
            return clarification_message(decision.clarification)
        return "Could you tell me a bit more about what you'd like?"

    if action == DecisionAction.SUGGEST:
        text = suggestion_message(decision) if decision else "I have an idea for your outfit. Want to see it?"
        warnings = warnings_message(compatibility)
        return f"{text} {warnings}".strip()

    removed = list(decision.items_to_remove) if decision else []
    if request_type == RequestType.REMOVAL and removed and not items_changed:
        body = removal_message(removed, state.items)
    else:
        body = f"{_OPENERS.get(request_type, 'Done!')} {confirmation_message(items_changed, removed)}"

    parts = [body]
    warnings = warnings_message(compatibility)
    if warnings:
        parts.append(warnings)
    parts.append(follow_up_prompt(state, rng))
    return " ".join(parts)


__all__ = [
    "FALLBACK_MESSAGE",
    "FOLLOW_UP_PROMPTS",
    "is_undo_command",
    "is_redo_command",
    "confirmation_message",
    "removal_message",
    "follow_up_prompt",
    "clarification_message",
    "suggestion_message",
    "warnings_message",
    "undo_message",
    "redo_message",
    "generate_response",
]
