"""Replay a pending clarification once the user answers it."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from logic.tree_helpers import describe_items, execute
from models.decision import (
    ClarificationContext,
    ClarificationKind,
    ClarificationOption,
    DecisionAction,
    DecisionResult,
    OptionEffect,
)
from models.garment import GarmentItem, contains_item
from models.taxonomy import normalize_text

logger = logging.getLogger(__name__)

_AFFIRMATIVE = re.compile(r"^(yes|yeah|yep|sure|ok|okay|do it|go ahead|ready|confirm|sounds good)\b")
_NEGATIVE = re.compile(r"^(no|nope|nah|cancel|never mind|keep it|don't)\b")
_ORDINALS = {"first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5}
_FILLER_WORDS = frozenset(
    {"a", "an", "the", "my", "that", "this", "one", "layer", "please", "replace", "swap", "change", "with", "it"}
)


def match_option(context: ClarificationContext, answer: str) -> Optional[ClarificationOption]:
    """Find the option an answer refers to, by ordinal, id, label or value."""

    text = normalize_text(answer).rstrip(".!?")
    if not text or not context.options:
        return None

    options = context.options
    if text.isdigit():
        index = int(text)
        return options[index - 1] if 1 <= index <= len(options) else None
    for word, index in _ORDINALS.items():
        if re.search(rf"\b{word}\b", text) and index <= len(options):
            return options[index - 1]

    for option in options:
        if text in (normalize_text(option.id), normalize_text(option.label), normalize_text(option.value)):
            return option

    if _AFFIRMATIVE.match(text):
        for option in options:
            if option.effect == OptionEffect.CONFIRM:
                return option
    if _NEGATIVE.match(text):
        for option in options:
            if option.effect in (OptionEffect.CANCEL, OptionEffect.KEEP):
                return option

    by_length = sorted(options, key=lambda option: len(option.label), reverse=True)
    for option in by_length:
        label = normalize_text(option.label)
        if label and label in text:
            return option
    for option in by_length:
        value = normalize_text(option.value)
        if len(value) >= 3 and value in text:
            return option

    # "the flannel" names a layer's garment without repeating its label.
    words = set(re.findall(r"[a-z]+", text)) - _FILLER_WORDS
    named = [
        option
        for option in options
        if option.target is not None and words & set(re.findall(r"[a-z]+", option.target.name.lower()))
    ]
    if len(named) == 1:
        return named[0]
    return None


def _follow_up_query(context: ClarificationContext, option: ClarificationOption) -> str:
    if option.value not in ("ai_choose", "replace"):
        return option.value
    if context.pending_items:
        return f"something that goes with {describe_items(context.pending_items)}"
    if context.pending_removals:
        return f"something to wear instead of {describe_items(context.pending_removals)}"
    return context.original_message


def _refuse_empty(context: ClarificationContext, removals: Sequence[GarmentItem]) -> DecisionResult:
    conflict = ClarificationContext(
        kind=ClarificationKind.CONFLICT,
        question=f"Removing the {describe_items(removals)} would leave you with nothing on. "
        "Would you like to swap it for something else instead?",
        options=[
            ClarificationOption(
                id="replace", label="Swap it for something new", value="replace", effect=OptionEffect.CHOOSE_GARMENT
            ),
            ClarificationOption(id="keep", label="Keep it on", value="keep", effect=OptionEffect.KEEP),
        ],
        pending_removals=list(removals),
        original_message=context.original_message,
        request_type=context.request_type,
        conversation_id=context.conversation_id,
    )
    return DecisionResult(
        action=DecisionAction.CLARIFY,
        reasoning="Removal would empty the outfit.",
        clarification=conflict,
    )


def _await_replacement(context: ClarificationContext, removals: Sequence[GarmentItem]) -> DecisionResult:
    """Ask for the replacement garment instead of dropping the chosen item."""

    waiting = ClarificationContext(
        kind=ClarificationKind.MISSING_INFO,
        question=f"What would you like instead of your {describe_items(removals)}?",
        options=[
            ClarificationOption(
                id="replace", label="Find a new version", value="replace", effect=OptionEffect.CHOOSE_GARMENT
            ),
            ClarificationOption(id="keep", label="Keep it as it is", value="keep", effect=OptionEffect.KEEP),
        ],
        pending_removals=list(removals),
        original_message=context.original_message,
        request_type=context.request_type,
        conversation_id=context.conversation_id,
    )
    query = f"{context.original_message} ({describe_items(removals)})" if context.original_message else ""
    return DecisionResult(
        action=DecisionAction.CLARIFY,
        reasoning="No replacement garment was resolved for the chosen item.",
        clarification=waiting,
        follow_up_query=query or f"something to wear instead of {describe_items(removals)}",
    )


def resolve_clarification(
    context: ClarificationContext,
    answer: str,
    current_items: Sequence[GarmentItem] = (),
    candidates: Sequence[GarmentItem] = (),
) -> Optional[DecisionResult]:
    """Turn an answer into a decision, or ``None`` when it matches no option.

    An unmatched answer is treated by the caller as a brand new request.
    """

    option = match_option(context, answer)
    if option is None:
        logger.debug("answer did not match any of %d options", len(context.options))
        return None

    pending = list(context.pending_items)
    pending_removals = list(context.pending_removals)
    logger.info("clarification answered with option=%s effect=%s", option.id, option.effect.value)

    if option.effect == OptionEffect.REPLACE:
        removals = pending_removals + ([option.target] if option.target else [])
        replacements = pending or list(candidates)
        if not replacements:
            return _await_replacement(context, removals)
        return execute(replacements, removals, reasoning=f"Replacing {describe_items(removals)} as chosen.")

    if option.effect == OptionEffect.REMOVE:
        targets: List[GarmentItem] = [option.target] if option.target else pending_removals
        remaining = [item for item in current_items if not contains_item(targets, item)]
        if current_items and not remaining:
            return _refuse_empty(context, targets)
        return execute((), targets, reasoning=f"Removing {describe_items(targets)} as chosen.")

    if option.effect in (OptionEffect.ADD_LAYER, OptionEffect.CONFIRM):
        return execute(pending, pending_removals, reasoning="Applying the approved change.")

    if option.effect in (OptionEffect.CANCEL, OptionEffect.KEEP):
        return execute((), (), reasoning="Keeping the outfit as it is.")

    if option.effect == OptionEffect.CHOOSE_GARMENT:
        if candidates:
            return execute(
                pending + list(candidates),
                pending_removals,
                reasoning=f"Completing the outfit with {describe_items(candidates)}.",
            )
        return DecisionResult(
            action=DecisionAction.CLARIFY,
            reasoning="Waiting for the chosen garment to be resolved.",
            clarification=context,
            follow_up_query=_follow_up_query(context, option),
            should_regenerate_from_scratch=bool(pending_removals),
        )

    logger.warning("unhandled option effect %s", option.effect)
    return None


__all__ = ["match_option", "resolve_clarification"]
