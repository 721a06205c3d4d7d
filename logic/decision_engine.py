"""Decision engine: route a classified request to the right decision tree.

Routing happens in two passes. Intents that do not depend on the outfit shape
(style changes, removals, attribute tweaks) are handled first; everything else
is dispatched on the current outfit state type. Both dispatch tables are
checked at import time so a new enum member cannot be added without a handler.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from logic.layered_tree import ambiguous_layer_clarification, decide_layered
from logic.one_piece_tree import decide_one_piece
from logic.separates_tree import decide_separates
from logic.tree_helpers import (
    candidate_zones,
    clarify,
    describe_items,
    execute,
    items_in_zones,
    mentioned_items,
    no_candidates,
    suggest,
    zone_referenced_items,
)
from models.classification import RequestClassification, RequestType
from models.decision import ClarificationKind, ClarificationOption, DecisionResult, OptionEffect
from models.garment import GarmentItem, contains_item
from models.outfit_state import OutfitState, OutfitStateType
from models.taxonomy import TOP_LAYER_ZONES, Zone

logger = logging.getLogger(__name__)

Handler = Callable[[RequestClassification, OutfitState, Sequence[GarmentItem], Sequence[GarmentItem]], DecisionResult]


def _decide_empty(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    if not candidates:
        return no_candidates(classification)
    return execute(candidates, (), reasoning="Nothing to replace; adding the new items.")


_STATE_HANDLERS: Dict[OutfitStateType, Handler] = {
    OutfitStateType.EMPTY: _decide_empty,
    OutfitStateType.SEPARATES: decide_separates,
    OutfitStateType.ONE_PIECE: decide_one_piece,
    OutfitStateType.LAYERED: decide_layered,
}


def dispatch_by_state(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    handler = _STATE_HANDLERS.get(state.type)
    if handler is None:
        logger.warning("no handler for state type %s; adding candidates", state.type)
        return _decide_empty(classification, state, candidates, baseline)
    return handler(classification, state, candidates, baseline)


def _conflicting_items(state: OutfitState, candidates: Sequence[GarmentItem]) -> List[GarmentItem]:
    zones = set(candidate_zones(candidates))
    if Zone.ONE_PIECE in zones:
        zones |= {Zone.TOP, Zone.BOTTOM}
    if zones & {Zone.TOP, Zone.BOTTOM}:
        zones.add(Zone.ONE_PIECE)
    return [item for item in items_in_zones(state.items, zones) if not contains_item(candidates, item)]


def decide_style_mood(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    """Style or mood shifts are always proposed, never applied directly."""

    removals = _conflicting_items(state, candidates)
    descriptors = classification.entities.style_descriptors
    vibe = " ".join(descriptors) if descriptors else "new"
    if candidates:
        text = f"Here's a {vibe} direction: {describe_items(candidates)}."
        if removals:
            text += f" It would replace your {describe_items(removals)}."
        text += " Want me to apply it?"
    else:
        text = f"I can take your look in a {vibe} direction. Want me to pull some pieces together?"
    return suggest(
        classification,
        candidates,
        removals,
        text,
        reasoning="Style changes reshape the whole outfit and need approval first.",
    )


def decide_removal(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    """Remove named items, but never leave the outfit empty."""

    items = list(state.items)
    garments = classification.entities.garments
    if not items:
        return clarify(
            classification,
            ClarificationKind.MISSING_INFO,
            "You're not wearing anything yet, so there's nothing to remove.",
            reasoning="Removal requested on an empty outfit.",
        )

    matches = mentioned_items(items, classification.message, garments)
    if not matches:
        matches = zone_referenced_items(items, classification.message, garments)

    if not matches:
        options = [
            ClarificationOption(
                id=f"item_{index}",
                label=item.name,
                value=item.name,
                effect=OptionEffect.REMOVE,
                target=item,
            )
            for index, item in enumerate(items)
        ]
        return clarify(
            classification,
            ClarificationKind.AMBIGUOUS,
            "Which item would you like to remove?",
            options=options,
            reasoning="The removal did not name anything currently worn.",
        )

    if len(matches) >= len(items):
        return clarify(
            classification,
            ClarificationKind.CONFLICT,
            f"Removing the {describe_items(matches)} would leave you with nothing on. "
            "Would you like to swap it for something else instead?",
            options=[
                ClarificationOption(
                    id="replace",
                    label="Swap it for something new",
                    value="replace",
                    effect=OptionEffect.CHOOSE_GARMENT,
                ),
                ClarificationOption(id="keep", label="Keep it on", value="keep", effect=OptionEffect.KEEP),
            ],
            pending_removals=matches,
            reasoning="Removal would empty the outfit.",
        )

    return execute((), matches, reasoning=f"Removing {describe_items(matches)}.")


def decide_attribute_modification(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    """Swap the single item a tweak refers to, asking when the reference is unclear."""

    items = list(state.items)
    if not items:
        return dispatch_by_state(classification, state, candidates, baseline)
    # A tweak needs the changed garment to swap in.
    if not candidates:
        return no_candidates(classification)

    if len(items) == 1:
        target = items[0]
        return execute(candidates, [target], reasoning=f"Updating {target.name}.")

    matches = mentioned_items(items, classification.message, classification.entities.garments)
    if len(matches) == 1:
        return execute(candidates, matches, reasoning=f"Updating {matches[0].name}.")

    if (
        state.type == OutfitStateType.LAYERED
        and len(matches) > 1
        and all(item.zone in TOP_LAYER_ZONES for item in matches)
    ):
        return ambiguous_layer_clarification(classification, state, candidates)

    options = [
        ClarificationOption(
            id=f"item_{index}",
            label=f"Change {item.name}",
            value=item.name,
            effect=OptionEffect.REPLACE,
            target=item,
        )
        for index, item in enumerate(items)
    ]
    return clarify(
        classification,
        ClarificationKind.AMBIGUOUS,
        "Which item would you like to change?",
        options=options,
        pending_items=candidates,
        reasoning="The change could apply to more than one item.",
        zone_conflict=True,
    )


_INTENT_HANDLERS: Dict[RequestType, Optional[Handler]] = {
    RequestType.STYLE_MOOD: decide_style_mood,
    RequestType.REMOVAL: decide_removal,
    RequestType.ATTRIBUTE_MODIFICATION: decide_attribute_modification,
    # Routed by outfit state.
    RequestType.COMPLETE_OUTFIT: None,
    RequestType.SINGLE_ITEM: None,
    RequestType.LAYERING: None,
}


def _assert_exhaustive() -> None:
    missing_states = set(OutfitStateType) - set(_STATE_HANDLERS)
    missing_types = set(RequestType) - set(_INTENT_HANDLERS)
    if missing_states or missing_types:
        raise RuntimeError(
            f"Decision dispatch is missing handlers: states={sorted(s.value for s in missing_states)} "
            f"types={sorted(t.value for t in missing_types)}"
        )


_assert_exhaustive()


def make_decision(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] | None = None,
) -> DecisionResult:
    """Turn a classified request into a mutation plan.

    Pure function of its inputs: the same classification, state, candidates
    and baseline always produce an equal :class:`DecisionResult`.
    """

    candidate_list = list(candidates)
    baseline_list = list(baseline or [])
    handler = _INTENT_HANDLERS.get(classification.type)
    if handler is not None:
        result = handler(classification, state, candidate_list, baseline_list)
    else:
        result = dispatch_by_state(classification, state, candidate_list, baseline_list)
    logger.info(
        "decision type=%s state=%s action=%s add=%d remove=%d regen=%s",
        classification.type.value,
        state.type.value,
        result.action.value,
        len(result.items_to_add),
        len(result.items_to_remove),
        result.should_regenerate_from_scratch,
    )
    return result


__all__ = [
    "dispatch_by_state",
    "decide_style_mood",
    "decide_removal",
    "decide_attribute_modification",
    "make_decision",
]
