"""Decision tree for an outfit built around a dress, jumpsuit or romper.

Moving from a one-piece to separates needs both halves. A new top can borrow
the bottom from the baseline outfit the conversation started with; a new
bottom always asks which top to pair it with.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from logic.tree_helpers import (
    candidate_zones,
    clarify,
    describe_items,
    execute,
    items_in_zones,
    mentions_replace,
    no_candidates,
    same_zone_replace,
)
from models.classification import RequestClassification
from models.decision import ClarificationKind, ClarificationOption, DecisionResult, OptionEffect
from models.garment import GarmentItem, contains_item
from models.outfit_state import OutfitState
from models.taxonomy import Zone

logger = logging.getLogger(__name__)

BOTTOM_ARCHETYPES: List[ClarificationOption] = [
    ClarificationOption(
        id="jeans", label="High-waisted jeans", value="high-waisted jeans", effect=OptionEffect.CHOOSE_GARMENT
    ),
    ClarificationOption(id="skirt", label="Mini skirt", value="mini skirt", effect=OptionEffect.CHOOSE_GARMENT),
    ClarificationOption(id="shorts", label="Shorts", value="shorts", effect=OptionEffect.CHOOSE_GARMENT),
    ClarificationOption(
        id="choose",
        label="You choose",
        value="ai_choose",
        effect=OptionEffect.CHOOSE_GARMENT,
        description="Let the stylist pick a bottom that works",
    ),
]

TOP_ARCHETYPES: List[ClarificationOption] = [
    ClarificationOption(id="tshirt", label="T-shirt", value="t-shirt", effect=OptionEffect.CHOOSE_GARMENT),
    ClarificationOption(id="blouse", label="Blouse", value="blouse", effect=OptionEffect.CHOOSE_GARMENT),
    ClarificationOption(id="crop", label="Crop top", value="crop top", effect=OptionEffect.CHOOSE_GARMENT),
    ClarificationOption(
        id="choose",
        label="You choose",
        value="ai_choose",
        effect=OptionEffect.CHOOSE_GARMENT,
        description="Let the stylist pick a top that works",
    ),
]


def _displaced(state: OutfitState, candidates: Sequence[GarmentItem]) -> List[GarmentItem]:
    """One-pieces plus anything sharing a zone with the candidates."""

    zones = set(candidate_zones(candidates)) | {Zone.ONE_PIECE}
    return [item for item in items_in_zones(state.items, zones) if not contains_item(candidates, item)]


def decide_one_piece(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    if not candidates:
        return no_candidates(classification)

    zones = set(candidate_zones(candidates))
    logger.debug("one-piece tree handling zones=%s", sorted(zone.value for zone in zones))

    if Zone.ONE_PIECE in zones:
        removals = _displaced(state, candidates)
        return execute(
            candidates,
            removals,
            reasoning=f"Swapping {describe_items(removals)} for {describe_items(candidates)}.",
        )

    if Zone.TOP in zones and Zone.BOTTOM in zones:
        removals = _displaced(state, candidates)
        return execute(candidates, removals, reasoning="Switching from a one-piece to separates.")

    if zones == {Zone.OUTERWEAR}:
        current_outerwear = list(state.in_zone(Zone.OUTERWEAR))
        if current_outerwear and mentions_replace(classification.message):
            return execute(candidates, current_outerwear, reasoning="Swapping outerwear as requested.")
        return execute(candidates, (), reasoning="Layering outerwear over the one-piece.")

    if Zone.TOP in zones:
        baseline_bottoms = [item for item in baseline if item.zone == Zone.BOTTOM]
        removals = _displaced(state, candidates)
        if baseline_bottoms:
            return execute(
                list(candidates) + baseline_bottoms,
                removals,
                reasoning=f"Pairing the new top with your original {describe_items(baseline_bottoms)}.",
            )
        top_names = describe_items([item for item in candidates if item.zone == Zone.TOP])
        return clarify(
            classification,
            ClarificationKind.MISSING_INFO,
            f"What would you like to wear on the bottom with the {top_names}?",
            options=BOTTOM_ARCHETYPES,
            pending_items=candidates,
            pending_removals=removals,
            reasoning="A top replacing a one-piece needs a bottom to go with it.",
            zone_conflict=True,
        )

    if Zone.BOTTOM in zones:
        removals = _displaced(state, candidates)
        bottom_names = describe_items([item for item in candidates if item.zone == Zone.BOTTOM])
        return clarify(
            classification,
            ClarificationKind.MISSING_INFO,
            f"What top would you like to wear with the {bottom_names}?",
            options=TOP_ARCHETYPES,
            pending_items=candidates,
            pending_removals=removals,
            reasoning="A bottom replacing a one-piece needs a top to go with it.",
            zone_conflict=True,
        )

    return same_zone_replace(state, candidates)


__all__ = ["BOTTOM_ARCHETYPES", "TOP_ARCHETYPES", "decide_one_piece"]
