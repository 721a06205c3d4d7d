"""Decision tree for a separates outfit (one top plus one bottom)."""

from __future__ import annotations

import logging
from typing import Sequence

from logic.tree_helpers import (
    candidate_zones,
    describe_items,
    execute,
    mentions_replace,
    no_candidates,
    one_piece_replacement,
    same_zone_replace,
    swap_zones,
    wants_layering,
)
from models.classification import RequestClassification
from models.decision import DecisionResult
from models.garment import GarmentItem
from models.outfit_state import OutfitState
from models.taxonomy import Zone

logger = logging.getLogger(__name__)


def decide_separates(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
    baseline: Sequence[GarmentItem] = (),
) -> DecisionResult:
    if not candidates:
        return no_candidates(classification)

    zones = candidate_zones(candidates)
    if Zone.ONE_PIECE in zones:
        return one_piece_replacement(classification, state, candidates)
    if len(zones) > 1:
        return swap_zones(state, candidates)

    zone = zones[0]
    logger.debug("separates tree handling zone=%s", zone.value)

    if zone == Zone.TOP:
        if wants_layering(classification):
            return execute(candidates, (), reasoning="Layering the new top over the current one.")
        current_tops = list(state.in_zone(Zone.TOP))
        return execute(
            candidates,
            current_tops,
            reasoning=f"Swapping {describe_items(current_tops)} for {describe_items(candidates)}.",
        )

    if zone == Zone.BOTTOM:
        current_bottoms = list(state.in_zone(Zone.BOTTOM))
        return execute(
            candidates,
            current_bottoms,
            reasoning=f"Swapping {describe_items(current_bottoms)} for {describe_items(candidates)}.",
        )

    if zone == Zone.OUTERWEAR:
        current_outerwear = list(state.in_zone(Zone.OUTERWEAR))
        if current_outerwear and mentions_replace(classification.message):
            return execute(candidates, current_outerwear, reasoning="Swapping outerwear as requested.")
        return execute(candidates, (), reasoning="Adding outerwear as a layer over the outfit.")

    return same_zone_replace(state, candidates)


__all__ = ["decide_separates"]
