"""Decision tree for layered outfits (several upper-body layers or extras)."""

from __future__ import annotations

import logging
from typing import Sequence

from logic.tree_helpers import (
    candidate_zones,
    clarify,
    describe_items,
    execute,
    layer_options,
    no_candidates,
    one_piece_replacement,
    same_zone_replace,
    swap_zones,
    wants_layering,
)
from models.classification import RequestClassification
from models.decision import ClarificationKind, ClarificationOption, DecisionResult, OptionEffect
from models.garment import GarmentItem
from models.outfit_state import OutfitState
from models.taxonomy import BASE_LAYER_KEYWORDS, TOP_LAYER_ZONES, Zone, contains_keyword

logger = logging.getLogger(__name__)

ADD_LAYER_OPTION = ClarificationOption(
    id="add_layer",
    label="Add as new layer",
    value="add_layer",
    effect=OptionEffect.ADD_LAYER,
    description="Keep every current layer and wear the new piece on top",
)


def _is_base_layer(item: GarmentItem) -> bool:
    return bool(contains_keyword(f"{item.name} {item.category}", BASE_LAYER_KEYWORDS))


def ambiguous_layer_clarification(
    classification: RequestClassification,
    state: OutfitState,
    candidates: Sequence[GarmentItem],
) -> DecisionResult:
    """Ask which upper-body layer a change refers to."""

    layers = state.top_layers()
    return clarify(
        classification,
        ClarificationKind.AMBIGUOUS,
        "Which layer do you mean?",
        options=layer_options(layers),
        pending_items=candidates,
        reasoning=f"The request could apply to any of {describe_items(layers)}.",
        zone_conflict=True,
    )


def decide_layered(
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
    if any(zone not in TOP_LAYER_ZONES for zone in zones):
        if len(zones) > 1:
            return swap_zones(state, candidates)
        return same_zone_replace(state, candidates)

    if wants_layering(classification):
        return execute(candidates, (), reasoning="Adding a new outermost layer.")

    layers = state.top_layers()
    logger.debug("layered tree: %d top layers", len(layers))

    if len(layers) >= 3:
        return clarify(
            classification,
            ClarificationKind.AMBIGUOUS,
            f"You're wearing {describe_items(layers)}. Which layer should the "
            f"{describe_items(candidates)} replace?",
            options=layer_options(layers) + [ADD_LAYER_OPTION],
            pending_items=candidates,
            reasoning="Several layers could be replaced.",
            zone_conflict=True,
        )

    if len(layers) == 2:
        inner, outer = layers
        if any(_is_base_layer(item) for item in candidates):
            return execute(
                candidates,
                [inner],
                reasoning=f"{describe_items(candidates)} is a base layer, so it replaces {inner.name}.",
            )
        return clarify(
            classification,
            ClarificationKind.AMBIGUOUS,
            f"Should the {describe_items(candidates)} replace your {inner.name} or your {outer.name}?",
            options=layer_options(layers),
            pending_items=candidates,
            reasoning="Two layers could be replaced.",
            zone_conflict=True,
        )

    if len(layers) == 1:
        outermost = layers[-1]
        return execute(candidates, [outermost], reasoning=f"Replacing {outermost.name}.")

    return execute(candidates, (), reasoning="No upper-body layer to replace; adding.")


__all__ = ["ADD_LAYER_OPTION", "ambiguous_layer_clarification", "decide_layered"]
