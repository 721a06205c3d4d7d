"""Shared building blocks for the decision trees."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from models.classification import RequestClassification, RequestType
from models.decision import (
    ClarificationContext,
    ClarificationKind,
    ClarificationOption,
    DecisionAction,
    DecisionResult,
    OptionEffect,
)
from models.garment import GarmentItem, contains_item
from models.outfit_state import OutfitState
from models.taxonomy import Zone, contains_keyword, match_zone, normalize_text

_REPLACE_LANGUAGE = re.compile(r"\b(replace|swap|change|instead)\b", re.IGNORECASE)

NO_CANDIDATES_QUESTION = (
    "I couldn't find items matching that request. Could you describe it a little differently?"
)


def wants_layering(classification: RequestClassification) -> bool:
    return classification.type == RequestType.LAYERING or classification.has_layering_keyword


def mentions_replace(message: str) -> bool:
    return bool(_REPLACE_LANGUAGE.search(message or ""))


def candidate_zones(candidates: Sequence[GarmentItem]) -> List[Zone]:
    """Distinct candidate zones in first-seen order."""

    zones: List[Zone] = []
    for item in candidates:
        if item.zone not in zones:
            zones.append(item.zone)
    return zones


def items_in_zones(items: Iterable[GarmentItem], zones: Iterable[Zone]) -> List[GarmentItem]:
    wanted = set(zones)
    return [item for item in items if item.zone in wanted]


def describe_items(items: Sequence[GarmentItem]) -> str:
    names = [item.name for item in items]
    if not names:
        return "nothing"
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + f" and {names[-1]}"


def mentioned_items(
    items: Sequence[GarmentItem], message: str, garments: Sequence[str] = ()
) -> List[GarmentItem]:
    """Items whose name or category appears in the message, or that contain an extracted garment."""

    text = normalize_text(message or "")
    extracted = [normalize_text(garment) for garment in garments if garment and garment.strip()]
    matches: List[GarmentItem] = []
    for item in items:
        name = normalize_text(item.name)
        category = normalize_text(item.category)
        if name and name in text:
            matches.append(item)
        elif category and category in text:
            matches.append(item)
        elif any(garment in name or (name and name in garment) for garment in extracted):
            matches.append(item)
    return matches


def zone_referenced_items(
    items: Sequence[GarmentItem], message: str, garments: Sequence[str] = ()
) -> List[GarmentItem]:
    """Items in a zone named by the extracted garments or the message."""

    zones = {zone for zone in (match_zone(garment) for garment in garments) if zone}
    if not zones:
        stripped = normalize_text(message or "")
        for keyword in contains_keyword(stripped, ("remove", "take off", "without")):
            stripped = stripped.replace(keyword, " ")
        zone = match_zone(stripped)
        if zone:
            zones.add(zone)
    return [item for item in items if item.zone in zones]


def execute(
    add: Sequence[GarmentItem] = (),
    remove: Sequence[GarmentItem] = (),
    reasoning: str = "",
) -> DecisionResult:
    """Execute result; regeneration is required whenever anything is removed."""

    return DecisionResult(
        action=DecisionAction.EXECUTE,
        items_to_add=list(add),
        items_to_remove=list(remove),
        should_regenerate_from_scratch=bool(remove),
        reasoning=reasoning,
    )


def clarify(
    classification: RequestClassification,
    kind: ClarificationKind,
    question: str,
    options: Sequence[ClarificationOption] = (),
    pending_items: Sequence[GarmentItem] = (),
    pending_removals: Sequence[GarmentItem] = (),
    reasoning: str = "",
    zone_conflict: bool = False,
    follow_up_query: Optional[str] = None,
) -> DecisionResult:
    """Clarify result; items stay pending inside the clarification context."""

    context = ClarificationContext(
        kind=kind,
        question=question,
        options=list(options),
        pending_items=list(pending_items),
        pending_removals=list(pending_removals),
        original_message=classification.message,
        request_type=classification.type.value,
    )
    return DecisionResult(
        action=DecisionAction.CLARIFY,
        should_regenerate_from_scratch=zone_conflict,
        reasoning=reasoning,
        clarification=context,
        follow_up_query=follow_up_query,
    )


def suggest(
    classification: RequestClassification,
    add: Sequence[GarmentItem],
    remove: Sequence[GarmentItem],
    suggestion: str,
    reasoning: str = "",
) -> DecisionResult:
    """Proposal that needs approval before anything is applied."""

    context = ClarificationContext(
        kind=ClarificationKind.CONFIRMATION,
        question=suggestion,
        options=[
            ClarificationOption(id="confirm", label="Yes, do it", value="confirm", effect=OptionEffect.CONFIRM),
            ClarificationOption(id="cancel", label="No, keep my outfit", value="cancel", effect=OptionEffect.CANCEL),
        ],
        pending_items=list(add),
        pending_removals=list(remove),
        original_message=classification.message,
        request_type=classification.type.value,
    )
    return DecisionResult(
        action=DecisionAction.SUGGEST,
        items_to_add=list(add),
        items_to_remove=list(remove),
        should_regenerate_from_scratch=True,
        reasoning=reasoning,
        clarification=context,
        suggestion=suggestion,
        requires_approval=True,
    )


def no_candidates(classification: RequestClassification) -> DecisionResult:
    return clarify(
        classification,
        ClarificationKind.MISSING_INFO,
        NO_CANDIDATES_QUESTION,
        reasoning="No candidate items were resolved for the request.",
    )


def same_zone_replace(state: OutfitState, candidates: Sequence[GarmentItem], reasoning: str = "") -> DecisionResult:
    """Swap out whatever currently occupies the candidates' zones, or just add."""

    removals = [
        item
        for item in items_in_zones(state.items, candidate_zones(candidates))
        if not contains_item(candidates, item)
    ]
    if removals:
        return execute(
            candidates,
            removals,
            reasoning or f"Replacing {describe_items(removals)} in the same zone.",
        )
    return execute(candidates, (), reasoning or "Zone is free; adding the new items.")


def swap_zones(state: OutfitState, candidates: Sequence[GarmentItem]) -> DecisionResult:
    """Complete-outfit style swap across every zone the candidates touch."""

    return same_zone_replace(
        state,
        candidates,
        reasoning=f"Swapping every zone touched by {describe_items(candidates)}.",
    )


def one_piece_replacement(
    classification: RequestClassification, state: OutfitState, candidates: Sequence[GarmentItem]
) -> DecisionResult:
    """Propose a one-piece that would displace tops and bottoms."""

    zones = set(candidate_zones(candidates)) | {Zone.TOP, Zone.BOTTOM, Zone.ONE_PIECE}
    removals = [item for item in items_in_zones(state.items, zones) if not contains_item(candidates, item)]
    one_piece = next(item for item in candidates if item.zone == Zone.ONE_PIECE)
    return suggest(
        classification,
        candidates,
        removals,
        f"This will replace both your top and bottom with the {one_piece.name}. Ready?",
        reasoning="A one-piece cannot be worn alongside separate tops and bottoms.",
    )


def position_labels(count: int) -> List[str]:
    """Inner/middle/outer labels for ``count`` layers, innermost first."""

    if count <= 0:
        return []
    if count == 1:
        return ["outer"]
    return ["inner"] + ["middle"] * (count - 2) + ["outer"]


def layer_options(layers: Sequence[GarmentItem]) -> List[ClarificationOption]:
    options = []
    for index, (layer, position) in enumerate(zip(layers, position_labels(len(layers)))):
        options.append(
            ClarificationOption(
                id=f"layer_{index}",
                label=f"Replace {layer.name}",
                value=layer.name,
                effect=OptionEffect.REPLACE,
                description=f"Swap your {position} layer",
                target=layer,
            )
        )
    return options


__all__ = [
    "NO_CANDIDATES_QUESTION",
    "wants_layering",
    "mentions_replace",
    "candidate_zones",
    "items_in_zones",
    "describe_items",
    "mentioned_items",
    "zone_referenced_items",
    "execute",
    "clarify",
    "suggest",
    "no_candidates",
    "same_zone_replace",
    "swap_zones",
    "one_piece_replacement",
    "position_labels",
    "layer_options",
]
