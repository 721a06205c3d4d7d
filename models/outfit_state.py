"""Outfit state model: zone map, state type and layer helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models.garment import GarmentItem
from models.taxonomy import CANONICAL_ZONES, TOP_LAYER_ZONES, Zone

logger = logging.getLogger(__name__)


class OutfitStateType(str, Enum):
    EMPTY = "empty"
    ONE_PIECE = "one_piece"
    SEPARATES = "separates"
    LAYERED = "layered"


@dataclass(frozen=True)
class OutfitState:
    """Snapshot of what is currently worn, recomputed every turn."""

    type: OutfitStateType
    items: Tuple[GarmentItem, ...] = ()
    zones: Dict[Zone, Tuple[GarmentItem, ...]] = field(default_factory=dict)
    layer_count: int = 0
    is_complete: bool = False
    missing_zones: Tuple[Zone, ...] = CANONICAL_ZONES
    overall_formality: Optional[int] = None
    dominant_colors: Tuple[str, ...] = ()
    style_descriptors: Tuple[str, ...] = ()
    degraded: bool = False

    def in_zone(self, zone: Zone) -> Tuple[GarmentItem, ...]:
        return self.zones.get(zone, ())

    def has_zone(self, zone: Zone) -> bool:
        return bool(self.zones.get(zone))

    def top_layers(self) -> List[GarmentItem]:
        return top_layers(self.items)

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.type.value,
            "items": [item.to_dict() for item in self.items],
            "zones": {zone.value: [item.name for item in items] for zone, items in self.zones.items()},
            "layer_count": self.layer_count,
            "is_complete": self.is_complete,
            "missing_zones": [zone.value for zone in self.missing_zones],
            "overall_formality": self.overall_formality,
            "dominant_colors": list(self.dominant_colors),
            "style_descriptors": list(self.style_descriptors),
            "degraded": self.degraded,
        }


def _ordered(items: Iterable[GarmentItem]) -> List[GarmentItem]:
    """Inner to outer: by z-index, insertion order breaking ties."""

    indexed = list(enumerate(items))
    indexed.sort(key=lambda pair: (pair[1].z_index, pair[0]))
    return [item for _, item in indexed]


def group_by_zone(items: Sequence[GarmentItem]) -> Dict[Zone, Tuple[GarmentItem, ...]]:
    grouped: Dict[Zone, List[GarmentItem]] = {}
    for item in items:
        grouped.setdefault(item.zone, []).append(item)
    return {zone: tuple(_ordered(zone_items)) for zone, zone_items in grouped.items()}


def top_layers(items: Sequence[GarmentItem]) -> List[GarmentItem]:
    """Upper-body layers ordered from innermost to outermost."""

    return _ordered(item for item in items if item.zone in TOP_LAYER_ZONES)


def innermost_layer(items: Sequence[GarmentItem]) -> Optional[GarmentItem]:
    layers = top_layers(items)
    return layers[0] if layers else None


def outermost_layer(items: Sequence[GarmentItem]) -> Optional[GarmentItem]:
    layers = top_layers(items)
    return layers[-1] if layers else None


def classify_state_type(items: Sequence[GarmentItem]) -> OutfitStateType:
    """Derive the outfit state type from the item list.

    A one-piece without tops or bottoms is a one-piece outfit. A top-equivalent
    plus a bottom-equivalent is separates, or layered when extra layers are
    present. Two or more upper-body layers are layered even without a bottom.
    Anything else (including a lone top) is treated as empty so new items are
    added without replacing anything.
    """

    if not items:
        return OutfitStateType.EMPTY

    tops = [item for item in items if item.zone == Zone.TOP]
    bottoms = [item for item in items if item.zone == Zone.BOTTOM]
    one_pieces = [item for item in items if item.zone == Zone.ONE_PIECE]
    has_outerwear = any(item.zone == Zone.OUTERWEAR for item in items)
    has_accessories = any(item.zone == Zone.ACCESSORIES for item in items)

    if one_pieces and not tops and not bottoms:
        return OutfitStateType.ONE_PIECE

    has_top = bool(tops) or bool(one_pieces)
    has_bottom = bool(bottoms) or bool(one_pieces)
    if has_top and has_bottom:
        if len(tops) > 1 or len(bottoms) > 1 or one_pieces or has_outerwear or has_accessories:
            return OutfitStateType.LAYERED
        return OutfitStateType.SEPARATES

    if len(top_layers(items)) > 1:
        return OutfitStateType.LAYERED
    return OutfitStateType.EMPTY


def missing_zones_for(items: Sequence[GarmentItem]) -> Tuple[Zone, ...]:
    zones = {item.zone for item in items}
    if Zone.ONE_PIECE in zones:
        required: Tuple[Zone, ...] = (Zone.FOOTWEAR,)
    else:
        required = CANONICAL_ZONES
    return tuple(zone for zone in required if zone not in zones)


def compute_outfit_state(items: Sequence[GarmentItem]) -> OutfitState:
    """Pure, deterministic state computation."""

    item_list = list(items)
    state_type = classify_state_type(item_list)
    missing = missing_zones_for(item_list) if item_list else CANONICAL_ZONES
    state = OutfitState(
        type=state_type,
        items=tuple(item_list),
        zones=group_by_zone(item_list),
        layer_count=len(top_layers(item_list)),
        is_complete=bool(item_list) and not missing,
        missing_zones=missing,
    )
    logger.debug("computed outfit state type=%s items=%d", state_type.value, len(item_list))
    return state


def degraded_state() -> OutfitState:
    """Fallback state used when the state backend fails."""

    return OutfitState(
        type=OutfitStateType.EMPTY,
        items=(),
        zones={},
        layer_count=0,
        is_complete=False,
        missing_zones=CANONICAL_ZONES,
        degraded=True,
    )


__all__ = [
    "OutfitStateType",
    "OutfitState",
    "group_by_zone",
    "top_layers",
    "innermost_layer",
    "outermost_layer",
    "classify_state_type",
    "missing_zones_for",
    "compute_outfit_state",
    "degraded_state",
]
