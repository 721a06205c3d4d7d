"""Apply a decision to the authoritative item list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from models.decision import DecisionResult
from models.garment import GarmentItem, contains_item
from models.taxonomy import Zone

logger = logging.getLogger(__name__)

_SEPARATE_ZONES = {Zone.TOP, Zone.BOTTOM}


@dataclass(frozen=True)
class MergeResult:
    items: List[GarmentItem]
    added: List[GarmentItem] = field(default_factory=list)
    removed: List[GarmentItem] = field(default_factory=list)
    evicted: List[GarmentItem] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.evicted)


def merge_items(
    current: Sequence[GarmentItem],
    add: Sequence[GarmentItem] = (),
    remove: Sequence[GarmentItem] = (),
) -> MergeResult:
    """Remove then add, keeping one-pieces and tops/bottoms mutually exclusive."""

    removed = [item for item in current if contains_item(remove, item)]
    kept = [item for item in current if not contains_item(remove, item)]
    additions = [item for item in add if not contains_item(kept, item)]

    added_zones = {item.zone for item in additions}
    evicted: List[GarmentItem] = []
    if Zone.ONE_PIECE in added_zones:
        evicted = [item for item in kept if item.zone in _SEPARATE_ZONES]
    elif added_zones & _SEPARATE_ZONES:
        evicted = [item for item in kept if item.zone == Zone.ONE_PIECE]
    if evicted:
        logger.info("evicting %d items to keep zones exclusive", len(evicted))
        kept = [item for item in kept if not contains_item(evicted, item)]

    return MergeResult(items=kept + additions, added=additions, removed=removed, evicted=evicted)


def merge_outfit(current: Sequence[GarmentItem], decision: DecisionResult) -> MergeResult:
    return merge_items(current, decision.items_to_add, decision.items_to_remove)


__all__ = ["MergeResult", "merge_items", "merge_outfit"]
