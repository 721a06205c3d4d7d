"""Outfit state analyzer: deterministic zone state plus optional backend enrichment."""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Optional, Sequence

from pydantic import ValidationError

from logic.validation import StateEnrichmentPayload
from models.garment import GarmentItem
from models.outfit_state import OutfitState, compute_outfit_state, degraded_state
from stylist_app.logging_config import get_logger, log_event
from tools.gemini_client import JSONBackend

LOGGER = get_logger(__name__)

STATE_ROLE = (
    "outfit analyst. Given the garments currently worn, rate the overall formality "
    "and name the dominant colors and style words."
)


class OutfitStateAnalyzer:
    """Builds the :class:`OutfitState` for the current items.

    Zone grouping and the state type are always computed locally. When a
    backend is configured it adds formality, dominant colors and style words;
    if that call fails the analyzer degrades to an empty state with every
    canonical zone missing rather than raising.
    """

    def __init__(self, backend: Optional[JSONBackend] = None, enrichment_enabled: bool = True) -> None:
        self.backend = backend
        self.enrichment_enabled = enrichment_enabled

    def build_prompt(self, items: Sequence[GarmentItem]) -> str:
        listing = [
            {"name": item.name, "category": item.category, "zone": item.zone.value, "colors": item.colors}
            for item in items
        ]
        schema = {
            "overall_formality": "integer 1 (athleisure) to 5 (black tie)",
            "dominant_colors": ["main colors of the outfit"],
            "style_descriptors": ["two or three style words"],
        }
        return (
            "Current outfit items:\n"
            f"{json.dumps(listing, indent=2)}\n\n"
            "Respond with JSON shaped like:\n"
            f"{json.dumps(schema, indent=2)}"
        )

    def analyze(self, items: Sequence[GarmentItem]) -> OutfitState:
        state = compute_outfit_state(items)
        if self.backend is None or not self.enrichment_enabled or not items:
            return state

        result = self.backend.generate_json(self.build_prompt(items))
        if not result.ok:
            log_event(
                LOGGER,
                logging.WARNING,
                "state_backend_failed",
                error=result.error,
                attempts=result.attempts,
                item_count=len(items),
            )
            return degraded_state()

        try:
            payload = StateEnrichmentPayload.model_validate(result.payload)
        except ValidationError as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "state_payload_invalid",
                errors=[error.get("msg") for error in exc.errors()],
            )
            return degraded_state()

        log_event(
            LOGGER,
            logging.INFO,
            "state_analyzed",
            state_type=state.type.value,
            layer_count=state.layer_count,
            overall_formality=payload.overall_formality,
        )
        return dataclasses.replace(
            state,
            overall_formality=payload.overall_formality,
            dominant_colors=tuple(payload.dominant_colors),
            style_descriptors=tuple(payload.style_descriptors),
        )


__all__ = ["STATE_ROLE", "OutfitStateAnalyzer"]
