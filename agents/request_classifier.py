"""Request classifier agent: message -> intent type and extracted entities."""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from logic.validation import ClassificationPayload
from models.classification import (
    ExtractedEntities,
    RequestClassification,
    fallback_classification,
    parse_request_type,
)
from models.taxonomy import LAYERING_KEYWORDS, REMOVAL_KEYWORDS, contains_keyword, extract_colors
from stylist_app.logging_config import get_logger, log_event
from tools.gemini_client import JSONBackend

LOGGER = get_logger(__name__)

CLASSIFIER_ROLE = (
    "request classifier. Label each styling message with exactly one request type "
    "and extract the garments, colors, brands and styling words it mentions."
)

_TYPE_GUIDE = """Request types:
- complete_outfit: the user wants a whole new outfit ("dress me for a wedding").
- single_item: the user wants one specific garment ("a white t-shirt").
- attribute_modification: change a property of something already worn ("make it blue", "longer sleeves").
- style_mood: shift the overall vibe ("make it more edgy", "something cozier").
- layering: wear something over or under what is on ("add a jacket", "layer a cardigan on top").
- removal: take something off ("remove the scarf", "without the jacket").

Layering keywords include: add, layer, put on, over, with, on top.
Removal keywords include: remove, take off, without."""

_RESPONSE_SCHEMA = {
    "type": "one of the request types",
    "confidence": "number between 0 and 1",
    "intent": "short paraphrase of what the user wants",
    "garments": ["garment names mentioned"],
    "colors": ["colors mentioned"],
    "brands": ["brands mentioned"],
    "style_descriptors": ["style words such as edgy, cozy, formal"],
    "categories": ["garment categories mentioned"],
    "attributes": ["attributes to change, such as sleeve length"],
    "layering_keywords": ["layering words found in the message"],
    "removal_keywords": ["removal words found in the message"],
    "needs_clarification": "true when the request cannot be acted on",
    "clarification_reason": "why clarification is needed, or null",
}


def _merge_unique(*groups: Sequence[str]) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for value in group:
            key = value.strip().lower()
            if key and key not in merged:
                merged.append(key)
    return merged


def keyword_entities(message: str) -> ExtractedEntities:
    """Entities found deterministically in the message text."""

    return ExtractedEntities(
        colors=extract_colors(message),
        layering_keywords=contains_keyword(message, LAYERING_KEYWORDS),
        removal_keywords=contains_keyword(message, REMOVAL_KEYWORDS),
    )


class RequestClassifierAgent:
    """Classifies styling requests through a JSON language backend.

    The backend is a fallible port; any failure (transport, malformed JSON,
    schema mismatch, unknown type) yields the single-item fallback with zero
    confidence instead of an exception.
    """

    def __init__(self, backend: Optional[JSONBackend] = None) -> None:
        self.backend = backend

    def build_prompt(self, message: str, history: Optional[Sequence[Dict[str, str]]] = None) -> str:
        lines = [_TYPE_GUIDE, "", "Respond with JSON shaped like:", json.dumps(_RESPONSE_SCHEMA, indent=2), ""]
        if history:
            lines.append("Recent conversation:")
            for turn in list(history)[-4:]:
                lines.append(f"{turn.get('role', 'user')}: {turn.get('content', '')}")
            lines.append("")
        lines.append(f"Message: {message}")
        return "\n".join(lines)

    def classify(
        self, message: str, history: Optional[Sequence[Dict[str, str]]] = None
    ) -> RequestClassification:
        scanned = keyword_entities(message)
        if self.backend is None:
            return fallback_classification(message, scanned, reason="classifier_not_configured")

        result = self.backend.generate_json(self.build_prompt(message, history))
        if not result.ok:
            log_event(
                LOGGER,
                logging.WARNING,
                "classifier_backend_failed",
                error=result.error,
                attempts=result.attempts,
            )
            return fallback_classification(message, scanned, reason="classifier_backend_failed")

        try:
            payload = ClassificationPayload.model_validate(result.payload)
        except ValidationError as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "classifier_payload_invalid",
                errors=[error.get("msg") for error in exc.errors()],
            )
            return fallback_classification(message, scanned, reason="classifier_payload_invalid")

        request_type = parse_request_type(payload.type)
        if request_type is None:
            log_event(LOGGER, logging.WARNING, "classifier_unknown_type", request_type=payload.type)
            return fallback_classification(message, scanned, reason="classifier_unknown_type")

        entities = ExtractedEntities(
            garments=list(payload.garments),
            colors=_merge_unique(payload.colors, scanned.colors),
            brands=list(payload.brands),
            style_descriptors=list(payload.style_descriptors),
            categories=list(payload.categories),
            attributes=list(payload.attributes),
            layering_keywords=_merge_unique(payload.layering_keywords, scanned.layering_keywords),
            removal_keywords=_merge_unique(payload.removal_keywords, scanned.removal_keywords),
        )
        classification = RequestClassification(
            type=request_type,
            confidence=payload.confidence,
            entities=entities,
            intent=payload.intent,
            message=message,
            needs_clarification=payload.needs_clarification,
            clarification_reason=payload.clarification_reason,
        )
        log_event(
            LOGGER,
            logging.INFO,
            "request_classified",
            request_type=request_type.value,
            confidence=payload.confidence,
            layering=bool(entities.layering_keywords),
        )
        return classification


__all__ = ["CLASSIFIER_ROLE", "RequestClassifierAgent", "keyword_entities"]
