"""Request classification model produced by the request classifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class RequestType(str, Enum):
    COMPLETE_OUTFIT = "complete_outfit"
    SINGLE_ITEM = "single_item"
    ATTRIBUTE_MODIFICATION = "attribute_modification"
    STYLE_MOOD = "style_mood"
    LAYERING = "layering"
    REMOVAL = "removal"


# Older backend prompts labelled the types A-F; both spellings are accepted.
_LEGACY_ALIASES: Dict[str, RequestType] = {
    "type_a_complete_outfit": RequestType.COMPLETE_OUTFIT,
    "type_b_single_item": RequestType.SINGLE_ITEM,
    "type_c_attribute_modification": RequestType.ATTRIBUTE_MODIFICATION,
    "type_d_style_mood": RequestType.STYLE_MOOD,
    "type_e_layering": RequestType.LAYERING,
    "type_f_removal": RequestType.REMOVAL,
}


def parse_request_type(value: str | None) -> Optional[RequestType]:
    """Map a backend label onto a request type, or ``None`` if unknown."""

    if not value:
        return None
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    if key in _LEGACY_ALIASES:
        return _LEGACY_ALIASES[key]
    try:
        return RequestType(key)
    except ValueError:
        return None


@dataclass(frozen=True)
class ExtractedEntities:
    garments: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    brands: List[str] = field(default_factory=list)
    style_descriptors: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)
    layering_keywords: List[str] = field(default_factory=list)
    removal_keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RequestClassification:
    """Intent and entities extracted from one user message."""

    type: RequestType
    confidence: float
    entities: ExtractedEntities = field(default_factory=ExtractedEntities)
    intent: str = ""
    message: str = ""
    needs_clarification: bool = False
    clarification_reason: Optional[str] = None

    @property
    def has_layering_keyword(self) -> bool:
        return bool(self.entities.layering_keywords)

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "intent": self.intent,
            "needs_clarification": self.needs_clarification,
            "clarification_reason": self.clarification_reason,
            "garments": list(self.entities.garments),
            "colors": list(self.entities.colors),
            "brands": list(self.entities.brands),
            "style_descriptors": list(self.entities.style_descriptors),
            "layering_keywords": list(self.entities.layering_keywords),
            "removal_keywords": list(self.entities.removal_keywords),
        }


def fallback_classification(
    message: str, entities: ExtractedEntities | None = None, reason: str | None = None
) -> RequestClassification:
    """Classification used when the backend is unavailable or returns garbage."""

    return RequestClassification(
        type=RequestType.SINGLE_ITEM,
        confidence=0.0,
        entities=entities or ExtractedEntities(),
        intent="",
        message=message,
        needs_clarification=True,
        clarification_reason=reason or "classification_unavailable",
    )


__all__ = [
    "RequestType",
    "ExtractedEntities",
    "RequestClassification",
    "parse_request_type",
    "fallback_classification",
]
