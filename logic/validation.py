"""Pydantic schemas and helpers for validating HTTP payloads and backend JSON."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from models.garment import GarmentItem


def _coerce_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return [str(value)]


class GarmentPayload(BaseModel):
    """Input contract for one garment."""

    name: str = Field(min_length=1)
    category: str = ""
    zone: Optional[str] = None
    z_index: Optional[int] = Field(default=None, validation_alias=AliasChoices("z_index", "zIndex"))
    colors: List[str] = Field(default_factory=list)
    pattern: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("image_url", "imageUrl"))
    product_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("product_url", "productUrl"))
    price: Optional[str] = None
    retailer: Optional[str] = None

    @field_validator("colors", mode="before")
    @classmethod
    def _normalise_colors(cls, value: Any) -> List[str]:
        return _coerce_str_list(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    def to_item(self) -> GarmentItem:
        return GarmentItem(
            name=self.name,
            category=self.category,
            zone=self.zone,
            z_index=self.z_index,
            colors=list(self.colors),
            pattern=self.pattern,
            brand=self.brand,
            image_url=self.image_url,
            product_url=self.product_url,
            price=self.price,
            retailer=self.retailer,
        )


class TurnRequestPayload(BaseModel):
    """Shared envelope for one conversational styling turn."""

    message: str = Field(min_length=1)
    current_items: List[GarmentPayload] = Field(default_factory=list)
    candidate_items: List[GarmentPayload] = Field(default_factory=list)
    baseline_items: Optional[List[GarmentPayload]] = None
    turn_sequence: Optional[int] = Field(default=None, ge=0)
    user_id: Optional[str] = None


class TurnResponsePayload(BaseModel):
    """Minimal structure expected from a processed turn."""

    status: Literal["ok", "stale", "error", "needs_review"]
    conversation_id: str
    turn_sequence: int
    action: Literal["execute", "clarify", "suggest"]
    response_text: str
    decision: Dict[str, Any]
    outfit_state: Dict[str, Any]
    items_to_apply: List[Dict[str, Any]] = []
    should_regenerate_from_scratch: bool = False
    clarification: Optional[Dict[str, Any]] = None
    compatibility: List[Dict[str, Any]] = []
    follow_up_query: Optional[str] = None
    decision_context: Optional[str] = None


class ClassificationPayload(BaseModel):
    """JSON contract the request classifier expects from the backend."""

    type: str
    confidence: float = 0.0
    intent: str = ""
    garments: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    style_descriptors: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("style_descriptors", "styleDescriptors")
    )
    categories: List[str] = Field(default_factory=list)
    attributes: List[str] = Field(default_factory=list)
    layering_keywords: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("layering_keywords", "layeringKeywords")
    )
    removal_keywords: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("removal_keywords", "removalKeywords")
    )
    needs_clarification: bool = Field(
        default=False, validation_alias=AliasChoices("needs_clarification", "needsClarification")
    )
    clarification_reason: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("clarification_reason", "clarificationReason")
    )

    @field_validator(
        "garments",
        "colors",
        "brands",
        "style_descriptors",
        "categories",
        "attributes",
        "layering_keywords",
        "removal_keywords",
        mode="before",
    )
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _coerce_str_list(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        return min(1.0, max(0.0, number))


class StateEnrichmentPayload(BaseModel):
    """JSON contract for the optional outfit-state enrichment call."""

    overall_formality: Optional[int] = Field(
        default=None, ge=1, le=5, validation_alias=AliasChoices("overall_formality", "overallFormality")
    )
    dominant_colors: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("dominant_colors", "dominantColors")
    )
    style_descriptors: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("style_descriptors", "styleDescriptors")
    )

    @field_validator("dominant_colors", "style_descriptors", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _coerce_str_list(value)


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "GarmentPayload",
    "TurnRequestPayload",
    "TurnResponsePayload",
    "ClassificationPayload",
    "StateEnrichmentPayload",
    "ValidationResult",
    "validation_failure",
]
