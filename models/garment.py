"""Garment data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from models.taxonomy import (
    Zone,
    classify_zone,
    match_zone,
    normalize_color_name,
    normalize_text,
    parse_zone,
    z_index_for,
)


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _normalise_colors(values: Iterable[str]) -> List[str]:
    """Normalise color names using the canonical taxonomy mapping."""

    normalised = []
    seen = set()
    for value in values:
        key = normalize_color_name(str(value))
        if key and key not in seen:
            normalised.append(key)
            seen.add(key)
    return normalised


@dataclass
class GarmentItem:
    """A garment worn or proposed for the outfit.

    ``zone`` and ``z_index`` are derived from the category (falling back to the
    name) unless the caller supplies valid values. Image, URL, price and
    retailer fields are carried through untouched for the renderer.
    """

    name: str
    category: str = ""
    zone: Optional[Zone] = None
    z_index: Optional[int] = None
    colors: List[str] = field(default_factory=list)
    pattern: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    price: Optional[str] = None
    retailer: Optional[str] = None

    def __post_init__(self) -> None:
        self.name = str(self.name).strip()
        self.category = str(self.category or "").strip()
        zone = parse_zone(self.zone)
        if zone is None:
            zone = match_zone(self.category) or classify_zone(self.name)
        self.zone = zone
        self.z_index = int(self.z_index) if self.z_index is not None else z_index_for(zone)
        self.colors = _normalise_colors(_ensure_list(self.colors))

    @property
    def key(self) -> str:
        """Identity used when matching items across turns."""

        return f"{self.zone.value}:{normalize_text(self.name)}"

    def describe(self) -> str:
        return f"{self.name} ({self.category or self.zone.value})"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "category": self.category,
            "zone": self.zone.value,
            "z_index": self.z_index,
            "colors": list(self.colors),
        }
        for optional in ("pattern", "brand", "image_url", "product_url", "price", "retailer"):
            value = getattr(self, optional)
            if value is not None:
                payload[optional] = value
        return payload

    def with_z_index(self, z_index: int) -> "GarmentItem":
        return replace(self, z_index=z_index)


def from_raw(metadata: Dict[str, Any]) -> GarmentItem:
    """Factory to build a :class:`GarmentItem` from loose caller or LLM payloads."""

    name = metadata.get("name") or metadata.get("title") or metadata.get("category")
    if not name:
        raise ValueError("Garment payload requires a name or category")

    return GarmentItem(
        name=str(name),
        category=str(metadata.get("category") or ""),
        zone=metadata.get("zone"),
        z_index=metadata.get("z_index", metadata.get("zIndex")),
        colors=_ensure_list(metadata.get("colors") or metadata.get("color")),
        pattern=metadata.get("pattern"),
        brand=metadata.get("brand"),
        image_url=metadata.get("image_url"),
        product_url=metadata.get("product_url"),
        price=metadata.get("price"),
        retailer=metadata.get("retailer"),
    )


def same_item(left: GarmentItem, right: GarmentItem) -> bool:
    return left is right or left.key == right.key


def contains_item(items: Iterable[GarmentItem], target: GarmentItem) -> bool:
    return any(same_item(item, target) for item in items)


__all__ = ["GarmentItem", "from_raw", "same_item", "contains_item"]
