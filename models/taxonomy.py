"""Canonical zone taxonomy for garments.

This module centralises the body zones an item can occupy, the stacking order
between them and the keyword table that maps free-form category text onto a
zone. Every other module asks this one for zone answers so that the rules stay
consistent across the classifier, the decision trees and the compatibility
checks.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, List, Optional, Pattern, Tuple


class Zone(str, Enum):
    """Body zone a garment occupies."""

    TOP = "top"
    BOTTOM = "bottom"
    ONE_PIECE = "one_piece"
    OUTERWEAR = "outerwear"
    FOOTWEAR = "footwear"
    ACCESSORIES = "accessories"


ZONE_Z_INDEX: Dict[Zone, int] = {
    Zone.OUTERWEAR: 400,
    Zone.TOP: 300,
    Zone.ONE_PIECE: 250,
    Zone.BOTTOM: 200,
    Zone.FOOTWEAR: 150,
    Zone.ACCESSORIES: 100,
}

# Zones that make up a wearable outfit; missing ones are reported on the state.
CANONICAL_ZONES: Tuple[Zone, ...] = (Zone.TOP, Zone.BOTTOM, Zone.FOOTWEAR)

# Zones counted as upper-body layers.
TOP_LAYER_ZONES: Tuple[Zone, ...] = (Zone.TOP, Zone.OUTERWEAR)

ZONE_KEYWORDS: Dict[Zone, List[str]] = {
    Zone.TOP: [
        "top",
        "t-shirt",
        "tshirt",
        "t shirt",
        "tee",
        "blouse",
        "shirt",
        "dress shirt",
        "tank",
        "tank top",
        "crop top",
        "camisole",
        "cami",
        "sweater",
        "sweater vest",
        "jumper",
        "pullover",
        "hoodie",
        "sweatshirt",
        "bodysuit",
        "polo",
        "turtleneck",
        "undershirt",
        "tunic",
    ],
    Zone.BOTTOM: [
        "bottom",
        "jeans",
        "jean",
        "pants",
        "dress pants",
        "track pants",
        "trousers",
        "shorts",
        "skirt",
        "pencil skirt",
        "midi skirt",
        "mini skirt",
        "leggings",
        "chinos",
        "joggers",
        "sweatpants",
        "culottes",
        "capris",
    ],
    Zone.ONE_PIECE: [
        "dress",
        "sundress",
        "gown",
        "evening dress",
        "shirt dress",
        "shirtdress",
        "t-shirt dress",
        "sweater dress",
        "slip dress",
        "tank dress",
        "jumpsuit",
        "romper",
        "playsuit",
        "overalls",
        "one_piece",
        "one piece",
    ],
    Zone.OUTERWEAR: [
        "outerwear",
        "jacket",
        "jean jacket",
        "denim jacket",
        "blazer",
        "coat",
        "trench",
        "parka",
        "puffer",
        "cardigan",
        "vest",
        "gilet",
        "windbreaker",
        "poncho",
        "shacket",
        "overshirt",
    ],
    Zone.FOOTWEAR: [
        "footwear",
        "shoes",
        "shoe",
        "dress shoes",
        "boots",
        "ankle boots",
        "sneakers",
        "trainers",
        "heels",
        "sandals",
        "flats",
        "loafers",
        "oxfords",
        "mules",
        "pumps",
        "slides",
    ],
    Zone.ACCESSORIES: [
        "accessories",
        "accessory",
        "bag",
        "handbag",
        "purse",
        "tote",
        "jewelry",
        "jewellery",
        "necklace",
        "earrings",
        "bracelet",
        "hat",
        "cap",
        "beanie",
        "scarf",
        "belt",
        "sunglasses",
        "watch",
        "tie",
        "gloves",
    ],
}

# Words that describe an under-layer; used when deciding which top layer to swap.
BASE_LAYER_KEYWORDS: List[str] = ["tank", "tee", "t-shirt", "tshirt", "cami", "camisole", "undershirt"]

LAYERING_KEYWORDS: List[str] = [
    "add",
    "layer",
    "layering",
    "put on",
    "throw on",
    "over",
    "on top",
    "underneath",
    "under",
    "also",
]

REMOVAL_KEYWORDS: List[str] = [
    "remove",
    "take off",
    "without",
    "get rid of",
    "ditch",
    "lose the",
    "drop the",
    "no more",
]

COLOR_MAP = {
    "navy blue": "navy",
    "navy": "navy",
    "light blue": "blue",
    "sky blue": "blue",
    "blue": "blue",
    "black": "black",
    "white": "white",
    "off white": "white",
    "ivory": "white",
    "cream": "beige",
    "beige": "beige",
    "tan": "beige",
    "camel": "beige",
    "khaki": "beige",
    "brown": "brown",
    "gray": "gray",
    "grey": "gray",
    "charcoal": "gray",
    "green": "green",
    "olive": "green",
    "red": "red",
    "burgundy": "red",
    "pink": "pink",
    "yellow": "yellow",
    "orange": "orange",
    "purple": "purple",
    "turquoise": "turquoise",
}


def _keyword_pattern(keyword: str) -> Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}s?\b")


# Longest keywords first so that "dress shirt" wins over "dress".
_ZONE_PATTERNS: List[Tuple[str, Zone, Pattern[str]]] = sorted(
    (
        (keyword, zone, _keyword_pattern(keyword))
        for zone, keywords in ZONE_KEYWORDS.items()
        for keyword in keywords
    ),
    key=lambda entry: (-len(entry[0]), entry[0]),
)


def normalize_text(value: str) -> str:
    """Lower-case and collapse whitespace and underscores."""

    return " ".join(value.replace("_", " ").strip().lower().split())


def match_zone(text: str | None) -> Optional[Zone]:
    """Return the most specific zone mentioned in ``text`` or ``None``."""

    if not text:
        return None
    normalised = normalize_text(text)
    for _, zone, pattern in _ZONE_PATTERNS:
        if pattern.search(normalised):
            return zone
    return None


def classify_zone(text: str | None) -> Zone:
    """Map category text to a zone; unknown text lands in accessories."""

    return match_zone(text) or Zone.ACCESSORIES


def parse_zone(value: str | Zone | None) -> Optional[Zone]:
    """Parse an explicit zone label, returning ``None`` when it is not one."""

    if isinstance(value, Zone):
        return value
    if not value:
        return None
    key = value.strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return Zone(key)
    except ValueError:
        return None


def z_index_for(zone: Zone) -> int:
    return ZONE_Z_INDEX[zone]


def contains_keyword(text: str, keywords: Iterable[str]) -> List[str]:
    """Return the keywords that appear in ``text`` as whole words."""

    normalised = normalize_text(text)
    return [keyword for keyword in keywords if re.search(rf"\b{re.escape(keyword)}\b", normalised)]


def normalize_color_name(raw_string: str) -> str:
    """Map a raw color string to a canonical color name."""

    key = raw_string.strip().lower()
    return COLOR_MAP.get(key, key)


def extract_colors(text: str) -> List[str]:
    """Return canonical colors mentioned in free text, in order of appearance."""

    normalised = normalize_text(text)
    found: List[Tuple[int, str]] = []
    for raw in sorted(COLOR_MAP, key=len, reverse=True):
        match = re.search(rf"\b{re.escape(raw)}\b", normalised)
        if match:
            canonical = COLOR_MAP[raw]
            if canonical not in {color for _, color in found}:
                found.append((match.start(), canonical))
            normalised = normalised[: match.start()] + " " * len(raw) + normalised[match.end():]
    return [color for _, color in sorted(found)]


__all__ = [
    "Zone",
    "ZONE_Z_INDEX",
    "ZONE_KEYWORDS",
    "CANONICAL_ZONES",
    "TOP_LAYER_ZONES",
    "BASE_LAYER_KEYWORDS",
    "LAYERING_KEYWORDS",
    "REMOVAL_KEYWORDS",
    "COLOR_MAP",
    "normalize_text",
    "match_zone",
    "classify_zone",
    "parse_zone",
    "z_index_for",
    "contains_keyword",
    "normalize_color_name",
    "extract_colors",
]
