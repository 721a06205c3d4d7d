"""Advisory compatibility checks over a proposed outfit.

Each check is deterministic and independent. Results never block a decision;
they are surfaced in the response text and in logs.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from models.color_theory import evaluate_harmony
from models.garment import GarmentItem
from models.taxonomy import Zone, extract_colors, normalize_text

logger = logging.getLogger(__name__)

FORMALITY_KEYWORDS: Dict[int, List[str]] = {
    5: ["suit", "tuxedo", "gown", "evening dress", "dress shoes", "oxfords"],
    4: ["blazer", "dress pants", "dress shirt", "pencil skirt", "heels", "loafers"],
    3: ["chinos", "blouse", "cardigan", "midi skirt", "ankle boots", "flats"],
    2: ["jeans", "t-shirt", "tee", "sneakers", "sandals"],
    1: ["sweatpants", "hoodie", "sweatshirt", "athletic", "gym", "joggers"],
}
DEFAULT_FORMALITY = 2

PATTERN_KEYWORDS: Dict[str, List[str]] = {
    "stripes": ["stripe", "striped", "pinstripe"],
    "polka_dots": ["polka dot", "polka-dot", "dotted"],
    "floral": ["floral", "flower"],
    "geometric": ["geometric", "plaid", "check", "checked", "houndstooth", "argyle"],
    "animal_print": ["animal print", "leopard", "zebra", "snake", "snakeskin", "cheetah"],
}
BUSY_PATTERNS = frozenset({"floral", "geometric", "animal_print"})

SEASON_KEYWORDS: Dict[str, List[str]] = {
    "summer": ["shorts", "tank", "sandals", "linen", "sundress", "crop top", "flip flops"],
    "winter": ["coat", "puffer", "parka", "wool", "boots", "beanie", "scarf", "turtleneck", "gloves"],
    "fall": ["cardigan", "flannel", "ankle boots", "trench", "corduroy"],
    "spring": ["light jacket", "floral", "pastel", "trench"],
}
_OPPOSITE_SEASONS = {("summer", "winter"), ("winter", "summer")}


@dataclass(frozen=True)
class CompatibilityCheck:
    """Outcome of one advisory check."""

    check: str
    passed: bool
    message: str
    issues: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check": self.check,
            "passed": self.passed,
            "message": self.message,
            "issues": list(self.issues),
            "details": dict(self.details),
        }


def _item_text(item: GarmentItem) -> str:
    return normalize_text(f"{item.name} {item.category} {item.pattern or ''}")


def _has_keyword(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}s?\b", text) is not None


def formality_level(item: GarmentItem) -> int:
    """Formality on a 1 (athleisure) to 5 (black tie) scale."""

    text = _item_text(item)
    for level in (5, 4, 3, 1, 2):
        if any(_has_keyword(text, keyword) for keyword in FORMALITY_KEYWORDS[level]):
            return level
    return DEFAULT_FORMALITY


def check_formality(items: Sequence[GarmentItem]) -> CompatibilityCheck:
    levels = {item.name: formality_level(item) for item in items}
    if not levels:
        return CompatibilityCheck("formality", True, "Nothing to compare yet.")
    highest, lowest = max(levels.values()), min(levels.values())
    formal = [name for name, level in levels.items() if level >= 4]
    casual = [name for name, level in levels.items() if level <= 2]
    details = {"levels": levels, "spread": highest - lowest}
    if highest - lowest >= 2 and formal and casual:
        issue = f"{', '.join(formal)} is much dressier than {', '.join(casual)}"
        return CompatibilityCheck(
            "formality",
            False,
            "Mixing very formal and very casual pieces can look unintentional.",
            issues=[issue],
            details=details,
        )
    return CompatibilityCheck("formality", True, "Formality levels work together.", details=details)


def _item_colors(item: GarmentItem) -> List[str]:
    return list(item.colors) or extract_colors(item.name)


def check_colors(items: Sequence[GarmentItem]) -> CompatibilityCheck:
    colors: List[str] = []
    for item in items:
        colors.extend(_item_colors(item))
    harmony = evaluate_harmony(colors)
    details = {"colors": harmony.colors, "harmony": harmony.harmony}
    if harmony.passed:
        return CompatibilityCheck("color", True, f"Colors read as {harmony.harmony}.", details=details)
    issues = [f"{first} and {second} clash" for first, second in harmony.clashes]
    if len(harmony.bright_colors) > 2:
        issues.append(f"too many bright colors: {', '.join(harmony.bright_colors)}")
    return CompatibilityCheck(
        "color",
        False,
        "Some of these colors fight each other.",
        issues=issues,
        details=details,
    )


def detect_pattern(item: GarmentItem) -> Optional[str]:
    text = _item_text(item)
    for pattern, keywords in PATTERN_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return pattern
    return None


def check_patterns(items: Sequence[GarmentItem]) -> CompatibilityCheck:
    patterns = {item.name: detect_pattern(item) for item in items}
    busy = [(name, pattern) for name, pattern in patterns.items() if pattern in BUSY_PATTERNS]
    details = {"patterns": {name: pattern for name, pattern in patterns.items() if pattern}}
    if len(busy) >= 2:
        issues = [f"{name} ({pattern})" for name, pattern in busy]
        return CompatibilityCheck(
            "pattern",
            False,
            "Two busy patterns compete for attention.",
            issues=issues,
            details=details,
        )
    return CompatibilityCheck("pattern", True, "Patterns are balanced.", details=details)


def item_seasons(item: GarmentItem) -> List[str]:
    text = _item_text(item)
    return [season for season, keywords in SEASON_KEYWORDS.items() if any(_has_keyword(text, kw) for kw in keywords)]


def check_seasonal(items: Sequence[GarmentItem]) -> CompatibilityCheck:
    per_item = {item.name: item_seasons(item) for item in items}
    counts = Counter(season for seasons in per_item.values() for season in seasons)
    dominant = counts.most_common(1)[0][0] if counts else None
    issues: List[str] = []

    if dominant:
        for name, seasons in per_item.items():
            if seasons and dominant not in seasons and any((dominant, s) in _OPPOSITE_SEASONS for s in seasons):
                issues.append(f"{name} is a {'/'.join(seasons)} piece in a {dominant} outfit")

    texts = [_item_text(item) for item in items]
    if any(_has_keyword(t, "coat") or _has_keyword(t, "puffer") for t in texts) and any(
        _has_keyword(t, "shorts") for t in texts
    ):
        issues.append("a heavy coat with shorts")
    if any(_has_keyword(t, "tank") for t in texts) and any(_has_keyword(t, "scarf") for t in texts):
        issues.append("a tank top with a scarf")

    details = {"dominant_season": dominant, "seasons": per_item}
    if issues:
        return CompatibilityCheck(
            "seasonal",
            False,
            "Some pieces belong to different seasons.",
            issues=issues,
            details=details,
        )
    return CompatibilityCheck("seasonal", True, "Pieces suit the same season.", details=details)


def check_compatibility(items: Sequence[GarmentItem]) -> List[CompatibilityCheck]:
    """Run every advisory check over the proposed item list."""

    garments = [item for item in items if item.zone != Zone.ACCESSORIES]
    results = [
        check_formality(garments),
        check_colors(items),
        check_patterns(items),
        check_seasonal(items),
    ]
    failed = [result.check for result in results if not result.passed]
    if failed:
        logger.info("compatibility warnings: %s", failed)
    return results


def compatibility_warnings(results: Sequence[CompatibilityCheck]) -> List[str]:
    warnings: List[str] = []
    for result in results:
        if not result.passed:
            warnings.extend(result.issues or [result.message])
    return warnings


__all__ = [
    "FORMALITY_KEYWORDS",
    "CompatibilityCheck",
    "formality_level",
    "check_formality",
    "check_colors",
    "detect_pattern",
    "check_patterns",
    "item_seasons",
    "check_seasonal",
    "check_compatibility",
    "compatibility_warnings",
]
