"""Lightweight color harmony helpers for deterministic compatibility checks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Sequence, Tuple

from models.taxonomy import normalize_color_name

logger = logging.getLogger(__name__)

NEUTRAL_COLORS: FrozenSet[str] = frozenset({"black", "white", "gray", "beige", "navy", "brown", "denim"})
BRIGHT_COLORS: FrozenSet[str] = frozenset({"red", "yellow", "orange", "pink", "purple", "turquoise"})

_CLASH_PAIRS = {
    ("red", "pink"),
    ("brown", "black"),
    ("navy", "black"),
}

_COMPLEMENTARY_PAIRS = {
    ("red", "green"),
    ("blue", "orange"),
    ("yellow", "purple"),
    ("pink", "green"),
    ("black", "white"),
}

_COLOR_WHEEL: List[str] = [
    "red",
    "orange",
    "yellow",
    "green",
    "turquoise",
    "blue",
    "indigo",
    "purple",
    "pink",
]

MAX_BRIGHT_COLORS = 2


@dataclass(frozen=True)
class HarmonyResult:
    """Represents the outcome of a harmony evaluation."""

    colors: List[str]
    harmony: str
    clashes: List[Tuple[str, str]]
    bright_colors: List[str]

    @property
    def passed(self) -> bool:
        return self.harmony != "clash"


def _normalise_colors(colors: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for color in colors:
        if not color:
            continue
        key = normalize_color_name(color)
        if key not in seen:
            seen.append(key)
    return seen


def monochrome(color_list: Iterable[str]) -> bool:
    """Return True when all provided colors collapse to a single tone."""

    unique_colors = set(_normalise_colors(color_list))
    result = len(unique_colors) <= 1
    logger.debug("monochrome check %s -> %s", unique_colors, result)
    return result


def _pair_in(color1: str, color2: str, pairs: set) -> bool:
    c1, c2 = normalize_color_name(color1), normalize_color_name(color2)
    if c1 == c2:
        return False
    return (c1, c2) in pairs or (c2, c1) in pairs


def complementary(color1: str, color2: str) -> bool:
    """Return True when the colors form a complementary pair."""

    return _pair_in(color1, color2, _COMPLEMENTARY_PAIRS)


def clashing(color1: str, color2: str) -> bool:
    """Return True when the two colors are a known clash."""

    return _pair_in(color1, color2, _CLASH_PAIRS)


def analogous(colors: Sequence[str]) -> bool:
    """Return True when every chromatic color sits within one step on the wheel."""

    chromatic = [color for color in _normalise_colors(colors) if color in _COLOR_WHEEL]
    if len(chromatic) < 2:
        return False
    positions = sorted(_COLOR_WHEEL.index(color) for color in chromatic)
    return all(later - earlier <= 1 for earlier, later in zip(positions, positions[1:]))


def evaluate_harmony(colors: Iterable[str]) -> HarmonyResult:
    """Classify a color set as monochromatic, complementary, analogous or clash."""

    normalised = _normalise_colors(colors)
    clashes = [
        (first, second)
        for index, first in enumerate(normalised)
        for second in normalised[index + 1 :]
        if clashing(first, second)
    ]
    brights = [color for color in normalised if color in BRIGHT_COLORS]
    chromatic = [color for color in normalised if color not in NEUTRAL_COLORS]

    if clashes or len(brights) > MAX_BRIGHT_COLORS:
        harmony = "clash"
    elif len(chromatic) <= 1:
        harmony = "monochromatic"
    elif any(complementary(a, b) for i, a in enumerate(chromatic) for b in chromatic[i + 1 :]):
        harmony = "complementary"
    elif analogous(chromatic):
        harmony = "analogous"
    else:
        # Several unrelated chromatic colors without a hard clash.
        harmony = "complementary"

    logger.debug("harmony %s -> %s", normalised, harmony)
    return HarmonyResult(colors=normalised, harmony=harmony, clashes=clashes, bright_colors=brights)


__all__ = [
    "NEUTRAL_COLORS",
    "BRIGHT_COLORS",
    "MAX_BRIGHT_COLORS",
    "HarmonyResult",
    "monochrome",
    "complementary",
    "clashing",
    "analogous",
    "evaluate_harmony",
]
