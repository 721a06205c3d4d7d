"""User style profile and preference tracking."""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from models.garment import GarmentItem
from models.taxonomy import normalize_text

STYLE_PREFERENCES = {
    "casual": "casual",
    "formal": "formal",
    "edgy": "edgy",
    "bohemian": "bohemian",
    "smart casual": "smart_casual",
    "streetwear": "streetwear",
}


class Interaction(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    MODIFIED = "modified"


_WEIGHTS = {
    Interaction.ACCEPTED: 1.0,
    Interaction.REJECTED: -0.5,
    Interaction.MODIFIED: 0.5,
}


@dataclass
class StyleProfile:
    user_id: str
    color_preferences: Dict[str, float] = field(default_factory=dict)
    brand_affinities: Dict[str, float] = field(default_factory=dict)
    preferred_categories: Dict[str, float] = field(default_factory=dict)
    avoided_items: List[str] = field(default_factory=list)
    favorite_colors: List[str] = field(default_factory=list)
    style_preference: Optional[str] = None


class StylePreferenceTracker:
    """Simple JSON-backed style profile store.

    Accepted outfits weigh +1, modified ones +0.5 and rejected ones -0.5 for
    colors and brands. Categories only accumulate from accepted outfits.
    """

    def __init__(self, base_dir: str = "data/preferences") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _profile_path(self, user_id: str) -> Path:
        return self.base_dir / f"{user_id}.json"

    def get_profile(self, user_id: str) -> StyleProfile:
        path = self._profile_path(user_id)
        if not path.exists():
            return StyleProfile(user_id=user_id)
        data = json.loads(path.read_text())
        return StyleProfile(**{**data, "user_id": user_id})

    def _save(self, profile: StyleProfile) -> StyleProfile:
        self._profile_path(profile.user_id).write_text(json.dumps(asdict(profile), indent=2))
        return profile

    def track_interaction(
        self, user_id: str, items: Iterable[GarmentItem], action: Interaction
    ) -> StyleProfile:
        profile = self.get_profile(user_id)
        weight = _WEIGHTS[action]
        colors = {color for item in items for color in item.colors}
        brands = {item.brand for item in items if item.brand}
        categories = {item.zone.value for item in items}

        for color in sorted(colors):
            profile.color_preferences[color] = profile.color_preferences.get(color, 0.0) + weight
        for brand in sorted(brands):
            profile.brand_affinities[brand] = profile.brand_affinities.get(brand, 0.0) + weight
        if action == Interaction.ACCEPTED:
            for category in sorted(categories):
                profile.preferred_categories[category] = profile.preferred_categories.get(category, 0.0) + 1
        return self._save(profile)

    def track_style_transformation(self, user_id: str, target_style: str) -> StyleProfile:
        profile = self.get_profile(user_id)
        profile.style_preference = STYLE_PREFERENCES.get(normalize_text(target_style), "casual")
        return self._save(profile)

    def add_avoided_item(self, user_id: str, item_name: str) -> StyleProfile:
        profile = self.get_profile(user_id)
        if item_name not in profile.avoided_items:
            profile.avoided_items.append(item_name)
        return self._save(profile)

    def add_favorite_color(self, user_id: str, color: str) -> StyleProfile:
        profile = self.get_profile(user_id)
        if color not in profile.favorite_colors:
            profile.favorite_colors.append(color)
        return self._save(profile)

    def top_colors(self, user_id: str, limit: int = 3) -> List[str]:
        ranked = sorted(self.get_profile(user_id).color_preferences.items(), key=lambda kv: (-kv[1], kv[0]))
        return [color for color, weight in ranked[:limit] if weight > 0]


__all__ = ["Interaction", "StyleProfile", "StylePreferenceTracker"]
