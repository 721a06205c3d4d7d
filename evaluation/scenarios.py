"""Evaluation scenarios covering each outfit state and the safety rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class EvaluationScenario:
    name: str
    description: str
    message: str
    current_items: List[Dict[str, object]]
    candidate_items: List[Dict[str, object]]
    classification: Dict[str, object]
    expectations: Dict[str, object]
    baseline_items: Optional[List[Dict[str, object]]] = None
    follow_up: Optional[str] = None
    follow_up_expectations: Dict[str, object] = field(default_factory=dict)


def _item(name: str, category: str, **extra: object) -> Dict[str, object]:
    return {"name": name, "category": category, **extra}


def _classified(request_type: str, **entities: object) -> Dict[str, object]:
    return {"type": request_type, "confidence": 0.9, **entities}


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="empty_outfit_add",
        description="Nothing worn yet; the first item is simply added.",
        message="a white t-shirt",
        current_items=[],
        candidate_items=[_item("White T-shirt", "top", colors=["white"])],
        classification=_classified("single_item", garments=["t-shirt"], colors=["white"]),
        expectations={"action": "execute", "add": ["White T-shirt"], "remove": [], "regenerate": False},
    ),
    EvaluationScenario(
        name="separates_top_swap",
        description="A new top with no layering words replaces the current top.",
        message="a blouse",
        current_items=[_item("T-shirt", "top"), _item("Jeans", "bottom")],
        candidate_items=[_item("Blouse", "top")],
        classification=_classified("single_item", garments=["blouse"]),
        expectations={"action": "execute", "add": ["Blouse"], "remove": ["T-shirt"], "regenerate": True},
    ),
    EvaluationScenario(
        name="one_piece_to_top_with_baseline",
        description="A top replacing a dress borrows the bottom from the starting outfit.",
        message="a crop top",
        baseline_items=[_item("White tee", "top"), _item("Black jeans", "bottom")],
        current_items=[_item("Sundress", "dress")],
        candidate_items=[_item("Crop top", "top")],
        classification=_classified("single_item", garments=["crop top"]),
        expectations={
            "action": "execute",
            "add": ["Crop top", "Black jeans"],
            "remove": ["Sundress"],
            "regenerate": True,
        },
    ),
    EvaluationScenario(
        name="layered_ambiguity",
        description="Three layers and no layering words: ask which one to replace.",
        message="a leather jacket",
        current_items=[
            _item("Tee", "top", z_index=1),
            _item("Flannel shirt", "top", z_index=2),
            _item("Denim jacket", "outerwear", z_index=3),
        ],
        candidate_items=[_item("Leather jacket", "outerwear")],
        classification=_classified("single_item", garments=["leather jacket"]),
        expectations={"action": "clarify", "option_count": 4, "regenerate": True},
        follow_up="2",
        follow_up_expectations={
            "action": "execute",
            "add": ["Leather jacket"],
            "remove": ["Flannel shirt"],
            "regenerate": True,
        },
    ),
    EvaluationScenario(
        name="unsafe_removal",
        description="Removing the only item would leave the outfit empty.",
        message="take off my hoodie",
        current_items=[_item("Hoodie", "top")],
        candidate_items=[],
        classification=_classified("removal", garments=["hoodie"], removal_keywords=["take off"]),
        expectations={"action": "clarify", "kind": "conflict", "remove": []},
    ),
    EvaluationScenario(
        name="separates_layering",
        description="Layering words keep the current top and add over it.",
        message="add a cardigan over this",
        current_items=[_item("Tank top", "top"), _item("Skirt", "bottom"), _item("Sandals", "shoes")],
        candidate_items=[_item("Cardigan", "top")],
        classification=_classified("layering", garments=["cardigan"], layering_keywords=["add", "over"]),
        expectations={"action": "execute", "add": ["Cardigan"], "remove": [], "regenerate": False},
    ),
    EvaluationScenario(
        name="style_mood_requires_approval",
        description="Style shifts are proposed and wait for a yes.",
        message="make it more edgy",
        current_items=[_item("Blouse", "top"), _item("Trousers", "bottom")],
        candidate_items=[_item("Band tee", "top"), _item("Leather pants", "bottom")],
        classification=_classified("style_mood", style_descriptors=["edgy"]),
        expectations={"action": "suggest", "requires_approval": True, "applied": False},
        follow_up="yes",
        follow_up_expectations={
            "action": "execute",
            "add": ["Band tee", "Leather pants"],
            "remove": ["Blouse", "Trousers"],
            "regenerate": True,
        },
    ),
    EvaluationScenario(
        name="one_piece_bottom_asks_for_top",
        description="A bottom replacing a dress needs a top, so the stylist asks.",
        message="a denim skirt",
        current_items=[_item("Maxi dress", "dress")],
        candidate_items=[_item("Denim skirt", "bottom")],
        classification=_classified("single_item", garments=["denim skirt"]),
        expectations={"action": "clarify", "option_count": 4, "regenerate": True},
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS"]
