"""Decision tree behaviour for each outfit state."""

from typing import Sequence

from logic.decision_engine import make_decision
from logic.layered_tree import ADD_LAYER_OPTION
from logic.one_piece_tree import BOTTOM_ARCHETYPES, TOP_ARCHETYPES
from logic.tree_helpers import NO_CANDIDATES_QUESTION, position_labels
from models.classification import ExtractedEntities, RequestClassification, RequestType
from models.decision import ClarificationKind, DecisionAction, OptionEffect
from models.garment import GarmentItem
from models.outfit_state import OutfitStateType, compute_outfit_state
from models.taxonomy import LAYERING_KEYWORDS, REMOVAL_KEYWORDS, contains_keyword


def _item(name: str, category: str, **extra) -> GarmentItem:
    return GarmentItem(name=name, category=category, **extra)


def _classification(
    message: str, request_type: RequestType = RequestType.SINGLE_ITEM, garments: Sequence[str] = ()
) -> RequestClassification:
    return RequestClassification(
        type=request_type,
        confidence=0.9,
        entities=ExtractedEntities(
            garments=list(garments),
            layering_keywords=contains_keyword(message, LAYERING_KEYWORDS),
            removal_keywords=contains_keyword(message, REMOVAL_KEYWORDS),
        ),
        message=message,
    )


def _decide(message, current, candidates, request_type=RequestType.SINGLE_ITEM, baseline=None, garments=()):
    return make_decision(
        _classification(message, request_type, garments), compute_outfit_state(current), candidates, baseline
    )


def _names(items):
    return [item.name for item in items]


# Empty ----------------------------------------------------------------------


def test_empty_outfit_adds_candidate_without_regeneration() -> None:
    tee = _item("White T-shirt", "top")
    result = _decide("a white t-shirt", [], [tee])

    assert result.action == DecisionAction.EXECUTE
    assert _names(result.items_to_add) == ["White T-shirt"]
    assert result.items_to_remove == []
    assert not result.should_regenerate_from_scratch


def test_no_candidates_asks_for_more_detail() -> None:
    result = _decide("something nice", [_item("Tee", "top"), _item("Jeans", "bottom")], [])

    assert result.action == DecisionAction.CLARIFY
    assert result.clarification.kind == ClarificationKind.MISSING_INFO
    assert result.clarification.question == NO_CANDIDATES_QUESTION
    assert result.items_to_add == [] and result.items_to_remove == []


# Separates ------------------------------------------------------------------


def test_separates_new_top_replaces_current_top() -> None:
    current = [_item("T-shirt", "top"), _item("Jeans", "bottom")]
    result = _decide("a blouse", current, [_item("Blouse", "top")])

    assert result.action == DecisionAction.EXECUTE
    assert _names(result.items_to_add) == ["Blouse"]
    assert _names(result.items_to_remove) == ["T-shirt"]
    assert result.should_regenerate_from_scratch


def test_separates_layering_keyword_keeps_current_top() -> None:
    current = [_item("Tank", "top"), _item("Jeans", "bottom")]
    result = _decide("layer a shirt over it", current, [_item("Linen shirt", "top")])

    assert result.action == DecisionAction.EXECUTE
    assert result.items_to_remove == []
    assert not result.should_regenerate_from_scratch


def test_separates_bottom_always_swaps() -> None:
    current = [_item("Tee", "top"), _item("Jeans", "bottom")]
    result = _decide("add a skirt", current, [_item("Pleated skirt", "skirt")])

    assert _names(result.items_to_remove) == ["Jeans"]
    assert result.should_regenerate_from_scratch


def test_separates_outerwear_is_added_as_a_layer() -> None:
    current = [_item("Tee", "top"), _item("Jeans", "bottom")]
    result = _decide("a trench coat", current, [_item("Trench", "coat")])

    assert result.action == DecisionAction.EXECUTE
    assert result.items_to_remove == []
    assert not result.should_regenerate_from_scratch


def test_separates_footwear_replaces_same_zone() -> None:
    current = [_item("Tee", "top"), _item("Jeans", "bottom"), _item("Sneakers", "shoes")]
    result = _decide("loafers", current, [_item("Loafers", "loafers")])

    assert _names(result.items_to_remove) == ["Sneakers"]


def test_separates_one_piece_candidate_needs_approval() -> None:
    current = [_item("Tee", "top"), _item("Jeans", "bottom")]
    result = _decide("a slip dress", current, [_item("Slip dress", "dress")])

    assert result.action == DecisionAction.SUGGEST
    assert result.requires_approval
    assert result.should_regenerate_from_scratch
    assert sorted(_names(result.items_to_remove)) == ["Jeans", "Tee"]
    assert "replace both your top and bottom" in result.suggestion


def test_separates_multi_zone_candidates_swap_each_zone() -> None:
    current = [_item("Tee", "top"), _item("Jeans", "bottom"), _item("Sneakers", "shoes")]
    candidates = [_item("Silk blouse", "top"), _item("Trousers", "bottom")]
    result = _decide("an office outfit", current, candidates, RequestType.COMPLETE_OUTFIT)

    assert sorted(_names(result.items_to_remove)) == ["Jeans", "Tee"]
    assert "Sneakers" not in _names(result.items_to_remove)


# One-piece ------------------------------------------------------------------


def test_one_piece_to_top_restores_baseline_bottom() -> None:
    baseline = [_item("White tee", "top"), _item("Black jeans", "bottom")]
    result = _decide("a crop top", [_item("Sundress", "dress")], [_item("Crop top", "top")], baseline=baseline)

    assert result.action == DecisionAction.EXECUTE
    assert _names(result.items_to_add) == ["Crop top", "Black jeans"]
    assert _names(result.items_to_remove) == ["Sundress"]
    assert result.should_regenerate_from_scratch


def test_one_piece_to_top_without_baseline_asks_for_bottom() -> None:
    result = _decide("a crop top", [_item("Sundress", "dress")], [_item("Crop top", "top")])

    assert result.action == DecisionAction.CLARIFY
    assert result.should_regenerate_from_scratch
    context = result.clarification
    assert [option.id for option in context.options] == [option.id for option in BOTTOM_ARCHETYPES]
    assert _names(context.pending_items) == ["Crop top"]
    assert _names(context.pending_removals) == ["Sundress"]


def test_one_piece_to_bottom_always_asks_for_top() -> None:
    baseline = [_item("White tee", "top"), _item("Black jeans", "bottom")]
    result = _decide("a denim skirt", [_item("Maxi dress", "dress")], [_item("Denim skirt", "bottom")], baseline=baseline)

    assert result.action == DecisionAction.CLARIFY
    assert [option.id for option in result.clarification.options] == [option.id for option in TOP_ARCHETYPES]
    assert result.clarification.options[-1].value == "ai_choose"


def test_one_piece_swap_for_another_one_piece() -> None:
    result = _decide("a jumpsuit", [_item("Sundress", "dress"), _item("Sandals", "shoes")], [_item("Jumpsuit", "jumpsuit")])

    assert result.action == DecisionAction.EXECUTE
    assert _names(result.items_to_remove) == ["Sundress"]


def test_one_piece_outerwear_layers_over_dress() -> None:
    result = _decide("a denim jacket", [_item("Sundress", "dress")], [_item("Denim jacket", "outerwear")])

    assert result.action == DecisionAction.EXECUTE
    assert result.items_to_remove == []


def test_one_piece_outerwear_swaps_on_replace_language() -> None:
    current = [_item("Sundress", "dress"), _item("Denim jacket", "outerwear")]
    result = _decide("swap my jacket for a trench", current, [_item("Trench", "coat")])

    assert _names(result.items_to_remove) == ["Denim jacket"]
    assert result.should_regenerate_from_scratch


# Layered ----------------------------------------------------------------------


def _three_layers():
    return [
        _item("Tee", "top", z_index=1),
        _item("Flannel shirt", "top", z_index=2),
        _item("Denim jacket", "outerwear", z_index=3),
    ]


def test_layered_three_layers_asks_which_to_replace() -> None:
    state = compute_outfit_state(_three_layers())
    result = _decide("a leather jacket", _three_layers(), [_item("Leather jacket", "outerwear")])

    assert state.type == OutfitStateType.LAYERED
    assert result.action == DecisionAction.CLARIFY
    options = result.clarification.options
    assert len(options) == 4
    assert [option.target.name for option in options[:3]] == ["Tee", "Flannel shirt", "Denim jacket"]
    assert [option.value for option in options[:3]] == ["Tee", "Flannel shirt", "Denim jacket"]
    assert [option.description for option in options[:3]] == [
        "Swap your inner layer",
        "Swap your middle layer",
        "Swap your outer layer",
    ]
    assert options[-1] == ADD_LAYER_OPTION
    assert result.items_to_add == [] and result.items_to_remove == []


def test_layered_layering_keyword_adds_outermost_layer() -> None:
    result = _decide("throw on a leather jacket", _three_layers(), [_item("Leather jacket", "outerwear")])

    assert result.action == DecisionAction.EXECUTE
    assert result.items_to_remove == []


def test_layered_two_layers_base_layer_replaces_innermost() -> None:
    current = [_item("Tank", "top", z_index=1), _item("Cardigan", "outerwear", z_index=2), _item("Jeans", "bottom")]
    result = _decide("a white tee instead", current, [_item("White tee", "top")])

    assert result.action == DecisionAction.EXECUTE
    assert _names(result.items_to_remove) == ["Tank"]


def test_layered_two_layers_otherwise_asks() -> None:
    current = [_item("Tank", "top", z_index=1), _item("Cardigan", "outerwear", z_index=2), _item("Jeans", "bottom")]
    result = _decide("a blazer", current, [_item("Blazer", "blazer")])

    assert result.action == DecisionAction.CLARIFY
    assert len(result.clarification.options) == 2
    assert all(option.effect == OptionEffect.REPLACE for option in result.clarification.options)


def test_layered_non_layer_zone_uses_same_zone_replace() -> None:
    result = _decide("black boots", _three_layers() + [_item("Sneakers", "shoes")], [_item("Black boots", "boots")])

    assert result.action == DecisionAction.EXECUTE
    assert _names(result.items_to_remove) == ["Sneakers"]


def test_layered_attribute_change_on_top_layers_is_ambiguous() -> None:
    current = _three_layers()
    result = _decide(
        "change the shirt and jacket colour",
        current,
        [_item("Green flannel", "top")],
        RequestType.ATTRIBUTE_MODIFICATION,
        garments=["shirt", "jacket"],
    )

    assert result.action == DecisionAction.CLARIFY
    assert [option.target.name for option in result.clarification.options] == ["Tee", "Flannel shirt", "Denim jacket"]


def test_position_labels() -> None:
    assert position_labels(1) == ["outer"]
    assert position_labels(2) == ["inner", "outer"]
    assert position_labels(4) == ["inner", "middle", "middle", "outer"]
