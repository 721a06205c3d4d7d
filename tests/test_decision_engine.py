"""Routing rules of the decision engine."""

import pytest

from logic import decision_engine
from logic.decision_engine import make_decision
from models.classification import ExtractedEntities, RequestClassification, RequestType
from models.decision import ClarificationKind, DecisionAction, OptionEffect
from models.garment import GarmentItem
from models.outfit_state import OutfitStateType, compute_outfit_state


def _item(name: str, category: str, **extra) -> GarmentItem:
    return GarmentItem(name=name, category=category, **extra)


def _classification(message: str, request_type: RequestType, **entities) -> RequestClassification:
    return RequestClassification(
        type=request_type, confidence=0.8, entities=ExtractedEntities(**entities), message=message
    )


def _outfit():
    return [_item("Tee", "top"), _item("Jeans", "bottom"), _item("Sneakers", "shoes")]


def test_dispatch_tables_cover_every_enum_member() -> None:
    assert set(decision_engine._STATE_HANDLERS) == set(OutfitStateType)
    assert set(decision_engine._INTENT_HANDLERS) == set(RequestType)
    decision_engine._assert_exhaustive()


def test_same_inputs_produce_equal_results() -> None:
    classification = _classification("a blouse", RequestType.SINGLE_ITEM, garments=["blouse"])
    state = compute_outfit_state(_outfit())
    candidates = [_item("Blouse", "top")]

    first = make_decision(classification, state, candidates)
    second = make_decision(classification, state, candidates)

    assert first == second
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize(
    "current, candidates, request_type",
    [
        ([], [_item("Tee", "top")], RequestType.SINGLE_ITEM),
        (_outfit(), [_item("Blouse", "top")], RequestType.SINGLE_ITEM),
        (_outfit(), [_item("Cardigan", "outerwear")], RequestType.LAYERING),
        ([_item("Sundress", "dress")], [_item("Wrap dress", "dress")], RequestType.SINGLE_ITEM),
        (_outfit(), [_item("Loafers", "loafers")], RequestType.SINGLE_ITEM),
    ],
)
def test_executes_regenerate_exactly_when_something_is_removed(current, candidates, request_type) -> None:
    result = make_decision(
        _classification("please", request_type), compute_outfit_state(current), candidates
    )

    assert result.action == DecisionAction.EXECUTE
    assert result.should_regenerate_from_scratch == bool(result.items_to_remove)


def test_clarify_results_never_mutate() -> None:
    layered = [
        _item("Tee", "top", z_index=1),
        _item("Shirt", "top", z_index=2),
        _item("Jacket", "outerwear", z_index=3),
        _item("Jeans", "bottom"),
    ]
    result = make_decision(
        _classification("a bomber", RequestType.SINGLE_ITEM), compute_outfit_state(layered), [_item("Bomber", "jacket")]
    )

    assert result.action == DecisionAction.CLARIFY
    assert result.items_to_add == [] and result.items_to_remove == []
    assert result.clarification.pending_items[0].name == "Bomber"


# Style and mood ------------------------------------------------------------


def test_style_mood_is_always_a_suggestion() -> None:
    classification = _classification("make it edgier", RequestType.STYLE_MOOD, style_descriptors=["edgy"])
    candidates = [_item("Band tee", "top"), _item("Leather pants", "bottom")]

    result = make_decision(classification, compute_outfit_state(_outfit()), candidates)

    assert result.action == DecisionAction.SUGGEST
    assert result.requires_approval
    assert result.should_regenerate_from_scratch
    assert sorted(item.name for item in result.items_to_remove) == ["Jeans", "Tee"]
    assert result.clarification.kind == ClarificationKind.CONFIRMATION
    assert "edgy" in result.suggestion


def test_style_mood_without_candidates_still_suggests() -> None:
    classification = _classification("something cozier", RequestType.STYLE_MOOD, style_descriptors=["cozy"])
    result = make_decision(classification, compute_outfit_state(_outfit()), [])

    assert result.action == DecisionAction.SUGGEST
    assert result.items_to_add == []


# Removal ---------------------------------------------------------------------


def test_removal_of_named_item() -> None:
    current = _outfit() + [_item("Scarf", "scarf")]
    classification = _classification("remove the scarf", RequestType.REMOVAL, garments=["scarf"])

    result = make_decision(classification, compute_outfit_state(current), [])

    assert result.action == DecisionAction.EXECUTE
    assert [item.name for item in result.items_to_remove] == ["Scarf"]
    assert result.should_regenerate_from_scratch


def test_removal_by_zone_reference() -> None:
    current = _outfit() + [_item("Denim jacket", "outerwear")]
    classification = _classification("take off the outerwear", RequestType.REMOVAL)

    result = make_decision(classification, compute_outfit_state(current), [])

    assert [item.name for item in result.items_to_remove] == ["Denim jacket"]


def test_removal_that_would_empty_the_outfit_asks_first() -> None:
    classification = _classification("take off my hoodie", RequestType.REMOVAL, garments=["hoodie"])
    result = make_decision(classification, compute_outfit_state([_item("Hoodie", "top")]), [])

    assert result.action == DecisionAction.CLARIFY
    assert result.clarification.kind == ClarificationKind.CONFLICT
    assert [option.effect for option in result.clarification.options] == [
        OptionEffect.CHOOSE_GARMENT,
        OptionEffect.KEEP,
    ]
    assert result.items_to_remove == []


def test_removal_with_unknown_target_lists_worn_items() -> None:
    classification = _classification("remove the gloves", RequestType.REMOVAL, garments=["gloves"])
    result = make_decision(classification, compute_outfit_state(_outfit()), [])

    assert result.action == DecisionAction.CLARIFY
    assert [option.label for option in result.clarification.options] == ["Tee", "Jeans", "Sneakers"]
    assert all(option.effect == OptionEffect.REMOVE for option in result.clarification.options)


def test_removal_from_empty_outfit() -> None:
    classification = _classification("remove everything", RequestType.REMOVAL)
    result = make_decision(classification, compute_outfit_state([]), [])

    assert result.action == DecisionAction.CLARIFY
    assert result.clarification.kind == ClarificationKind.MISSING_INFO


# Attribute modification ---------------------------------------------------


def test_attribute_change_on_single_named_item() -> None:
    classification = _classification("make the jeans black", RequestType.ATTRIBUTE_MODIFICATION, garments=["jeans"])
    result = make_decision(classification, compute_outfit_state(_outfit()), [_item("Black jeans", "bottom")])

    assert result.action == DecisionAction.EXECUTE
    assert [item.name for item in result.items_to_remove] == ["Jeans"]


def test_attribute_change_with_unclear_target_asks() -> None:
    classification = _classification("make it blue", RequestType.ATTRIBUTE_MODIFICATION)
    result = make_decision(classification, compute_outfit_state(_outfit()), [_item("Blue tee", "top")])

    assert result.action == DecisionAction.CLARIFY
    assert len(result.clarification.options) == 3
    assert result.clarification.pending_items[0].name == "Blue tee"


def test_attribute_change_without_a_resolved_garment_asks_for_it() -> None:
    classification = _classification("make it blue", RequestType.ATTRIBUTE_MODIFICATION)
    result = make_decision(classification, compute_outfit_state(_outfit()), [])

    assert result.action == DecisionAction.CLARIFY
    assert result.clarification.kind == ClarificationKind.MISSING_INFO
    assert result.clarification.options == []
    assert result.items_to_remove == []


def test_layered_attribute_change_without_a_resolved_garment_asks_for_it() -> None:
    layered = [_item("Tee", "top", z_index=1), _item("Flannel shirt", "top", z_index=2), _item("Jeans", "bottom")]
    classification = _classification(
        "make the tee and shirt darker", RequestType.ATTRIBUTE_MODIFICATION, garments=["tee", "shirt"]
    )
    result = make_decision(classification, compute_outfit_state(layered), [])

    assert result.action == DecisionAction.CLARIFY
    assert result.clarification.kind == ClarificationKind.MISSING_INFO
    assert all(option.effect != OptionEffect.REPLACE for option in result.clarification.options)
