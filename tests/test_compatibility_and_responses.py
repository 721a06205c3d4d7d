"""Advisory compatibility checks and response text."""

import random

from logic.compatibility import (
    check_colors,
    check_compatibility,
    check_formality,
    check_patterns,
    check_seasonal,
    compatibility_warnings,
    formality_level,
)
from logic.responses import (
    FOLLOW_UP_PROMPTS,
    clarification_message,
    generate_response,
    is_redo_command,
    is_undo_command,
    removal_message,
)
from models.classification import RequestType
from models.color_theory import evaluate_harmony
from models.decision import (
    ClarificationContext,
    ClarificationKind,
    ClarificationOption,
    DecisionAction,
    DecisionResult,
    OptionEffect,
)
from models.garment import GarmentItem
from models.outfit_state import compute_outfit_state


def _item(name: str, category: str, **extra) -> GarmentItem:
    return GarmentItem(name=name, category=category, **extra)


def test_color_harmony_labels() -> None:
    assert evaluate_harmony(["black", "white"]).harmony == "monochromatic"
    assert evaluate_harmony(["red", "green"]).harmony == "complementary"
    assert evaluate_harmony(["yellow", "green"]).harmony == "analogous"
    clash = evaluate_harmony(["navy", "black"])
    assert clash.harmony == "clash" and not clash.passed
    assert evaluate_harmony(["red", "yellow", "orange"]).harmony == "clash"


def test_formality_spread_is_flagged() -> None:
    suit = _item("Wool suit", "outerwear")
    hoodie = _item("Grey hoodie", "top")
    sneakers = _item("Sneakers", "shoes")

    assert formality_level(suit) == 5
    assert formality_level(hoodie) == 1
    assert formality_level(_item("Plain thing", "top")) == 2
    assert not check_formality([suit, hoodie]).passed
    assert check_formality([hoodie, sneakers]).passed


def test_color_check_reads_names_when_colors_are_missing() -> None:
    result = check_colors([_item("Navy blazer", "blazer"), _item("Black trousers", "bottom")])

    assert not result.passed
    assert result.issues == ["navy and black clash"]


def test_two_busy_patterns_compete() -> None:
    result = check_patterns([_item("Floral blouse", "top"), _item("Plaid skirt", "skirt")])
    assert not result.passed
    assert check_patterns([_item("Floral blouse", "top"), _item("Striped skirt", "skirt")]).passed


def test_seasonal_mismatch() -> None:
    result = check_seasonal([_item("Puffer coat", "outerwear"), _item("Denim shorts", "shorts")])
    assert not result.passed
    assert "a heavy coat with shorts" in result.issues


def test_compatibility_warnings_are_advisory() -> None:
    items = [_item("Tank top", "top"), _item("Wool scarf", "scarf"), _item("Jeans", "bottom")]
    results = check_compatibility(items)

    assert [result.check for result in results] == ["formality", "color", "pattern", "seasonal"]
    assert "a tank top with a scarf" in compatibility_warnings(results)


def test_undo_and_redo_commands_are_exact_phrases() -> None:
    assert is_undo_command("Undo")
    assert is_undo_command("go back!")
    assert not is_undo_command("undo the jacket and add a coat")
    assert is_redo_command("redo")
    assert not is_redo_command("next outfit please")


def test_only_explicit_history_commands_count_while_a_question_waits() -> None:
    assert is_undo_command("previous")
    assert not is_undo_command("previous", explicit_only=True)
    assert is_undo_command("Undo", explicit_only=True)
    assert not is_redo_command("next", explicit_only=True)
    assert is_redo_command("redo!", explicit_only=True)


def test_removal_message_lists_what_is_left() -> None:
    text = removal_message([_item("Scarf", "scarf")], [_item("Tee", "top"), _item("Jeans", "bottom")])
    assert text == "Removed Scarf. Still wearing: Tee and Jeans."


def test_clarification_message_numbers_options() -> None:
    context = ClarificationContext(
        kind=ClarificationKind.AMBIGUOUS,
        question="Which layer do you mean?",
        options=[
            ClarificationOption(id="a", label="Replace Tee", value="replace_inner", effect=OptionEffect.REPLACE),
            ClarificationOption(
                id="b",
                label="Add as new layer",
                value="add_layer",
                effect=OptionEffect.ADD_LAYER,
                description="keep everything",
            ),
        ],
    )
    assert clarification_message(context) == (
        "Which layer do you mean?\n1. Replace Tee\n2. Add as new layer (keep everything)"
    )


def test_execute_response_is_reproducible_without_a_seed() -> None:
    blouse = _item("Blouse", "top")
    state = compute_outfit_state([blouse, _item("Jeans", "bottom"), _item("Flats", "flats")])
    decision = DecisionResult(
        action=DecisionAction.EXECUTE,
        items_to_add=[blouse],
        items_to_remove=[_item("Tee", "top")],
        should_regenerate_from_scratch=True,
    )

    first = generate_response(RequestType.SINGLE_ITEM, state, [blouse], decision=decision)
    second = generate_response(RequestType.SINGLE_ITEM, state, [blouse], decision=decision)

    assert first == second
    assert first == f"Done! Swapped Tee for Blouse. {FOLLOW_UP_PROMPTS[0]}"


def test_seeded_responses_repeat_for_the_same_seed() -> None:
    state = compute_outfit_state([_item("Blouse", "top"), _item("Jeans", "bottom"), _item("Flats", "flats")])
    texts = {
        generate_response(RequestType.LAYERING, state, [], rng=random.Random(42))
        for _ in range(3)
    }
    assert len(texts) == 1


def test_incomplete_outfit_prompts_for_missing_zone() -> None:
    tee = _item("Tee", "top")
    text = generate_response(RequestType.SINGLE_ITEM, compute_outfit_state([tee]), [tee])
    assert text.endswith("Should we find a bottom to go with it?")
