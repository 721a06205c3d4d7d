"""Zone taxonomy, garment normalisation and outfit state classification."""

import pytest

from models.garment import GarmentItem, contains_item, from_raw
from models.outfit_state import (
    OutfitStateType,
    classify_state_type,
    compute_outfit_state,
    degraded_state,
    innermost_layer,
    outermost_layer,
)
from models.taxonomy import (
    CANONICAL_ZONES,
    ZONE_Z_INDEX,
    Zone,
    classify_zone,
    contains_keyword,
    extract_colors,
    match_zone,
    parse_zone,
)


@pytest.mark.parametrize(
    "text, zone",
    [
        ("Jean jacket", Zone.OUTERWEAR),
        ("Shirt dress", Zone.ONE_PIECE),
        ("dress shoes", Zone.FOOTWEAR),
        ("Sweater vest", Zone.TOP),
        ("high-waisted jeans", Zone.BOTTOM),
        ("Black ankle boots", Zone.FOOTWEAR),
        ("Sundress", Zone.ONE_PIECE),
        ("leather belt", Zone.ACCESSORIES),
    ],
)
def test_match_zone_prefers_the_most_specific_keyword(text: str, zone: Zone) -> None:
    assert match_zone(text) == zone


def test_unknown_category_falls_back_to_accessories() -> None:
    assert match_zone("mystery object") is None
    assert classify_zone("mystery object") == Zone.ACCESSORIES
    assert classify_zone(None) == Zone.ACCESSORIES


def test_parse_zone_accepts_labels_and_rejects_free_text() -> None:
    assert parse_zone("one-piece") == Zone.ONE_PIECE
    assert parse_zone(Zone.TOP) == Zone.TOP
    assert parse_zone("a nice jacket") is None


def test_z_index_stacking_order() -> None:
    ordered = sorted(ZONE_Z_INDEX, key=ZONE_Z_INDEX.get, reverse=True)
    assert ordered == [
        Zone.OUTERWEAR,
        Zone.TOP,
        Zone.ONE_PIECE,
        Zone.BOTTOM,
        Zone.FOOTWEAR,
        Zone.ACCESSORIES,
    ]
    assert CANONICAL_ZONES == (Zone.TOP, Zone.BOTTOM, Zone.FOOTWEAR)


def test_keyword_scan_uses_word_boundaries() -> None:
    assert contains_keyword("Add a cardigan over this", ["add", "over"]) == ["add", "over"]
    assert contains_keyword("a leather jacket", ["over", "add"]) == []


def test_extract_colors_canonicalises_and_keeps_order() -> None:
    assert extract_colors("navy blue blazer with an ivory shirt") == ["navy", "white"]


def test_garment_derives_zone_and_z_index_from_category_then_name() -> None:
    from_category = GarmentItem(name="Oversized thing", category="hoodie")
    from_name = GarmentItem(name="Denim jacket")
    explicit = GarmentItem(name="Layer", category="top", z_index=2)

    assert from_category.zone == Zone.TOP
    assert from_category.z_index == ZONE_Z_INDEX[Zone.TOP]
    assert from_name.zone == Zone.OUTERWEAR
    assert explicit.z_index == 2


def test_from_raw_accepts_camel_case_and_single_color() -> None:
    item = from_raw({"title": "Red skirt", "category": "bottom", "zIndex": 5, "color": "Burgundy"})

    assert item.name == "Red skirt"
    assert item.zone == Zone.BOTTOM
    assert item.z_index == 5
    assert item.colors == ["red"]

    with pytest.raises(ValueError):
        from_raw({"brand": "Acme"})


def test_items_match_by_zone_and_name() -> None:
    items = [GarmentItem(name="White Tee", category="top")]
    assert contains_item(items, GarmentItem(name="white tee", category="t-shirt"))
    assert not contains_item(items, GarmentItem(name="White Tee", category="dress"))


def _items(*pairs):
    return [GarmentItem(name=name, category=category) for name, category in pairs]


@pytest.mark.parametrize(
    "pairs, expected",
    [
        ((), OutfitStateType.EMPTY),
        ((("Sundress", "dress"),), OutfitStateType.ONE_PIECE),
        ((("Sundress", "dress"), ("Sandals", "shoes")), OutfitStateType.ONE_PIECE),
        ((("Tee", "top"), ("Jeans", "bottom")), OutfitStateType.SEPARATES),
        ((("Tee", "top"), ("Jeans", "bottom"), ("Sneakers", "shoes")), OutfitStateType.SEPARATES),
        ((("Tee", "top"), ("Jeans", "bottom"), ("Blazer", "outerwear")), OutfitStateType.LAYERED),
        ((("Tee", "top"), ("Shirt", "top"), ("Jeans", "bottom")), OutfitStateType.LAYERED),
        ((("Tee", "top"), ("Jeans", "bottom"), ("Tote", "bag")), OutfitStateType.LAYERED),
        ((("Hoodie", "top"),), OutfitStateType.EMPTY),
        ((("Tee", "top"), ("Sneakers", "shoes")), OutfitStateType.EMPTY),
        ((("Tee", "top"), ("Flannel", "top"), ("Denim jacket", "outerwear")), OutfitStateType.LAYERED),
        ((("Tank", "top"), ("Cardigan", "outerwear")), OutfitStateType.LAYERED),
    ],
)
def test_state_type_rules(pairs, expected) -> None:
    assert classify_state_type(_items(*pairs)) == expected


def test_state_groups_zones_and_counts_layers() -> None:
    items = [
        GarmentItem(name="Denim jacket", category="outerwear", z_index=3),
        GarmentItem(name="Flannel", category="top", z_index=2),
        GarmentItem(name="Tee", category="top", z_index=1),
        GarmentItem(name="Jeans", category="bottom"),
    ]
    state = compute_outfit_state(items)

    assert state.type == OutfitStateType.LAYERED
    assert [item.name for item in state.in_zone(Zone.TOP)] == ["Tee", "Flannel"]
    assert state.layer_count == 3
    assert [item.name for item in state.top_layers()] == ["Tee", "Flannel", "Denim jacket"]
    assert innermost_layer(items).name == "Tee"
    assert outermost_layer(items).name == "Denim jacket"
    assert state.missing_zones == (Zone.FOOTWEAR,)
    assert not state.is_complete


def test_one_piece_only_needs_footwear() -> None:
    state = compute_outfit_state(_items(("Sundress", "dress"), ("Sandals", "sandals")))
    assert state.is_complete
    assert state.missing_zones == ()


def test_degraded_state_reports_every_canonical_zone_missing() -> None:
    state = degraded_state()
    assert state.type == OutfitStateType.EMPTY
    assert state.items == ()
    assert state.missing_zones == CANONICAL_ZONES
    assert state.degraded
