"""HTTP surface of the stylist service."""

from fastapi.testclient import TestClient

from evaluation.harness import StaticJSONBackend
from server.api import create_app
from stylist_app.app import OutfitStylistApp
from stylist_app.config import StylistConfig

OUTFIT = [
    {"name": "White tee", "category": "top"},
    {"name": "Blue jeans", "category": "jeans"},
    {"name": "Sneakers", "category": "sneakers"},
]


def _client() -> TestClient:
    stylist = OutfitStylistApp(
        config=StylistConfig(response_seed=1),
        classifier_backend=StaticJSONBackend({"type": "single_item", "confidence": 0.95}),
    )
    return TestClient(create_app(stylist))


def test_healthcheck_reports_backend_configuration() -> None:
    response = _client().get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "outfit-stylist"
    assert body["backend_configured"] is False


def test_turn_applies_a_swap() -> None:
    client = _client()

    response = client.post(
        "/conversations/demo/turns",
        json={
            "message": "try a striped shirt",
            "current_items": OUTFIT,
            "candidate_items": [{"name": "Striped shirt", "category": "shirt", "colors": ["navy", "white"]}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["action"] == "execute"
    assert body["should_regenerate_from_scratch"] is True
    assert [item["name"] for item in body["items_to_apply"]] == ["Blue jeans", "Sneakers", "Striped shirt"]
    assert body["outfit_state"]["type"] == "separates"


def test_invalid_payload_needs_review() -> None:
    response = _client().post("/conversations/demo/turns", json={"message": "", "current_items": "nope"})

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "needs_review"
    assert {tuple(detail["loc"])[0] for detail in body["details"]} == {"message", "current_items"}


def test_undo_redo_and_export() -> None:
    client = _client()
    client.post(
        "/conversations/demo/turns",
        json={
            "message": "try a striped shirt",
            "current_items": OUTFIT,
            "candidate_items": [{"name": "Striped shirt", "category": "shirt"}],
        },
    )

    undone = client.post("/conversations/demo/undo").json()
    assert [item["name"] for item in undone["items_to_apply"]] == ["White tee", "Blue jeans", "Sneakers"]

    redone = client.post("/conversations/demo/redo").json()
    assert "Striped shirt" in [item["name"] for item in redone["items_to_apply"]]

    exported = client.get("/conversations/demo").json()
    assert exported["conversation_id"] == "demo"
    assert len(exported["history"]) == 2
    assert exported["current_index"] == 1


def test_unknown_conversation_is_not_found() -> None:
    response = _client().get("/conversations/nobody")

    assert response.status_code == 404
