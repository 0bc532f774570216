"""Tests for the HTTP API."""

import logging

import httpx
from fastapi.testclient import TestClient
from openai import BadRequestError, InternalServerError, RateLimitError

from nutriwise.api.app import COPIED_MESSAGE, SAVED_MESSAGE, create_app
from nutriwise.app_logging import LOGGER_NAME, configure_logging
from tests.conftest import NOW


def _client(container) -> TestClient:
    return TestClient(create_app(container))


def _meal() -> dict[str, object]:
    return {
        "items": [
            {
                "name": "Toast",
                "quantity": 2,
                "unit": "slices",
                "calories": 160,
                "protein": 6,
                "carbs": 30,
                "fat": 2,
                "baseCalories": 80,
                "baseProtein": 3,
                "baseCarbs": 15,
                "baseFat": 1,
            }
        ]
    }


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_profile_edit_and_reset(container) -> None:
    client = _client(container)

    response = client.put("/profile", json={"name": "Ana", "goal": "lose_fat"})
    assert response.status_code == 200
    assert response.json()["goal"] == "lose_fat"
    assert response.json()["weightKg"] == 70

    assert client.put("/profile", json={"age": 0}).status_code == 422
    assert client.get("/profile").json()["name"] == "Ana"

    assert client.post("/profile/reset").json()["name"] == "User"


def test_save_food_returns_feedback(container, estimator_client) -> None:
    estimator_client.queue("getInstantFeedback", {"text": "Good carbs!"})

    response = _client(container).post("/logs/food", json=_meal())

    assert response.status_code == 200
    body = response.json()
    assert body["feedback"] == "Good carbs!"
    assert body["entry"]["type"] == "food"
    assert body["entry"]["items"][0]["baseCalories"] == 80


def test_save_note_falls_back_to_saved_message(container) -> None:
    response = _client(container).post("/logs/note", json={"noteContent": "tired"})

    assert response.json()["feedback"] == SAVED_MESSAGE
    assert container.session.logs[0].note_content == "tired"


def test_save_exercise_estimates_calories(container, estimator_client) -> None:
    estimator_client.queue(
        "estimateExerciseCalories", {"calories": 300, "note": "MET 8"}
    )

    response = _client(container).post(
        "/logs/exercise", json={"name": "Run", "durationMinutes": 30}
    )

    assert response.json()["entry"]["exercise"]["caloriesBurned"] == 300


def test_exercise_requires_positive_duration(container) -> None:
    response = _client(container).post(
        "/logs/exercise", json={"name": "Run", "durationMinutes": 0}
    )

    assert response.status_code == 422


def test_edit_copy_rescale_delete(container) -> None:
    client = _client(container)
    entry = client.post("/logs/food", json=_meal()).json()["entry"]

    edited = client.put(
        f"/logs/{entry['id']}", json={"type": "note", "noteContent": "skipped"}
    ).json()["entry"]
    assert edited["id"] == entry["id"]
    assert edited["timestamp"] == entry["timestamp"]
    assert edited["type"] == "note"

    copied = client.post(f"/logs/{entry['id']}/copy").json()
    assert copied["feedback"] == COPIED_MESSAGE
    assert copied["entry"]["id"] != entry["id"]

    food = client.post("/logs/food", json=_meal()).json()["entry"]
    rescaled = client.patch(
        f"/logs/{food['id']}/items/0", json={"quantity": 3}
    ).json()["entry"]
    assert rescaled["items"][0]["calories"] == 240

    assert client.delete(f"/logs/{entry['id']}").status_code == 200
    assert client.delete(f"/logs/{entry['id']}").status_code == 404


def test_history_groups_by_day(container) -> None:
    client = _client(container)
    client.post("/logs/note", json={"noteContent": "a"})
    client.post("/logs/note", json={"noteContent": "b"})

    days = client.get("/logs").json()["days"]

    assert len(days) == 1
    assert days[0]["date"] == NOW.date().isoformat()
    assert [entry["noteContent"] for entry in days[0]["entries"]] == ["b", "a"]


def test_dashboard(container) -> None:
    client = _client(container)
    client.post("/logs/food", json=_meal())
    client.post(
        "/logs/exercise",
        json={"name": "Strength", "durationMinutes": 45, "caloriesBurned": 200},
    )

    body = client.get("/dashboard", params={"day": NOW.date().isoformat()}).json()

    assert body["totals"]["calories"] == 160
    assert body["totals"]["burned"] == 200
    assert body["trainingLoad"] is True
    assert body["targets"]["calorieTarget"] == 2556
    assert body["targets"]["macroTargets"]["protein"] == 112
    assert body["remainingCalories"] == 2556 - 160 + 200
    assert len(body["trend"]) == 7
    assert body["trend"][-1]["calories"] == 160


def test_analysis_failure_is_bad_gateway(container) -> None:
    response = _client(container).post("/analysis", json={"textInput": "soup"})

    assert response.status_code == 502


def test_analysis_returns_items(container, estimator_client) -> None:
    estimator_client.queue(
        "analyzeImageOrText",
        {
            "items": [{"name": "Soup", "quantityAmount": 1, "calories": 120}],
            "clarificationNeeded": False,
        },
    )

    body = _client(container).post("/analysis", json={"textInput": "soup"}).json()

    assert body["items"][0]["baseCalories"] == 120
    assert body["clarification"] is None


def test_refine_failure_keeps_items(container) -> None:
    body = (
        _client(container)
        .post("/analysis/refine", json={**_meal(), "instruction": "one slice"})
        .json()
    )

    assert body["items"][0]["calories"] == 160
    assert body["message"].startswith("Error: ")


def test_exercise_estimate_offline(container) -> None:
    body = (
        _client(container)
        .post(
            "/exercise/estimate",
            json={"name": "Row", "durationMinutes": 30, "intensity": "medium"},
        )
        .json()
    )

    assert body == {"calories": 294.0, "note": "Offline estimate (API unavailable)."}


def test_advice_fallback(container) -> None:
    body = _client(container).post("/advice").json()

    assert body["text"].startswith("Could not generate advice")


def test_chat_flow(container, estimator_client) -> None:
    estimator_client.queue("chatWithNutritionist", {"text": "Eat more fiber."})
    client = _client(container)

    reply = client.post("/chat", json={"text": "Tips?"}).json()["reply"]
    messages = client.get("/chat").json()["messages"]

    assert reply["role"] == "model"
    assert reply["text"] == "Eat more fiber."
    assert [message["role"] for message in messages] == ["model", "user", "model"]

    client.delete("/chat")
    assert client.get("/chat").json()["messages"] == []


def test_backup_round_trip(container) -> None:
    client = _client(container)
    client.post("/logs/note", json={"noteContent": "keep me"})
    document = client.get("/backup").json()

    client.post("/profile/reset")
    container.session.set_logs([])
    response = client.post("/backup", json=document)

    assert response.status_code == 200
    assert container.session.logs[0].note_content == "keep me"


def test_backup_rejects_invalid_document(container) -> None:
    response = _client(container).post("/backup", content=b"{}")

    assert response.status_code == 400
    assert "error" in response.json()


def test_estimator_endpoint(container) -> None:
    client = _client(container)

    ok = client.post(
        "/api/estimator",
        json={"action": "getPersonalizedAdvice", "payload": {"logs": []}},
    )
    bad_action = client.post("/api/estimator", json={"action": "nope", "payload": {}})
    no_body = client.post("/api/estimator", content=b"oops")

    assert ok.json() == {"text": "Nice balanced choice."}
    assert bad_action.status_code == 400
    assert bad_action.json() == {"error": "Invalid action"}
    assert no_body.status_code == 400


def test_estimator_endpoint_without_api_key(container) -> None:
    container.nutritionist_service.client = None

    response = _client(container).post(
        "/api/estimator", json={"action": "getPersonalizedAdvice", "payload": {}}
    )

    assert response.status_code == 500
    assert "API key" in response.json()["error"]


def _openai_response(status_code: int) -> httpx.Response:
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    return httpx.Response(status_code, request=request)


def test_estimator_endpoint_rate_limited(container, nutritionist_client) -> None:
    nutritionist_client.error = RateLimitError(
        "Error code: 429 - rate limit", response=_openai_response(429), body=None
    )

    response = _client(container).post(
        "/api/estimator", json={"action": "getPersonalizedAdvice", "payload": {}}
    )

    assert response.status_code == 429
    assert "rate limit" in response.json()["error"]


def test_estimator_endpoint_overloaded(container, nutritionist_client) -> None:
    nutritionist_client.error = InternalServerError(
        "Error code: 503 - overloaded", response=_openai_response(503), body=None
    )

    response = _client(container).post(
        "/api/estimator", json={"action": "analyzeImageOrText", "payload": {}}
    )

    assert response.status_code == 503


def test_estimator_endpoint_other_llm_error(container, nutritionist_client) -> None:
    nutritionist_client.error = BadRequestError(
        "Error code: 400 - bad schema", response=_openai_response(400), body=None
    )

    response = _client(container).post(
        "/api/estimator", json={"action": "analyzeImageOrText", "payload": {}}
    )

    assert response.status_code == 500
    assert "bad schema" in response.json()["error"]


def test_app_uses_configured_log_level(container) -> None:
    container.settings = container.settings.model_copy(update={"log_level": "DEBUG"})

    try:
        create_app(container)
        assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG
    finally:
        configure_logging(logging.INFO)
