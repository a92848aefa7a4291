import json

import pytest

from fastapi.testclient import TestClient

from formlytics.config import Settings
from formlytics.store import FormStore


# --- Canned data, as stored on disk ---

FORM_ID = "form123"
OWNER_ID = "user1"

QUESTION_COLOR = {
    "id": "q_color", "formId": FORM_ID, "type": "MULTIPLE_CHOICE",
    "title": "Favorite color?", "required": True, "order": 0,
    "options": {"choices": ["Red", "Blue", "Green"]},
}
QUESTION_RATING = {
    "id": "q_rating", "formId": FORM_ID, "type": "LINEAR_SCALE",
    "title": "How satisfied are you?", "order": 1,
    "options": {"min": 1, "max": 5, "step": 1},
}
QUESTION_TOOLS = {
    "id": "q_tools", "formId": FORM_ID, "type": "CHECKBOXES",
    "title": "Tools you own", "order": 2,
    "options": {"choices": ["Hammer", "Saw"]},
}
QUESTION_COMMENT = {
    "id": "q_comment", "formId": FORM_ID, "type": "LONG_ANSWER",
    "title": "Comments", "order": 3,
}

API_FORM = {
    "id": FORM_ID,
    "title": "Customer survey",
    "userId": OWNER_ID,
    "status": "PUBLISHED",
    "allowMultiple": True,
    # Deliberately out of order; the store sorts by "order"
    "questions": [QUESTION_COMMENT, QUESTION_TOOLS, QUESTION_COLOR, QUESTION_RATING],
}


def _answer(response_id: str, question_id: str, value, n: int) -> dict:
    return {"id": f"{response_id}_a{n}", "responseId": response_id, "questionId": question_id, "value": value}


API_RESPONSES = [
    {
        "id": "r1", "formId": FORM_ID, "email": "alice@example.com", "ipAddress": "10.0.0.1",
        "startedAt": "2025-01-01T10:00:00Z", "completedAt": "2025-01-01T10:01:00Z",
        "answers": [
            _answer("r1", "q_color", "Red", 1),
            _answer("r1", "q_rating", 4, 2),
            _answer("r1", "q_tools", ["Hammer", "Saw"], 3),
            _answer("r1", "q_comment", 'She said "hi"', 4),
        ],
    },
    {
        "id": "r2", "formId": FORM_ID, "ipAddress": "10.0.0.2",
        "startedAt": "2025-01-01T12:00:00Z", "completedAt": "2025-01-01T12:03:00Z",
        "answers": [
            _answer("r2", "q_color", "Blue", 1),
            _answer("r2", "q_rating", "5", 2),
            _answer("r2", "q_tools", ["Saw"], 3),
        ],
    },
    {
        "id": "r3", "formId": FORM_ID, "email": "carol@example.com", "ipAddress": "10.0.0.3",
        "startedAt": "2025-01-03T09:00:00Z", "completedAt": "2025-01-03T09:02:00Z",
        "answers": [
            _answer("r3", "q_color", "Red", 1),
            _answer("r3", "q_rating", 9, 2),
            _answer("r3", "q_comment", "ok", 3),
        ],
    },
    {
        "id": "r4", "formId": FORM_ID, "ipAddress": "10.0.0.4",
        "startedAt": "2025-01-04T00:00:00Z",
        "answers": [
            _answer("r4", "q_color", "Purple", 1),
        ],
    },
]

API_DATA = {
    "forms": {FORM_ID: API_FORM},
    "responses": {FORM_ID: API_RESPONSES},
}


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "formlytics.json"
    path.write_text(json.dumps(API_DATA))
    return path


@pytest.fixture
def form_store(data_file, mocker):
    """FormStore over a seeded temp file, wired in as the store every service uses."""
    mocker.patch("formlytics.store.get_settings", return_value=Settings(data_file=data_file))
    return FormStore(data_file)


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from formlytics.main import api
    return TestClient(api)
