# tests/test_add_event_handler.py
import base64
import json
import os
from unittest.mock import MagicMock, patch

import pytest

from lambdas.add_event import app as add_event_app
from lambdas.common.repositories.local_repository import LocalRepository

INCIDENT_LABEL_ID = 123
ENV = {"SHORTCUT_TOKEN": "test-token", "SHORTCUT_INCIDENT_LABEL_ID": str(INCIDENT_LABEL_ID), "REPO_NAME": "checkout"}

STORY = {
    "id": 10001,
    "name": "Checkout is down",
    "created_at": "2023-01-01T00:00:00Z",
    "completed": False,
    "archived": False,
}


def make_event(webhook) -> dict:
    return {"body": json.dumps(webhook)}


def make_webhook(*actions) -> dict:
    return {"primary_id": 10001, "changed_at": "2023-01-02T00:00:00Z", "actions": list(actions)}


@pytest.fixture
def repository() -> LocalRepository:
    return LocalRepository({'changes': [], 'deployments': [], 'incidents': []})


@pytest.fixture
def story() -> dict:
    return dict(STORY)


@pytest.fixture
def invoke(repository, story):
    """Runs the handler against a local repository and a mocked Shortcut API."""
    def _invoke(event):
        session = MagicMock()
        session.get.return_value.json.return_value = story
        with patch.dict(os.environ, ENV), \
                patch("lambdas.add_event.shortcut_parser.requests.Session", return_value=session), \
                patch("lambdas.add_event.app.create_new_dynamodb_repository", return_value=repository):
            return add_event_app.handler(event, None)
    return _invoke


def test_labeled_webhook_stores_incident(invoke, repository):
    webhook = make_webhook({"action": "update", "changes": {"label_ids": {"adds": [INCIDENT_LABEL_ID]}}})

    response = invoke(make_event(webhook))

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["eventType"] == "incident"
    assert body["status"] == "labeled"
    assert body["product"] == "checkout"
    assert "timeResolved" not in body

    assert len(repository.events) == 1
    assert [i.id for i in repository.incidents] == ["10001"]
    assert repository.changes == []


def test_unlabeled_webhook_resolves_incident(invoke, repository):
    webhook = make_webhook({"action": "update", "changes": {"label_ids": {"removes": [INCIDENT_LABEL_ID]}}})

    response = invoke(make_event(webhook))

    body = json.loads(response["body"])
    assert body["status"] == "unlabeled"
    assert body["eventType"] == "incident"
    assert repository.incidents[0].time_resolved is not None


def test_closed_story_stores_resolved_change(invoke, repository, story):
    story.update(completed=True, completed_at="2023-01-03T00:00:00Z")

    response = invoke(make_event(make_webhook({"action": "update"})))

    body = json.loads(response["body"])
    assert body["status"] == "closed"
    assert body["eventType"] == "change"
    assert repository.changes[0].time_resolved == "1672704000"


def test_closing_labeled_story_resolves_incident(invoke, repository, story):
    invoke(make_event(make_webhook({"action": "create", "label_ids": [INCIDENT_LABEL_ID]})))
    assert [(i.id, i.time_resolved) for i in repository.incidents] == [("10001", None)]

    story.update(completed=True, completed_at="2023-01-03T00:00:00Z", label_ids=[INCIDENT_LABEL_ID])
    response = invoke(make_event(make_webhook({"action": "update"})))

    body = json.loads(response["body"])
    assert body["status"] == "closed"
    assert body["eventType"] == "incident"
    assert [(i.id, i.time_resolved) for i in repository.incidents] == [("10001", "1672704000")]
    assert repository.changes == []


def test_unknown_webhook_is_not_stored(invoke, repository):
    response = invoke(make_event(make_webhook({"action": "delete"})))

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["id"] == "UNKNOWN"
    assert repository.events == []


def test_base64_encoded_body_is_decoded(invoke, repository):
    webhook = make_webhook({"action": "create", "label_ids": []})
    event = {"body": base64.b64encode(json.dumps(webhook).encode()).decode(), "isBase64Encoded": True}

    response = invoke(event)

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["status"] == "opened"
    assert [c.id for c in repository.changes] == ["10001"]


@pytest.mark.parametrize("event", [
    {},
    {"body": ""},
    {"body": "{}"},
    {"body": "not json"},
    {"body": "[1, 2]"},
    {"body": "%%%not-base64", "isBase64Encoded": True},
    {"body": base64.b64encode(b"\xff\xfe{}").decode(), "isBase64Encoded": True},
])
def test_empty_or_invalid_body_returns_400(invoke, event):
    response = invoke(event)
    assert response["statusCode"] == 400
    assert "message" in json.loads(response["body"])


def test_missing_primary_id_returns_400(invoke):
    response = invoke(make_event({"actions": [{"action": "update"}]}))
    assert response["statusCode"] == 400
    assert "Missing ID" in json.loads(response["body"])["message"]


def test_missing_configuration_returns_500(repository):
    with patch.dict(os.environ, {"SHORTCUT_TOKEN": "", "SHORTCUT_INCIDENT_LABEL_ID": "0"}), \
            patch("lambdas.add_event.app.create_new_dynamodb_repository", return_value=repository):
        response = add_event_app.handler(make_event(make_webhook({"action": "update"})), None)

    assert response["statusCode"] == 500
    assert "SHORTCUT_TOKEN" in json.loads(response["body"])["message"]


def test_malformed_settings_return_500():
    with patch.dict(os.environ, {**ENV, "REQUEST_TIMEOUT_SECONDS": "abc"}):
        response = add_event_app.handler(make_event(make_webhook({"action": "update"})), None)

    assert response["statusCode"] == 500
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    assert json.loads(response["body"]) == {"message": "An internal server error occurred."}


def test_unexpected_error_returns_500(invoke, repository):
    repository.add_event = MagicMock(side_effect=RuntimeError("disk full"))

    response = invoke(make_event(make_webhook({"action": "update"})))

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == {"message": "An internal server error occurred."}
