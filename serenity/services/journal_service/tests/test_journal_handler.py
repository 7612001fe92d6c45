"""Tests for the /journal endpoints."""
from unittest.mock import MagicMock

import pytest
from flask import Flask

from serenity.services.auth_service import Authenticator, AuthUser, SessionTokenIssuer
from serenity.services.journal_service.handler import create_journal_blueprint
from serenity.services.journal_service.prompts import ReflectionPrompts
from serenity.shared.database import NotFoundError, OwnershipError, StoreUnavailableError
from serenity.shared.utils import configure_pii_salt

SECRET = "session_secret_that_is_at_least_32_characters"


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def issuer():
    return SessionTokenIssuer(SECRET)


@pytest.fixture
def journal():
    journal = MagicMock()
    journal.create_entry.return_value = "j1"
    journal.find_by_id.return_value = {"id": "j1", "title": "Monday"}
    return journal


@pytest.fixture
def reflection():
    return MagicMock()


@pytest.fixture
def client(journal, reflection, issuer):
    identity = MagicMock()
    identity.get_user.side_effect = lambda uid: AuthUser(uid=uid)
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.register_blueprint(create_journal_blueprint(journal, reflection, Authenticator(issuer, identity)))
    with app.test_client() as client:
        yield client


@pytest.fixture
def headers(issuer):
    return {"Authorization": f"Bearer {issuer.issue('user_1').token}"}


class TestCreateEntry:

    def test_created(self, client, journal, headers):
        response = client.post("/journal", json={
            "title": "  Monday ", "content": "Long day.", "moodScore": "6", "tags": ["work", " ", 3],
        }, headers=headers)

        assert response.status_code == 201
        assert response.get_json()["entryId"] == "j1"
        uid, fields = journal.create_entry.call_args[0]
        assert uid == "user_1"
        assert fields == {
            "title": "Monday", "content": "Long day.", "moodScore": 6, "tags": ["work"], "isFavorite": False,
        }

    @pytest.mark.parametrize("body", [
        {"content": "no title"},
        {"title": "no content"},
        {"title": "  ", "content": "x"},
    ])
    def test_title_and_content_required(self, client, journal, headers, body):
        response = client.post("/journal", json=body, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["error"] == "Title and content are required"
        journal.create_entry.assert_not_called()

    @pytest.mark.parametrize("score", [0, 11, "high", True])
    def test_mood_score_range(self, client, headers, score):
        response = client.post("/journal", json={"title": "t", "content": "c", "moodScore": score}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["error"] == "Mood score must be between 1 and 10"

    def test_requires_auth(self, client):
        assert client.post("/journal", json={"title": "t", "content": "c"}).status_code == 401

    def test_store_unavailable(self, client, journal, headers):
        journal.create_entry.side_effect = StoreUnavailableError(
            "Database not available. Please check Firebase configuration."
        )
        response = client.post("/journal", json={"title": "t", "content": "c"}, headers=headers)
        assert response.status_code == 503


class TestListEntries:

    def test_filters_echoed(self, client, journal, headers):
        journal.list_entries.return_value = [{"id": "j1"}]
        data = client.get("/journal?limit=5&tag=work&mood=low", headers=headers).get_json()

        assert data == {
            "entries": [{"id": "j1"}],
            "count": 1,
            "filters": {"limit": 5, "tag": "work", "mood": "low"},
        }
        journal.list_entries.assert_called_once_with("user_1", limit=5, tag="work", mood="low")

    def test_bad_limit(self, client, headers):
        assert client.get("/journal?limit=abc", headers=headers).status_code == 400


class TestUpdateAndDelete:

    def test_partial_update(self, client, journal, headers):
        journal.update_entry.return_value = {"id": "j1", "isFavorite": True}
        response = client.put("/journal/j1", json={"isFavorite": True, "moodScore": None}, headers=headers)

        assert response.status_code == 200
        journal.update_entry.assert_called_once_with("j1", "user_1", {"isFavorite": True, "moodScore": None})

    def test_update_bad_mood(self, client, headers):
        response = client.put("/journal/j1", json={"moodScore": 42}, headers=headers)
        assert response.status_code == 400

    def test_update_not_owner(self, client, journal, headers):
        journal.update_entry.side_effect = OwnershipError("no")
        assert client.put("/journal/j1", json={"title": "x"}, headers=headers).status_code == 403

    def test_delete_missing(self, client, journal, headers):
        journal.delete_entry.side_effect = NotFoundError("no")
        response = client.delete("/journal/j1", headers=headers)
        assert response.status_code == 404
        assert response.get_json() == {"error": "Journal entry not found"}

    def test_delete_not_owner(self, client, journal, headers):
        journal.delete_entry.side_effect = OwnershipError("no")
        assert client.delete("/journal/j1", headers=headers).status_code == 403


class TestPrompts:

    def test_prompts(self, client, reflection, headers):
        reflection.generate.return_value = ReflectionPrompts(generated=False, error="AI not configured")
        data = client.get("/journal/prompts", headers=headers).get_json()
        assert len(data["prompts"]) == 3
        assert data["generated"] is False
        reflection.generate.assert_called_once_with("user_1")
