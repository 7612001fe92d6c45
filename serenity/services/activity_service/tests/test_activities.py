"""Tests for activity selection, planning and the /activities endpoints."""
from datetime import date
from unittest.mock import MagicMock

import pytest
from flask import Flask

from serenity.services.activity_service.catalog import CATALOG, average_mood, select_activities
from serenity.services.activity_service.handler import create_activity_blueprint
from serenity.services.activity_service.planner import ActivityPlanner
from serenity.services.auth_service import Authenticator, AuthUser, SessionTokenIssuer
from serenity.shared.utils import configure_pii_salt

SECRET = "session_secret_that_is_at_least_32_characters"


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


def ids(activities):
    return [a.id for a in activities]


class TestCatalog:

    def test_thirteen_unique_activities(self):
        assert len(CATALOG) == 13
        assert len({a.id for a in CATALOG}) == 13

    def test_client_view_hides_mood_range(self):
        view = CATALOG[0].to_dict(completed=True)
        assert "moodRange" not in view and "mood_range" not in view
        assert view["completed"] is True


class TestAverageMood:

    def test_default(self):
        assert average_mood([]) == 5.0

    def test_mean(self):
        assert average_mood([{"mood": 2}, {"mood": 4}, {"mood": 9}]) == 5.0

    def test_ignores_missing_scores(self):
        assert average_mood([{"mood": 8}, {"note": "no score"}]) == 8.0


class TestSelectActivities:

    def test_medium_mood(self):
        assert ids(select_activities(5.0, [])) == ["breathing-exercise", "meditation", "body-scan", "walk-outside"]

    def test_high_mood_skips_low_mood_activities(self):
        assert ids(select_activities(9.0, [])) == ["breathing-exercise", "walk-outside", "stretching", "dance-break"]

    def test_low_mood(self):
        assert ids(select_activities(1.0, [])) == ["breathing-exercise", "meditation", "body-scan", "stretching"]

    def test_excludes_recent(self):
        picks = select_activities(5.0, ["breathing-exercise", "meditation"])
        assert ids(picks) == ["body-scan", "walk-outside", "stretching", "dance-break"]

    def test_fallback_to_easy(self):
        picks = select_activities(5.0, [a.id for a in CATALOG])
        assert ids(picks) == ["breathing-exercise", "walk-outside", "stretching", "dance-break"]


class TestActivityPlanner:

    def test_marks_completed_today(self):
        activities = MagicMock()
        activities.ids_since.return_value = {"meditation"}
        activities.ids_on.return_value = {"body-scan"}
        moods = MagicMock()
        moods.find_for_user.return_value = [{"mood": 4}, {"mood": 6}]

        plan = ActivityPlanner(activities, moods).today("user_1", day=date(2026, 10, 19))

        assert [a["id"] for a in plan] == ["breathing-exercise", "body-scan", "walk-outside", "stretching"]
        assert [a["completed"] for a in plan] == [False, True, False, False]
        activities.ids_since.assert_called_once_with("user_1", date(2026, 10, 12))
        activities.ids_on.assert_called_once_with("user_1", date(2026, 10, 19))
        moods.find_for_user.assert_called_once_with("user_1", order_by="date", limit=3)


@pytest.fixture
def planner():
    return MagicMock()


@pytest.fixture
def activities():
    return MagicMock()


@pytest.fixture
def issuer():
    return SessionTokenIssuer(SECRET)


@pytest.fixture
def headers(issuer):
    return {"Authorization": f"Bearer {issuer.issue('user_1').token}"}


@pytest.fixture
def client(planner, activities, issuer):
    identity = MagicMock()
    identity.get_user.side_effect = lambda uid: AuthUser(uid=uid)
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.register_blueprint(create_activity_blueprint(planner, activities, Authenticator(issuer, identity)))
    with app.test_client() as client:
        yield client


class TestActivityEndpoints:

    def test_today(self, client, planner, headers):
        planner.today.return_value = [{"id": "doodle", "completed": False}]
        response = client.get("/activities/today", headers=headers)
        assert response.status_code == 200
        assert response.get_json() == [{"id": "doodle", "completed": False}]

    def test_complete(self, client, activities, headers):
        response = client.post(
            "/activities/complete", json={"activityId": "doodle", "notes": " fun "}, headers=headers
        )
        assert response.status_code == 200
        activities.complete.assert_called_once_with("user_1", "doodle", "fun")

    def test_complete_requires_id(self, client, activities, headers):
        response = client.post("/activities/complete", json={}, headers=headers)
        assert response.status_code == 400
        assert response.get_json() == {"error": "Activity ID is required"}

    def test_complete_unknown_id(self, client, activities, headers):
        response = client.post("/activities/complete", json={"activityId": "skydiving"}, headers=headers)
        assert response.status_code == 400
        activities.complete.assert_not_called()

    def test_history_default_days(self, client, activities, headers):
        activities.history.return_value = []
        assert client.get("/activities/history", headers=headers).status_code == 200
        activities.history.assert_called_once_with("user_1", 7)

    def test_history_bad_days(self, client, headers):
        assert client.get("/activities/history?days=0", headers=headers).status_code == 400

    def test_requires_auth(self, client):
        assert client.get("/activities/today").status_code == 401
