"""Tests for the /posts endpoints."""
from unittest.mock import MagicMock

import pytest
from flask import Flask

from serenity.services.auth_service import Authenticator, AuthUser, SessionTokenIssuer
from serenity.services.community_service.handler import create_community_blueprint
from serenity.services.community_service.moderation import ModerationResult
from serenity.shared.database import NotFoundError, OwnershipError
from serenity.shared.utils import configure_pii_salt

SECRET = "session_secret_that_is_at_least_32_characters"


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def issuer():
    return SessionTokenIssuer(SECRET)


@pytest.fixture
def posts():
    return MagicMock()


@pytest.fixture
def moderator():
    moderator = MagicMock()
    moderator.moderate.return_value = ModerationResult(safe=True)
    return moderator


@pytest.fixture
def client(posts, moderator, issuer):
    identity = MagicMock()
    identity.get_user.side_effect = lambda uid: AuthUser(uid=uid, email="sam@example.com", name="Sam Kim")
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.register_blueprint(create_community_blueprint(posts, moderator, Authenticator(issuer, identity)))
    with app.test_client() as client:
        yield client


@pytest.fixture
def headers(issuer):
    return {"Authorization": f"Bearer {issuer.issue('user_1').token}"}


class TestListAndGet:

    def test_requires_auth(self, client):
        assert client.get("/posts").status_code == 401

    def test_default_page(self, client, posts, headers):
        posts.list_posts.return_value = [{"id": "p1"}]
        response = client.get("/posts", headers=headers)
        assert response.status_code == 200
        assert response.get_json() == [{"id": "p1"}]
        posts.list_posts.assert_called_once_with(10, 0)

    def test_limit_capped(self, client, posts, headers):
        posts.list_posts.return_value = []
        client.get("/posts?limit=500&offset=20", headers=headers)
        posts.list_posts.assert_called_once_with(50, 20)

    def test_bad_numbers_fall_back(self, client, posts, headers):
        posts.list_posts.return_value = []
        client.get("/posts?limit=abc&offset=-5", headers=headers)
        posts.list_posts.assert_called_once_with(10, 0)

    def test_get_missing(self, client, posts, headers):
        posts.get_post.side_effect = NotFoundError("Post not found")
        response = client.get("/posts/nope", headers=headers)
        assert response.status_code == 404


class TestCreatePost:

    def test_created(self, client, posts, headers):
        posts.add.return_value = "post_9"
        response = client.post("/posts", json={"content": "  first post  "}, headers=headers)

        assert response.status_code == 201
        post = response.get_json()["post"]
        assert post["id"] == "post_9"
        assert post["content"] == "first post"
        assert post["author"] == "Sam Kim"
        assert post["avatar"] == "SK"
        assert post["tag"] == "General"
        assert post["likes"] == [] and post["comments"] == []
        assert "createdAt" in posts.add.call_args[0][0]

    def test_anonymous(self, client, posts, headers):
        posts.add.return_value = "post_9"
        post = client.post(
            "/posts", json={"content": "hi", "isAnonymous": True}, headers=headers
        ).get_json()["post"]
        assert post["author"] == "Anonymous"
        assert post["avatar"] is None
        assert post["userId"] == "user_1"

    def test_content_required(self, client, posts, headers):
        response = client.post("/posts", json={"content": "   "}, headers=headers)
        assert response.status_code == 400
        posts.add.assert_not_called()

    def test_rejected_by_moderation(self, client, posts, moderator, headers):
        moderator.moderate.return_value = ModerationResult(False, "Harassment", "loser")
        response = client.post("/posts", json={"content": "you loser"}, headers=headers)

        assert response.status_code == 400
        data = response.get_json()
        assert data["error"] == "Content not allowed"
        assert data["reason"] == "Harassment"
        assert data["flaggedContent"] == "loser"
        posts.add.assert_not_called()


class TestLikeAndComments:

    def test_like(self, client, posts, headers):
        response = client.post("/posts/p1/like", headers=headers)
        assert response.status_code == 200
        posts.like.assert_called_once_with("p1", "user_1")

    def test_like_missing_post(self, client, posts, headers):
        posts.like.side_effect = NotFoundError("Post not found")
        assert client.post("/posts/p1/like", headers=headers).status_code == 404

    def test_add_reply(self, client, posts, headers):
        posts.add_comment.return_value = {"id": "p1", "comments": []}
        response = client.post(
            "/posts/p1/comment",
            json={"replyText": "you've got this", "parentCommentId": "c1"},
            headers=headers,
        )
        assert response.status_code == 200
        post_id, comment, parent_id = posts.add_comment.call_args[0]
        assert (post_id, parent_id) == ("p1", "c1")
        assert comment.user_id == "user_1"
        assert comment.content == "you've got this"
        assert comment.id

    def test_empty_comment(self, client, headers):
        assert client.post("/posts/p1/comment", json={"replyText": ""}, headers=headers).status_code == 400

    def test_comment_rejected(self, client, posts, moderator, headers):
        moderator.moderate.return_value = ModerationResult(False, "Spam")
        response = client.post("/posts/p1/comment", json={"replyText": "buy now"}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"].startswith("Your comment")
        posts.add_comment.assert_not_called()

    def test_unknown_parent(self, client, posts, headers):
        posts.add_comment.side_effect = NotFoundError("Parent comment not found")
        response = client.post(
            "/posts/p1/comment", json={"replyText": "hi", "parentCommentId": "x"}, headers=headers
        )
        assert response.status_code == 404

    def test_delete_comment_not_owner(self, client, posts, headers):
        posts.delete_comment.side_effect = OwnershipError("Not your comment.")
        response = client.delete("/posts/p1/comment/c1", headers=headers)
        assert response.status_code == 403
        assert response.get_json() == {"error": "Not your comment."}

    def test_delete_reply(self, client, posts, headers):
        posts.delete_reply.return_value = {"id": "p1", "comments": []}
        response = client.delete("/posts/p1/comment/c1/reply/r1", headers=headers)
        assert response.status_code == 200
        posts.delete_reply.assert_called_once_with("p1", "c1", "r1", "user_1")

    def test_delete_post_not_owner(self, client, posts, headers):
        posts.delete_post.side_effect = OwnershipError("Not your post.")
        assert client.delete("/posts/p1", headers=headers).status_code == 403

    def test_delete_post(self, client, posts, headers):
        assert client.delete("/posts/p1", headers=headers).status_code == 200
        posts.delete_post.assert_called_once_with("p1", "user_1")
