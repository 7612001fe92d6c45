"""Community Service HTTP handler: posts, likes and comment threads."""
import logging
import uuid
from typing import Optional

from flask import Blueprint, g, jsonify, request
from google.cloud import firestore

from serenity.services.auth_service import AuthUser, Authenticator
from serenity.shared.database import NotFoundError, OwnershipError
from serenity.shared.models import Comment
from serenity.shared.utils import hash_pii, utc_now_iso
from serenity.shared.utils.responses import server_error
from .moderation import ContentModerator
from .repository import PostRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _author(user: AuthUser, anonymous: bool) -> str:
    if anonymous:
        return "Anonymous"
    return user.name or "User"


def _initials(name: Optional[str]) -> str:
    if not name:
        return ""
    return "".join(part[0] for part in name.split() if part)


def create_community_blueprint(
    posts: PostRepository,
    moderator: ContentModerator,
    authenticator: Authenticator,
) -> Blueprint:
    """Build the /posts blueprint."""
    bp = Blueprint("community", __name__, url_prefix="/posts")

    @bp.route("", methods=["GET"])
    @authenticator.require_auth
    def list_posts():
        """Newest posts first. Query: limit (default 10, max 50), offset."""
        try:
            limit = min(max(_int_arg("limit", DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
            offset = max(_int_arg("offset", 0), 0)
            return jsonify(posts.list_posts(limit, offset)), 200
        except Exception as e:
            return server_error(e, "POSTS_FETCH_FAILED", "Failed to fetch posts.")

    @bp.route("/<post_id>", methods=["GET"])
    @authenticator.require_auth
    def get_post(post_id):
        try:
            return jsonify(posts.get_post(post_id)), 200
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except Exception as e:
            return server_error(e, "POST_FETCH_FAILED", "Failed to fetch post.", post_id=post_id)

    @bp.route("", methods=["POST"])
    @authenticator.require_auth
    def create_post():
        """Create a moderated post.

        Request Body:
            {"content": "...", "isAnonymous": false, "avatar": "SK", "tag": "Anxiety"}
        """
        try:
            data = request.get_json(silent=True) or {}
            content = data.get("content")
            if not isinstance(content, str) or not content.strip():
                return jsonify({"error": "Post content required."}), 400
            content = content.strip()

            verdict = moderator.moderate(content)
            if not verdict.safe:
                logger.warning("POST_REJECTED_BY_MODERATION", extra={"user_id_hash": hash_pii(g.user.uid)})
                return jsonify(verdict.rejection_payload("post")), 400

            anonymous = bool(data.get("isAnonymous"))
            post = {
                "author": _author(g.user, anonymous),
                "isAnonymous": anonymous,
                "avatar": None if anonymous else (data.get("avatar") or _initials(g.user.name)),
                "content": content,
                "timestamp": utc_now_iso(),
                "tag": data.get("tag") or "General",
                "likes": [],
                "comments": [],
                "userId": g.user.uid,
            }
            post_id = posts.add({**post, "createdAt": firestore.SERVER_TIMESTAMP})

            logger.info("POST_CREATED", extra={"post_id": post_id, "user_id_hash": hash_pii(g.user.uid)})
            return jsonify({
                "message": "Post created successfully",
                "post": {"id": post_id, **post},
            }), 201

        except Exception as e:
            return server_error(e, "POST_CREATE_FAILED", "Failed to create post.")

    @bp.route("/<post_id>/like", methods=["POST"])
    @authenticator.require_auth
    def like_post(post_id):
        try:
            posts.like(post_id, g.user.uid)
            return jsonify({"message": "Post liked"}), 200
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except Exception as e:
            return server_error(e, "POST_LIKE_FAILED", "Failed to like post.", post_id=post_id)

    @bp.route("/<post_id>/comment", methods=["POST"])
    @authenticator.require_auth
    def add_comment(post_id):
        """Add a comment, or a reply at any depth.

        Request Body:
            {"replyText": "...", "parentCommentId": "abc" (optional), "anonymous": false}
        """
        try:
            data = request.get_json(silent=True) or {}
            text = data.get("replyText")
            if not isinstance(text, str) or not text.strip():
                return jsonify({"error": "Comment cannot be empty."}), 400
            text = text.strip()

            verdict = moderator.moderate(text)
            if not verdict.safe:
                logger.warning("COMMENT_REJECTED_BY_MODERATION", extra={"post_id": post_id})
                return jsonify(verdict.rejection_payload("comment")), 400

            anonymous = bool(data.get("anonymous"))
            comment = Comment(
                id=uuid.uuid4().hex,
                author=_author(g.user, anonymous),
                content=text,
                timestamp=utc_now_iso(),
                user_id=g.user.uid,
                is_anonymous=anonymous,
            )
            updated = posts.add_comment(post_id, comment, data.get("parentCommentId"))
            return jsonify({"message": "Comment added", "updatedPost": updated}), 200

        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except Exception as e:
            return server_error(e, "COMMENT_ADD_FAILED", "Failed to add comment.", post_id=post_id)

    @bp.route("/<post_id>/comment/<comment_id>", methods=["DELETE"])
    @authenticator.require_auth
    def delete_comment(post_id, comment_id):
        try:
            updated = posts.delete_comment(post_id, comment_id, g.user.uid)
            return jsonify({"message": "Comment deleted", "updatedPost": updated}), 200
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except OwnershipError as e:
            return jsonify({"error": str(e)}), 403
        except Exception as e:
            return server_error(e, "COMMENT_DELETE_FAILED", "Failed to delete comment.", post_id=post_id)

    @bp.route("/<post_id>/comment/<comment_id>/reply/<reply_id>", methods=["DELETE"])
    @authenticator.require_auth
    def delete_reply(post_id, comment_id, reply_id):
        try:
            updated = posts.delete_reply(post_id, comment_id, reply_id, g.user.uid)
            return jsonify({"message": "Reply deleted", "updatedPost": updated}), 200
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except OwnershipError as e:
            return jsonify({"error": str(e)}), 403
        except Exception as e:
            return server_error(e, "REPLY_DELETE_FAILED", "Failed to delete reply.", post_id=post_id)

    @bp.route("/<post_id>", methods=["DELETE"])
    @authenticator.require_auth
    def delete_post(post_id):
        try:
            posts.delete_post(post_id, g.user.uid)
            logger.info("POST_DELETED", extra={"post_id": post_id, "user_id_hash": hash_pii(g.user.uid)})
            return jsonify({"message": "Post deleted"}), 200
        except NotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except OwnershipError as e:
            return jsonify({"error": str(e)}), 403
        except Exception as e:
            return server_error(e, "POST_DELETE_FAILED", "Failed to delete post.", post_id=post_id)

    return bp
