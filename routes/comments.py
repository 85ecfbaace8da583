"""Comments blueprint, nested under posts."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import db
from models.comment import Comment
from models.post import Post
from models.user import User
from utils.auth import can_modify, protect
from utils.request_validation import parse_json_request, require_fields

comments_bp = Blueprint("comments", __name__)


def _get_owned_comment(post_id: int, comment_id: int, principal: User) -> Comment:
    """Return a comment the principal may change on the given post."""

    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found.")
    if comment.post_id != post_id:
        raise BadRequest("Comment does not belong to this post.")
    if not can_modify(principal, comment.user_id):
        raise Forbidden("Not authorized to change this comment.")
    return comment


@comments_bp.route("/<int:post_id>/comments", methods=["GET"])
def list_comments(post_id: int):
    comments = (
        Comment.query.filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return jsonify([comment.to_dict() for comment in comments])


@comments_bp.route("/<int:post_id>/comments", methods=["POST"])
@protect
def add_comment(post_id: int, principal: User):
    data = parse_json_request(request)
    require_fields(data, ("content",))

    if db.session.get(Post, post_id) is None:
        raise NotFound("Post not found.")

    comment = Comment(post_id=post_id, user_id=principal.id, content=str(data["content"]).strip())
    db.session.add(comment)
    db.session.commit()

    return jsonify(comment.to_dict()), HTTPStatus.CREATED


@comments_bp.route("/<int:post_id>/comments/<int:comment_id>", methods=["PUT"])
@protect
def update_comment(post_id: int, comment_id: int, principal: User):
    data = parse_json_request(request)
    require_fields(data, ("content",))

    comment = _get_owned_comment(post_id, comment_id, principal)
    comment.content = str(data["content"]).strip()
    db.session.commit()

    return jsonify(comment.to_dict())


@comments_bp.route("/<int:post_id>/comments/<int:comment_id>", methods=["DELETE"])
@protect
def delete_comment(post_id: int, comment_id: int, principal: User):
    comment = _get_owned_comment(post_id, comment_id, principal)
    db.session.delete(comment)
    db.session.commit()

    current_app.logger.info(
        "Comment id=%s on post id=%s deleted by user id=%s",
        comment_id,
        post_id,
        principal.id,
    )
    return jsonify({"message": "Comment deleted."})
