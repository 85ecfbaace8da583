"""Posts blueprint: public reading, admin authoring."""

from __future__ import annotations

import math
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from models import db
from models.category import Category
from models.comment import Comment
from models.post import POST_STATUSES, Post, PostStatus
from models.user import User
from utils.auth import admin_required, is_admin, optional_protect
from utils.content import newlines_to_html
from utils.request_validation import optional_string, parse_json_request, require_fields
from utils.slugs import slugify

posts_bp = Blueprint("posts", __name__)


def _get_post_or_404(post_id: int) -> Post:
    post = db.session.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found.")
    return post


def _require_category(raw_category) -> int:
    """Return the id of an existing category or raise 400."""

    try:
        category_id = int(raw_category)
    except (TypeError, ValueError):
        raise BadRequest("Category not found.") from None
    if db.session.get(Category, category_id) is None:
        raise BadRequest("Category not found.")
    return category_id


def _parse_status(raw_status) -> str:
    if raw_status not in POST_STATUSES:
        raise BadRequest("status must be one of: draft, published.")
    return raw_status


def _parse_page(raw_page: str | None) -> int:
    try:
        page = int(raw_page)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def _commit_post() -> None:
    try:
        db.session.commit()
    except IntegrityError as error:
        db.session.rollback()
        raise Conflict("A post with that slug already exists.") from error


@posts_bp.route("", methods=["GET"])
@optional_protect
def list_posts(principal: User | None):
    """Return a page of posts, newest first.

    Anonymous callers and non-admins only ever see published posts; admins
    may narrow the list with ``?status=draft|published``.
    """

    page_size = int(current_app.config.get("POSTS_PAGE_SIZE", 10))
    page = _parse_page(request.args.get("pageNumber"))

    query = Post.query

    keyword = (request.args.get("keyword") or "").strip()
    if keyword:
        query = query.filter(Post.title.icontains(keyword, autoescape=True))

    if is_admin(principal):
        status = request.args.get("status")
        if status in POST_STATUSES:
            query = query.filter(Post.status == status)
    else:
        query = query.filter(Post.status == PostStatus.PUBLISHED.value)

    count = query.count()
    posts = (
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .limit(page_size)
        .offset(page_size * (page - 1))
        .all()
    )

    return jsonify(
        {
            "posts": [post.to_dict() for post in posts],
            "page": page,
            "pages": math.ceil(count / page_size),
            "count": count,
        }
    )


@posts_bp.route("/id/<int:post_id>", methods=["GET"])
@admin_required
def get_post_by_id(post_id: int, principal: User):
    """Fetch any post, whatever its status, for editing."""
    return jsonify(_get_post_or_404(post_id).to_dict())


@posts_bp.route("/<slug>", methods=["GET"])
@optional_protect
def get_post_by_slug(slug: str, principal: User | None):
    query = Post.query.filter(Post.slug == slug)
    if not is_admin(principal):
        query = query.filter(Post.status == PostStatus.PUBLISHED.value)

    post = query.first()
    if post is None:
        raise NotFound("Post not found.")
    return jsonify(post.to_dict())


@posts_bp.route("", methods=["POST"])
@admin_required
def create_post(principal: User):
    data = parse_json_request(request)
    require_fields(data, ("title", "content", "category"))

    category_id = _require_category(data.get("category"))
    title = str(data["title"]).strip()
    status = _parse_status(data["status"]) if data.get("status") else PostStatus.DRAFT.value

    post = Post(
        title=title,
        slug=slugify(title),
        content=newlines_to_html(str(data["content"])),
        category_id=category_id,
        author_id=principal.id,
        status=status,
        image=optional_string(data, "image") or current_app.config["DEFAULT_POST_IMAGE"],
    )
    db.session.add(post)
    _commit_post()

    current_app.logger.info("Post id=%s created by user id=%s", post.id, principal.id)
    return jsonify(post.to_dict()), HTTPStatus.CREATED


@posts_bp.route("/<int:post_id>", methods=["PUT"])
@admin_required
def update_post(post_id: int, principal: User):
    """Apply a partial update; omitted fields keep their current values."""

    post = _get_post_or_404(post_id)
    data = parse_json_request(request)

    if data.get("category"):
        post.category_id = _require_category(data["category"])

    title = optional_string(data, "title")
    if title:
        post.title = title
        post.slug = slugify(title)

    if data.get("content"):
        post.content = newlines_to_html(str(data["content"]))

    if data.get("status"):
        post.status = _parse_status(data["status"])

    image = optional_string(data, "image")
    if image:
        post.image = image

    _commit_post()
    return jsonify(post.to_dict())


@posts_bp.route("/<int:post_id>", methods=["DELETE"])
@admin_required
def delete_post(post_id: int, principal: User):
    """Delete a post together with all of its comments."""

    post = _get_post_or_404(post_id)

    removed = Comment.query.filter(Comment.post_id == post.id).delete(
        synchronize_session=False
    )
    db.session.delete(post)
    db.session.commit()

    current_app.logger.info(
        "Post id=%s deleted by user id=%s with %s comments",
        post_id,
        principal.id,
        removed,
    )
    return jsonify({"message": "Post deleted."})
