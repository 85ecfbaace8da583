"""Categories blueprint."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import Conflict, NotFound

from models import db
from models.category import Category
from models.user import User
from utils.auth import admin_required
from utils.request_validation import optional_string, parse_json_request, require_fields
from utils.slugs import slugify

categories_bp = Blueprint("categories", __name__)

DUPLICATE_NAME = "A category with that name already exists."


def _get_category_or_404(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found.")
    return category


def _commit_category() -> None:
    try:
        db.session.commit()
    except IntegrityError as error:
        db.session.rollback()
        raise Conflict(DUPLICATE_NAME) from error


@categories_bp.route("", methods=["GET"])
def list_categories():
    categories = Category.query.order_by(Category.name.asc()).all()
    return jsonify([category.to_dict() for category in categories])


@categories_bp.route("", methods=["POST"])
@admin_required
def create_category(principal: User):
    data = parse_json_request(request)
    require_fields(data, ("name",))
    name = optional_string(data, "name")

    if Category.query.filter_by(name=name).first() is not None:
        raise Conflict(DUPLICATE_NAME)

    category = Category(name=name, slug=slugify(name))
    db.session.add(category)
    _commit_category()

    return jsonify(category.to_dict()), HTTPStatus.CREATED


@categories_bp.route("/<int:category_id>", methods=["PUT"])
@admin_required
def update_category(category_id: int, principal: User):
    category = _get_category_or_404(category_id)
    data = parse_json_request(request, allow_empty=True)
    name = optional_string(data, "name")

    if name and name != category.name:
        clash = Category.query.filter(
            Category.name == name, Category.id != category.id
        ).first()
        if clash is not None:
            raise Conflict(DUPLICATE_NAME)
        category.name = name
        category.slug = slugify(name)

    _commit_category()
    return jsonify(category.to_dict())


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id: int, principal: User):
    """Delete a category. Posts filed under it are left as they are."""

    category = _get_category_or_404(category_id)
    db.session.delete(category)
    db.session.commit()

    current_app.logger.info(
        "Category id=%s deleted by user id=%s", category_id, principal.id
    )
    return jsonify({"message": "Category deleted."})
