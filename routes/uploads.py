"""Image upload endpoint for post illustrations."""

from __future__ import annotations

import os
import re
import time
import uuid
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from models.user import User
from storage.local_storage import LocalStorage
from utils.auth import admin_required

uploads_bp = Blueprint("uploads", __name__)
media_bp = Blueprint("media", __name__)

UPLOAD_FIELD = "image"
ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
IMAGE_TYPES = re.compile(r"jpe?g|png|gif|webp")
MAX_UPLOAD_SIZE_DEFAULT = 5 * 1024 * 1024  # 5 MB
ONLY_IMAGES = "Only images (JPG, JPEG, PNG, GIF, WEBP) are allowed."


def _validate_image(file: FileStorage) -> str:
    """Check type and size of an uploaded image and return its extension."""

    if not file.filename or not file.filename.strip():
        raise BadRequest("No image file was uploaded.")

    extension = Path(file.filename).suffix.lower().lstrip(".")
    if extension not in ALLOWED_EXTENSIONS:
        raise BadRequest(ONLY_IMAGES)
    if not IMAGE_TYPES.search(file.mimetype or ""):
        raise BadRequest(ONLY_IMAGES)

    max_size = int(current_app.config.get("MAX_UPLOAD_SIZE", MAX_UPLOAD_SIZE_DEFAULT))
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    if size > max_size:
        raise BadRequest(
            f"File exceeds the maximum upload size of {max_size // (1024 * 1024)}MB."
        )

    return extension


def _build_unique_filename(field: str, extension: str) -> str:
    millis = int(time.time() * 1000)
    return f"{field}-{millis}-{uuid.uuid4().hex[:8]}.{extension}"


def _storage() -> LocalStorage:
    return LocalStorage(current_app.config["UPLOAD_DIR"])


@uploads_bp.route("", methods=["POST"])
@admin_required
def upload_image(principal: User):
    """Store a single image from the ``image`` form field."""

    file = request.files.get(UPLOAD_FIELD)
    if not isinstance(file, FileStorage):
        raise BadRequest("No image file was uploaded.")

    extension = _validate_image(file)

    storage = _storage()
    stored_name = storage.save(file, _build_unique_filename(UPLOAD_FIELD, extension))
    current_app.logger.info(
        "Image %s uploaded by user id=%s", stored_name, principal.id
    )

    return jsonify(
        {"message": "Image uploaded successfully.", "image": storage.public_url(stored_name)}
    )


@media_bp.route("/<path:filename>", methods=["GET"])
def serve_upload(filename: str):
    return send_from_directory(_storage().base_directory.resolve(), filename)
