"""Local filesystem storage implementation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO

from werkzeug.utils import secure_filename

from .abstract_storage import AbstractStorage

PUBLIC_PREFIX = "/uploads"


class LocalStorage(AbstractStorage):
    """Persist files to a directory that the app serves under ``/uploads``."""

    def __init__(self, upload_dir: str, public_prefix: str = PUBLIC_PREFIX):
        self.base_directory = Path(upload_dir)
        self.public_prefix = public_prefix.rstrip("/")
        os.makedirs(self.base_directory, exist_ok=True)

    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Save a file and return its name within the upload directory."""

        safe_name = secure_filename(filename)
        if not safe_name:
            raise ValueError("Filename must contain at least one valid character.")

        destination = self.base_directory / safe_name
        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        return str(destination.relative_to(self.base_directory))

    def public_url(self, name: str) -> str:
        return f"{self.public_prefix}/{name}"
