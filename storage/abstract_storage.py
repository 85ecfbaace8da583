"""Storage abstraction layer for uploaded images."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO


class AbstractStorage(ABC):
    """Interface for storage backends."""

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Persist a file and return the stored (relative) name."""

    @abstractmethod
    def public_url(self, name: str) -> str:
        """Return the path under which clients can fetch the stored file."""
