from abc import ABC, abstractmethod
from typing import BinaryIO, Optional


class StorageError(Exception):
    """Raised when the image host fails to store or delete a file."""


class BaseStorage(ABC):
    @abstractmethod
    def save(self, file: BinaryIO, filename: str, folder: Optional[str] = None, content_type: Optional[str] = None) -> str:
        """Saves the file and returns the URL."""
        pass

    @abstractmethod
    def delete(self, public_id: str) -> bool:
        """Deletes the file stored under public_id. Returns False if nothing was deleted."""
        pass

    @abstractmethod
    def public_id_from_url(self, file_url: str) -> Optional[str]:
        """Returns the public id of a URL produced by save, or None for foreign URLs."""
        pass

    @staticmethod
    def build_public_id(filename: str, folder: Optional[str] = None) -> str:
        return f"{folder}/{filename}" if folder else filename
