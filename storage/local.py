import logging
import os
import shutil
from typing import BinaryIO, Optional

import config
from .base import BaseStorage, StorageError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


class LocalStorage(BaseStorage):
    def __init__(self, upload_dir: str = config.UPLOAD_DIR):
        self.upload_dir = os.path.abspath(upload_dir)
        os.makedirs(self.upload_dir, exist_ok=True)

    def _path_for(self, public_id: str) -> str:
        path = os.path.abspath(os.path.join(self.upload_dir, public_id))
        if os.path.commonpath([path, self.upload_dir]) != self.upload_dir:
            raise StorageError(f"Refusing to access a path outside the upload directory: {public_id}")
        return path

    def save(self, file: BinaryIO, filename: str, folder: Optional[str] = None, content_type: Optional[str] = None) -> str:
        public_id = self.build_public_id(filename, folder)
        file_path = self._path_for(public_id)
        try:
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(file, buffer)
        except OSError as e:
            raise StorageError(f"Could not write {public_id}: {e}") from e
        # Served by the /uploads static mount
        return f"{URL_PREFIX}{public_id}"

    def delete(self, public_id: str) -> bool:
        file_path = self._path_for(public_id)
        if not os.path.isfile(file_path):
            logger.warning("File not found for deletion: %s", public_id)
            return False
        try:
            os.remove(file_path)
        except OSError as e:
            raise StorageError(f"Could not delete {public_id}: {e}") from e
        return True

    def public_id_from_url(self, file_url: str) -> Optional[str]:
        if not file_url or not file_url.startswith(URL_PREFIX):
            return None
        return file_url[len(URL_PREFIX):]
