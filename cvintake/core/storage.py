"""
Blob directory abstraction for uploaded resume files.

The upload gate stores incoming files here, the ingestion pipeline deletes
its temporary document from here, and the filename resolver lists it when a
candidate's recorded file no longer resolves.
"""

import logging
import os
import time
from typing import BinaryIO, List
from cvintake.core.config import settings

logger = logging.getLogger(__name__)


class StorageBackend:
    """Abstract base class for storage backends"""

    def store(self, file: BinaryIO, filename: str) -> str:
        """Store an uploaded file and return its path"""
        raise NotImplementedError

    def exists(self, filename: str) -> bool:
        """Check if a file exists"""
        raise NotImplementedError

    def list_files(self) -> List[str]:
        """List entry names in listing order"""
        raise NotImplementedError

    def delete(self, filename: str) -> bool:
        """Delete a file, returning False when it was not there"""
        raise NotImplementedError

    def path_for(self, filename: str) -> str:
        """Absolute path of an entry"""
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Local filesystem storage backend"""

    def __init__(self, base_dir: str = "uploads"):
        self.base_dir = os.path.abspath(base_dir)
        os.makedirs(self.base_dir, exist_ok=True)

    def path_for(self, filename: str) -> str:
        # basename() keeps lookups inside base_dir (no ../ traversal)
        return os.path.join(self.base_dir, os.path.basename(filename))

    def store(self, file: BinaryIO, filename: str) -> str:
        """Save an upload as <stem>_<millis><ext> in the upload directory"""
        stem, ext = os.path.splitext(os.path.basename(filename))
        stored_name = f"{stem}_{int(time.time() * 1000)}{ext}"
        file_path = self.path_for(stored_name)

        with open(file_path, "wb") as buffer:
            buffer.write(file.read())

        logger.info(f"Stored upload {filename} as {stored_name}")
        return file_path

    def exists(self, filename: str) -> bool:
        return os.path.isfile(self.path_for(filename))

    def list_files(self) -> List[str]:
        """List directory entries; raises OSError if the directory is unreadable"""
        return os.listdir(self.base_dir)

    def delete(self, filename: str) -> bool:
        """
        Delete a file from the upload directory.

        Returns:
            True if the file was removed, False if it did not exist

        Raises:
            OSError: any other filesystem failure (permissions, busy file)
        """
        try:
            os.remove(self.path_for(filename))
            return True
        except FileNotFoundError:
            return False


def get_storage() -> StorageBackend:
    """FastAPI dependency returning the configured upload directory"""
    return LocalStorage(settings.UPLOAD_DIR)
