"""
Local storage for post cover images.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path, PurePath
from typing import BinaryIO, Optional

from blog_backend.errors import MissingFile

logger = logging.getLogger(__name__)


def extension_for(original_name: str) -> str:
    """
    Text after the last dot of the file's base name, or "" when there is none.

    "photo.final.PNG" -> "PNG", "README" -> "", "archive." -> "".
    """
    name = PurePath((original_name or "").replace("\\", "/")).name
    _, dot, ext = name.rpartition(".")
    return ext if dot else ""


class UploadStore:
    """Writes each upload under a random name, then renames it to carry the original extension."""

    def __init__(self, upload_dir: str | os.PathLike):
        self.upload_dir = Path(upload_dir)

    def ensure_dir(self) -> Path:
        os.makedirs(self.upload_dir, exist_ok=True)
        return self.upload_dir

    def store(self, stream: Optional[BinaryIO], original_name: Optional[str]) -> str:
        if stream is None or not original_name:
            raise MissingFile()

        temp_path = self.ensure_dir() / uuid.uuid4().hex
        with temp_path.open("wb") as buffer:
            shutil.copyfileobj(stream, buffer)

        ext = extension_for(original_name)
        if not ext:
            logger.info("Stored cover %s without extension", temp_path)
            return temp_path.as_posix()

        final_path = temp_path.with_name(f"{temp_path.name}.{ext}")
        os.replace(temp_path, final_path)
        return final_path.as_posix()
