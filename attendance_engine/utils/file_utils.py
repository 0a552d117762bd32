"""
File handling utilities for saving exported reports
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from attendance_engine.core.exceptions import ReportExportError

logger = logging.getLogger(__name__)


class FileHelper:
    """General file manipulation utilities"""

    @staticmethod
    def ensure_directory(directory_path: Union[str, Path]) -> Path:
        """Create directory if it doesn't exist"""
        path = Path(directory_path)
        path.mkdir(parents=True, exist_ok=True)
        return path.absolute()

    @staticmethod
    def clean_filename(filename: str) -> str:
        """Clean filename for safe storage"""
        dangerous_chars = '<>:"/\\|?*'
        for char in dangerous_chars:
            filename = filename.replace(char, '_')

        filename = filename.strip(' .')

        if len(filename) > 255:
            name, ext = os.path.splitext(filename)
            filename = name[:255 - len(ext)] + ext

        return filename

    @classmethod
    def save_document(cls, content: bytes, directory: Union[str, Path], filename: str) -> Path:
        """
        Write a document atomically: a temp file in the target directory is
        renamed over the destination, so readers never see a partial file.

        Raises:
            ReportExportError: directory not creatable or write failed
        """
        safe_name = cls.clean_filename(filename)
        if not safe_name:
            raise ReportExportError("Empty filename", filename=filename)

        tmp_path = None
        try:
            target_dir = cls.ensure_directory(directory)
            destination = target_dir / safe_name
            fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix=f".{safe_name}.", suffix=".tmp")
            with os.fdopen(fd, 'wb') as handle:
                handle.write(content)
            os.replace(tmp_path, destination)
        except OSError as e:
            logger.error(f"save_document failed for {safe_name}: {e}", exc_info=True)
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ReportExportError(
                f"Could not save {safe_name}: {e.strerror or e}",
                export_format=Path(safe_name).suffix.lstrip('.') or None,
                filename=safe_name,
            ) from e

        logger.info(f"Saved report {destination} ({len(content)} bytes)")
        return destination
