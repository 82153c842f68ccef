# taskflow/services/file_storage.py
import logging
import re
import time
import uuid
from pathlib import Path, PurePath
from typing import BinaryIO, Iterable, Optional, Tuple

from taskflow.config import get_settings
from taskflow.utils.errors import ValidationError

logger = logging.getLogger(__name__)

# Attachment paths are stored relative to the uploads root with this prefix
WEB_PREFIX = "uploads"

CHUNK_SIZE = 1024 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_WHITESPACE = re.compile(r"\s+")

# Leaves room for the "<timestamp>-<token>-" prefix within a 255 byte component
MAX_NAME_LENGTH = 200


def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a safe single path component"""
    # Clients may send Windows paths, so strip both separators
    name = PurePath(filename.replace("\\", "/")).name
    name = _WHITESPACE.sub("_", name.strip())
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    if len(name) > MAX_NAME_LENGTH:
        stem, dot, ext = name.rpartition(".")
        if not dot or len(ext) > 16:
            stem, ext = name, ""
        ext = f".{ext}" if ext else ""
        name = stem[:MAX_NAME_LENGTH - len(ext)] + ext
    return name or "file"


class FileStorageService:
    """Service for storing uploaded attachment files on disk"""

    def __init__(self, upload_dir: str = "uploads", max_file_size: int = 10 * 1024 * 1024):  # 10MB default
        self.upload_dir = Path(upload_dir).resolve()
        self.max_file_size = max_file_size

        # Create upload directory if it doesn't exist
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def generate_unique_filename(self, original_filename: str) -> str:
        """
        Generate a collision-resistant stored filename

        Args:
            original_filename: Filename as sent by the client

        Returns:
            ``<millisecond timestamp>-<8 hex chars>-<sanitized name>``
        """
        timestamp = int(time.time() * 1000)
        token = uuid.uuid4().hex[:8]
        return f"{timestamp}-{token}-{sanitize_filename(original_filename)}"

    def web_path(self, stored_name: str) -> str:
        return f"{WEB_PREFIX}/{stored_name}"

    def resolve(self, web_path: str) -> Optional[Path]:
        """
        Map a stored web path to its absolute location under the upload root

        Returns None for paths that would land outside the upload root.
        """
        relative = web_path.replace("\\", "/")
        prefix = WEB_PREFIX + "/"
        if relative.startswith(prefix):
            relative = relative[len(prefix):]

        path = (self.upload_dir / relative).resolve()
        if path == self.upload_dir or self.upload_dir not in path.parents:
            logger.warning(f"Refusing path outside upload directory: {web_path}")
            return None
        return path

    def save_file(self, source: BinaryIO, original_filename: str) -> Tuple[str, int]:
        """
        Stream an uploaded file to disk

        Args:
            source: Readable binary file object
            original_filename: Filename as sent by the client

        Returns:
            Tuple of (stored filename, file size in bytes)
        """
        stored_name = self.generate_unique_filename(original_filename)
        file_path = self.upload_dir / stored_name

        size = 0
        try:
            with open(file_path, "wb") as buffer:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise ValidationError(
                            f"File size exceeds maximum allowed size of {self.max_file_size / (1024*1024):.1f}MB"
                        )
                    buffer.write(chunk)
        except BaseException:
            # Never leave a partial file behind
            file_path.unlink(missing_ok=True)
            raise

        logger.info(f"File saved successfully: {file_path} ({size} bytes)")
        return stored_name, size

    def delete_file(self, web_path: str) -> bool:
        """
        Delete a stored file

        A missing file is not an error; failures are logged and reported as False.

        Returns:
            True if a file was removed, False otherwise
        """
        path = self.resolve(web_path)
        if path is None:
            return False

        try:
            if not path.exists():
                logger.warning(f"File not found for deletion: {path}")
                return False
            path.unlink()
            logger.info(f"File deleted successfully: {path}")
            return True
        except OSError as e:
            logger.warning(f"Could not delete file from disk {path}: {e}")
            return False

    def cleanup_orphaned_files(self, known_paths: Iterable[str], min_age_seconds: int = 0) -> int:
        """
        Remove files in the upload directory that no attachment references

        Args:
            known_paths: Web paths of every attachment still recorded
            min_age_seconds: Skip files modified more recently than this,
                so uploads still being committed are left alone

        Returns:
            Number of files removed
        """
        referenced = set()
        for web_path in known_paths:
            path = self.resolve(web_path)
            if path is not None:
                referenced.add(path)

        cutoff = time.time() - min_age_seconds
        deleted_count = 0
        for file_path in self.upload_dir.iterdir():
            if not file_path.is_file() or file_path in referenced:
                continue
            if file_path.stat().st_mtime > cutoff:
                continue
            if self.delete_file(self.web_path(file_path.name)):
                deleted_count += 1

        if deleted_count:
            logger.info(f"Cleaned up {deleted_count} orphaned files")
        return deleted_count


_file_storage: Optional[FileStorageService] = None


def get_file_storage() -> FileStorageService:
    """FastAPI dependency returning the process-wide storage service"""
    global _file_storage
    if _file_storage is None:
        settings = get_settings()
        _file_storage = FileStorageService(settings.upload_dir, settings.max_file_size)
    return _file_storage
