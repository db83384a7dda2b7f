"""
Raw text access for the CSV snapshots.
Files are read wholesale on every request; nothing is cached.
"""
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from core.exceptions import BackingStoreError
from core.logger import setup_logger

logger = setup_logger(__name__)


class BlobStore(Protocol):
    """Key-value source of raw text."""

    def read_text(self, key: str) -> str:
        ...


class FileBlobStore:
    """Reads blobs from files under a base directory."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def read_text(self, key: str) -> str:
        """
        Read a file as UTF-8 text.

        Args:
            key: File name relative to the base directory

        Returns:
            File contents

        Raises:
            BackingStoreError: If the file is missing, unreadable or not UTF-8
        """
        path = self.base_dir / key
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise BackingStoreError(
                f"Unable to read {key}",
                details={"path": str(path), "error": str(e)}
            )


class MemoryBlobStore:
    """Dictionary-backed blob store."""

    def __init__(self, blobs: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(blobs or {})

    def read_text(self, key: str) -> str:
        if key not in self.blobs:
            raise BackingStoreError(f"Unable to read {key}", details={"key": key})
        return self.blobs[key]
