"""
Pure storage layer for file operations.

This module provides low-level file operations without any business logic.
Failures surface as OSError (or ValueError for malformed JSON); callers
decide how to report them.
"""

import json
import os
import shutil
import tempfile
from typing import Any, List


class Storage:
    """Pure file operations without business logic."""

    def __init__(self, base_dir: str = "./data"):
        """Initialize with base directory."""
        self.base_dir = base_dir

    def ensure_directory(self, path: str) -> None:
        """Create directory if it doesn't exist."""
        os.makedirs(path, exist_ok=True)

    def file_exists(self, path: str) -> bool:
        """Check if file exists."""
        return os.path.exists(path)

    def read_json(self, path: str) -> Any:
        """Read and parse a JSON file.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the content is not valid JSON
        """
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def read_bytes(self, path: str) -> bytes:
        """Read file as bytes."""
        with open(path, "rb") as f:
            return f.read()

    def write_json_atomic(self, path: str, data: Any) -> None:
        """Write data as pretty-printed JSON, replacing path atomically."""
        content = json.dumps(data, indent=2, ensure_ascii=False)
        self.write_bytes_atomic(path, content.encode("utf-8"))

    def write_bytes_atomic(self, path: str, data: bytes) -> None:
        """Write bytes to a temp file beside path, then rename it over path.

        Readers of path see either the old content or the new content,
        never a partial write.
        """
        directory = os.path.dirname(path) or "."
        self.ensure_directory(directory)

        fd, temp_path = tempfile.mkstemp(
            dir=directory, prefix=os.path.basename(path) + ".", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def copy_file(self, source: str, destination: str) -> None:
        """Copy file contents."""
        shutil.copyfile(source, destination)

    def list_files(self, directory: str, prefix: str) -> List[str]:
        """List file names in directory starting with prefix, sorted."""
        if not os.path.isdir(directory):
            return []
        return sorted(
            name for name in os.listdir(directory) if name.startswith(prefix)
        )

    def join_path(self, *parts: str) -> str:
        """Join path parts."""
        return os.path.join(*parts)
