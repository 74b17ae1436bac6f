"""
Durable load/save of the single podcast document.

The store owns the backup policy and the atomic write. Reads never fail the
caller: load() falls back to a default document and logs why.
"""

import logging
import os
import time
from typing import List, Optional

from .errors import PersistenceError
from .models import DEFAULT_VERSION, PodcastDocument, default_document
from .storage import Storage
from .utils import now_iso


class PodcastStore:
    """Reads and writes the podcast document through a Storage instance."""

    BACKUP_MARKER = ".backup-"

    def __init__(self, storage: Storage, data_file: str):
        """Initialize with storage instance and the document path."""
        self.logger = logging.getLogger(__name__)
        self.storage = storage
        self.data_file = data_file

    def initialize(self) -> bool:
        """Create the data directory and a default document if absent.

        Returns True when a new document file was written.

        Raises:
            PersistenceError: If the directory or file cannot be created
        """
        try:
            self.storage.ensure_directory(self.storage.base_dir)
            data_dir = os.path.dirname(self.data_file)
            if data_dir:
                self.storage.ensure_directory(data_dir)

            if self.storage.file_exists(self.data_file):
                self.logger.info(
                    "Using existing podcast data file: %s", self.data_file
                )
                return False

            self.storage.write_json_atomic(
                self.data_file, default_document().to_json()
            )
        except OSError as e:
            raise PersistenceError(
                f"Cannot initialize {self.data_file}: {e}"
            ) from e

        self.logger.info(
            "Initialized new podcast data file: %s", self.data_file
        )
        return True

    def read(self) -> Optional[PodcastDocument]:
        """Strict read of the document.

        Returns None if the file does not exist.

        Raises:
            PersistenceError: If the file is unreadable or malformed
        """
        if not self.storage.file_exists(self.data_file):
            return None

        try:
            data = self.storage.read_json(self.data_file)
        except (OSError, ValueError, RecursionError) as e:
            raise PersistenceError(
                f"Cannot read {self.data_file}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise PersistenceError(
                f"Invalid data structure in {self.data_file}: "
                "top level is not an object"
            )

        try:
            return PodcastDocument.from_dict(data)
        except (ValueError, TypeError) as e:
            raise PersistenceError(
                f"Invalid data structure in {self.data_file}: {e}"
            ) from e

    def load(self) -> PodcastDocument:
        """Load the document, falling back to defaults on any failure."""
        try:
            document = self.read()
        except PersistenceError as e:
            self.logger.error("Error loading data: %s", e)
            return default_document()

        if document is None:
            self.logger.warning(
                "Podcast data file not found: %s; using defaults",
                self.data_file,
            )
            return default_document()

        return document

    def save(self, document: PodcastDocument) -> bool:
        """Back up the current file, then atomically write document.

        Stamps metadata.lastModified and defaults metadata.version.
        Returns False if any file operation fails.
        """
        try:
            if self.storage.file_exists(self.data_file):
                backup_path = self._next_backup_path()
                self.storage.copy_file(self.data_file, backup_path)
                self.logger.debug("Backed up data file to %s", backup_path)

            document.metadata.last_modified = now_iso()
            if not document.metadata.version:
                document.metadata.version = DEFAULT_VERSION

            self.storage.write_json_atomic(self.data_file, document.to_json())
        except OSError as e:
            self.logger.error("Error saving data: %s", e)
            return False

        self.logger.debug(
            "Saved podcast data with %d episodes", len(document.episodes)
        )
        return True

    def backups(self) -> List[str]:
        """Existing backup paths, oldest first."""
        directory = os.path.dirname(self.data_file) or "."
        prefix = os.path.basename(self.data_file) + self.BACKUP_MARKER
        return [
            self.storage.join_path(directory, name)
            for name in self.storage.list_files(directory, prefix)
        ]

    def _next_backup_path(self) -> str:
        """Backup path suffixed with epoch millis, skipping taken names."""
        millis = int(time.time() * 1000)
        while True:
            path = f"{self.data_file}{self.BACKUP_MARKER}{millis}"
            if not self.storage.file_exists(path):
                return path
            millis += 1
