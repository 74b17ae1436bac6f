"""
Tests for PodcastStore initialization, loading and atomic saving.
"""

import json
import os
from unittest.mock import patch

from podcast_rss.errors import PersistenceError
from podcast_rss.models import Episode

from tests.base import PodcastTestBase

# Written by an earlier release: sparse objects and keys this package
# does not model.
LEGACY_DOCUMENT = {
    "rss": {
        "title": "Legacy Show",
        "link": "https://legacy.example.com",
        "language": "fr-fr",
        "owner": {"name": "Host"},
        "custom_flag": "keep-me",
    },
    "episodes": [
        {
            "title": "Legacy episode",
            "description": "Recorded long ago",
            "pub_date": "Wed, 13 Aug 2025 12:00:00 GMT",
            "audio": {
                "url": "https://legacy.example.com/ep.mp3",
                "type": "audio/mpeg",
                "length": "0",
            },
            "guid": {"value": "legacy-1", "is_permalink": "false"},
            "transcript": {},
            "cta": {},
            "utm": {},
            "legacy_note": "from v0",
        }
    ],
    "metadata": {
        "created": "2025-01-01T00:00:00.000Z",
        "lastModified": "2025-01-02T00:00:00.000Z",
        "version": "1.0.0",
    },
    "stats": {"downloads": 10},
}


class TestPodcastStoreInitialize(PodcastTestBase):
    """Test suite for first-run initialization."""

    def test_initialize_empty_directory_writes_defaults(self) -> None:
        """Test that an empty data dir gets the default document."""
        created = self.store.initialize()

        self.assertTrue(created)
        data = self.read_data_file()
        self.assertEqual(data["episodes"], [])
        self.assertEqual(data["rss"]["title"], "My Podcast")
        self.assertEqual(data["rss"]["language"], "en-us")
        self.assertEqual(data["rss"]["itunes_type"], "episodic")
        self.assertEqual(data["rss"]["owner"]["email"], "owner@example.com")
        self.assertEqual(data["metadata"]["version"], "1.0.0")
        self.assertTrue(data["metadata"]["created"].endswith("Z"))

    def test_initialize_creates_nested_data_directory(self) -> None:
        """Test that missing parent directories are created."""
        self.assertFalse(os.path.exists(self.config.data_dir))

        self.store.initialize()

        self.assertTrue(os.path.isdir(self.config.data_dir))
        self.assertTrue(os.path.exists(self.config.data_file))

    def test_initialize_does_not_overwrite_existing_file(self) -> None:
        """Test that initialize is idempotent."""
        self.write_data_file('{"episodes": [], "rss": {"title": "Mine"}}')

        created = self.store.initialize()

        self.assertFalse(created)
        self.assertEqual(self.read_data_file()["rss"]["title"], "Mine")


class TestPodcastStoreLoad(PodcastTestBase):
    """Test suite for strict and resilient reads."""

    def test_read_missing_file_returns_none(self) -> None:
        """Test that an absent file is not an error for read()."""
        self.assertIsNone(self.store.read())

    def test_read_corrupt_file_raises(self) -> None:
        """Test that unparseable JSON surfaces as PersistenceError."""
        self.write_data_file("{not json")

        with self.assertRaises(PersistenceError):
            self.store.read()

    def test_read_without_episode_list_raises(self) -> None:
        """Test that a document whose episodes is not a list is rejected."""
        self.write_data_file('{"rss": {}, "episodes": {"a": 1}}')

        with self.assertRaises(PersistenceError):
            self.store.read()

    def test_read_non_object_raises(self) -> None:
        """Test that a JSON array at top level is rejected."""
        self.write_data_file("[]")

        with self.assertRaises(PersistenceError):
            self.store.read()

    def test_load_missing_file_falls_back_to_defaults(self) -> None:
        """Test that load() logs and returns defaults for an absent file."""
        with self.assertLogs("podcast_rss.store", level="WARNING"):
            document = self.store.load()

        self.assertEqual(document.episodes, [])
        self.assertEqual(document.rss.title, "My Podcast")
        self.assertFalse(os.path.exists(self.config.data_file))

    def test_load_corrupt_file_falls_back_to_defaults(self) -> None:
        """Test that load() never raises on a corrupt file."""
        self.write_data_file("{not json")

        with self.assertLogs("podcast_rss.store", level="ERROR") as logs:
            document = self.store.load()

        self.assertEqual(document.episodes, [])
        self.assertEqual(document.rss.language, "en-us")
        self.assertIn("Error loading data", logs.output[0])

    def test_load_missing_episodes_falls_back_to_defaults(self) -> None:
        """Test that a document without episodes is treated as corrupt."""
        self.write_data_file('{"rss": {"title": "Broken"}}')

        with self.assertLogs("podcast_rss.store", level="ERROR"):
            document = self.store.load()

        self.assertEqual(document.rss.title, "My Podcast")

    def test_load_ignores_unknown_fields(self) -> None:
        """Test that extra keys on disk do not break loading."""
        self.write_data_file(
            json.dumps(
                {
                    "rss": {"title": "Show", "unexpected": 1},
                    "episodes": [
                        {"title": "Ep", "guid": {"value": "g1"}, "extra": 2}
                    ],
                }
            )
        )

        document = self.store.load()

        self.assertEqual(document.rss.title, "Show")
        self.assertEqual(document.episodes[0].guid_value, "g1")
        self.assertEqual(document.episodes[0].guid.is_permalink, "false")

    def test_read_deeply_nested_file_raises(self) -> None:
        """Test that JSON too deep to decode is reported as corrupt."""
        depth = 200000
        self.write_data_file(
            '{"episodes": ' + "[" * depth + "]" * depth + "}"
        )

        with self.assertRaises(PersistenceError):
            self.store.read()

        with self.assertLogs("podcast_rss.store", level="ERROR"):
            document = self.store.load()
        self.assertEqual(document.rss.title, "My Podcast")


class TestPodcastStoreSave(PodcastTestBase):
    """Test suite for backups and atomic writes."""

    def test_save_over_existing_file_creates_one_backup(self) -> None:
        """Test that one backup holds the previous content."""
        self.store.initialize()
        document = self.store.load()
        document.rss.title = "Renamed"

        self.assertTrue(self.store.save(document))

        backups = self.store.backups()
        self.assertEqual(len(backups), 1)
        self.assertRegex(
            backups[0], r"podcast-data\.json\.backup-\d{13}$"
        )
        with open(backups[0], "r", encoding="utf-8") as f:
            self.assertEqual(json.load(f)["rss"]["title"], "My Podcast")
        self.assertEqual(self.read_data_file()["rss"]["title"], "Renamed")

    def test_save_without_existing_file_creates_no_backup(self) -> None:
        """Test that the first save has nothing to back up."""
        with self.assertLogs("podcast_rss.store", level="WARNING"):
            document = self.store.load()

        self.assertTrue(self.store.save(document))

        self.assertEqual(self.store.backups(), [])
        self.assertTrue(os.path.exists(self.config.data_file))

    def test_save_leaves_no_temporary_files(self) -> None:
        """Test that the temp file is renamed over the target."""
        self.store.initialize()
        self.store.save(self.store.load())

        names = os.listdir(self.config.data_dir)
        self.assertFalse([name for name in names if name.endswith(".tmp")])

    def test_save_stamps_metadata(self) -> None:
        """Test that lastModified is refreshed and version defaulted."""
        self.store.initialize()
        document = self.store.load()
        document.metadata.last_modified = "stale"
        document.metadata.version = ""

        self.store.save(document)

        metadata = self.read_data_file()["metadata"]
        self.assertNotEqual(metadata["lastModified"], "stale")
        self.assertTrue(metadata["lastModified"].endswith("Z"))
        self.assertEqual(metadata["version"], "1.0.0")

    def test_save_keeps_existing_version(self) -> None:
        """Test that a set version is not reset."""
        self.store.initialize()
        document = self.store.load()
        document.metadata.version = "2.1.0"

        self.store.save(document)

        self.assertEqual(self.read_data_file()["metadata"]["version"], "2.1.0")

    def test_round_trip_changes_only_last_modified(self) -> None:
        """Test that save(load()) preserves all other content."""
        self.store.initialize()
        document = self.store.load()
        document.episodes.append(
            Episode.from_dict(
                {
                    "title": "Ep1",
                    "description": "d",
                    "pub_date": "Wed, 13 Aug 2025 12:00:00 GMT",
                    "audio": {"url": "http://x/a.mp3", "type": "audio/mpeg"},
                    "guid": {"value": "ep-1", "is_permalink": "false"},
                    "season": "1",
                    "utm": {"source": "podcast"},
                }
            )
        )
        self.store.save(document)
        before = self.read_data_file()

        self.assertTrue(self.store.save(self.store.load()))

        after = self.read_data_file()
        before["metadata"].pop("lastModified")
        after["metadata"].pop("lastModified")
        self.assertEqual(before, after)

    def test_round_trip_preserves_foreign_document_shape(self) -> None:
        """Test save(load()) on a sparse document with extra keys."""
        self.write_data_file(json.dumps(LEGACY_DOCUMENT))

        self.assertTrue(self.store.save(self.store.load()))

        after = self.read_data_file()
        expected = json.loads(json.dumps(LEGACY_DOCUMENT))
        self.assertNotEqual(
            after["metadata"].pop("lastModified"),
            expected["metadata"].pop("lastModified"),
        )
        self.assertEqual(after, expected)

    def test_mutation_keeps_untouched_data(self) -> None:
        """Test that unknown keys survive a change to another episode."""
        self.write_data_file(json.dumps(LEGACY_DOCUMENT))
        document = self.store.load()
        document.episodes.append(Episode.from_dict({"title": "New"}))

        self.store.save(document)

        data = self.read_data_file()
        legacy = data["episodes"][0]
        self.assertEqual(legacy["legacy_note"], "from v0")
        self.assertEqual(legacy["transcript"], {})
        self.assertEqual(legacy["cta"], {})
        self.assertEqual(data["rss"]["custom_flag"], "keep-me")
        self.assertEqual(data["rss"]["owner"], {"name": "Host"})
        self.assertEqual(data["stats"], {"downloads": 10})
        self.assertEqual(data["episodes"][1], {"title": "New"})

    def test_save_failure_returns_false(self) -> None:
        """Test that an I/O error is reported, not raised."""
        self.store.initialize()
        original = self.read_data_file()
        document = self.store.load()
        document.rss.title = "Never written"

        with patch.object(
            self.storage, "write_json_atomic", side_effect=OSError("disk full")
        ):
            with self.assertLogs("podcast_rss.store", level="ERROR"):
                self.assertFalse(self.store.save(document))

        self.assertEqual(self.read_data_file(), original)

    def test_backup_name_advances_when_taken(self) -> None:
        """Test that two saves in the same millisecond keep both backups."""
        self.store.initialize()

        with patch("podcast_rss.store.time.time", return_value=1000.0):
            self.store.save(self.store.load())
            self.store.save(self.store.load())

        names = [os.path.basename(path) for path in self.store.backups()]
        self.assertEqual(
            names,
            [
                "podcast-data.json.backup-1000000",
                "podcast-data.json.backup-1000001",
            ],
        )
