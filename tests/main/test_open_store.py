import logging
import tempfile
import unittest
from pathlib import Path

from main import open_store
from storage import JsonFileStore, MemoryStore
from tasks import TaskStore


class OpenStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger("test.main")

    def test_readable_file_opens_json_store(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "defaults.json"
            path.write_text('{"completedPomodoros": 3}', encoding="utf-8")

            store = open_store(str(path), self.logger)

            self.assertIsInstance(store, JsonFileStore)
            self.assertEqual(3, store.get("completedPomodoros"))

    def test_missing_file_opens_empty_json_store(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = open_store(str(Path(temp_dir) / "defaults.json"), self.logger)
            self.assertIsInstance(store, JsonFileStore)

    def test_corrupt_file_falls_back_to_memory(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "defaults.json"
            path.write_text("{not json", encoding="utf-8")

            with self.assertLogs("test.main", level="WARNING"):
                store = open_store(str(path), self.logger)

            self.assertIsInstance(store, MemoryStore)
            tasks = TaskStore(store)
            self.assertIsNotNone(tasks.add("still works"))
            self.assertEqual("{not json", path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
