import math
import unittest
from datetime import datetime, timedelta
from repo_content_migrator.models import (
    BatchProgress,
    FileDescriptor,
    MigrationResult,
    MigrationSummary,
    batch_files,
)


class TestBatchFiles(unittest.TestCase):

    def test_batch_sizes(self):
        """Test ceil(F / B) batches with the remainder in the last one."""
        for total, size in [(1, 50), (49, 50), (50, 50), (51, 50), (7, 3), (9, 3), (10, 1)]:
            with self.subTest(total=total, size=size):
                batches = batch_files(list(range(total)), size)
                self.assertEqual(len(batches), math.ceil(total / size))
                self.assertEqual(len(batches[-1]), total % size or size)
                self.assertEqual([item for batch in batches for item in batch], list(range(total)))

    def test_empty_list(self):
        """Test that no files means no batches."""
        self.assertEqual(batch_files([], 50), [])

    def test_invalid_batch_size(self):
        """Test that a batch size below one is rejected."""
        with self.assertRaises(ValueError):
            batch_files([1, 2], 0)


class TestFileDescriptor(unittest.TestCase):

    def test_from_api(self):
        """Test building a descriptor from a listing entry."""
        item = FileDescriptor.from_api({
            "name": "b.txt", "path": "dir/b.txt", "sha": "abc", "size": 12, "type": "file",
            "url": "https://api.github.com/repos/o/r/contents/dir/b.txt"
        })

        self.assertEqual(item, FileDescriptor(path="dir/b.txt", type="file", sha="abc", size=12, name="b.txt"))
        self.assertTrue(item.is_file)
        self.assertFalse(item.is_dir)

    def test_from_api_without_name(self):
        """Test that the name defaults to the last path segment."""
        item = FileDescriptor.from_api({"path": "a/b/c.md", "type": "dir"})

        self.assertEqual(item.name, "c.md")
        self.assertTrue(item.is_dir)


class TestResultsAndSummary(unittest.TestCase):

    def test_result_file_name(self):
        self.assertEqual(MigrationResult("dir/sub/x.py", True).file_name, "x.py")

    def test_summary_status(self):
        """Test success flag and failed paths."""
        results = [MigrationResult("a", True), MigrationResult("b", False, "boom")]
        summary = MigrationSummary(total_files=2, success_count=1, fail_count=1, duration=0.1, results=results)

        self.assertFalse(summary.succeeded)
        self.assertEqual(summary.failed_paths, ["b"])
        self.assertEqual(summary.success_count + summary.fail_count, summary.total_files)

    def test_batch_progress_estimate(self):
        """Test that completion is extrapolated from the time per processed file."""
        start = datetime(2024, 1, 1, 12, 0, 0)
        now = start + timedelta(seconds=10)

        progress = BatchProgress.snapshot(1, 4, 10, 40, start, now)

        self.assertEqual(progress.estimated_completion, now + timedelta(seconds=30))
        self.assertEqual(progress.percent_complete, 25.0)

    def test_batch_progress_without_processed_files(self):
        start = datetime(2024, 1, 1)

        progress = BatchProgress.snapshot(0, 0, 0, 0, start, start)

        self.assertIsNone(progress.estimated_completion)
        self.assertEqual(progress.percent_complete, 100.0)


if __name__ == '__main__':
    unittest.main()
