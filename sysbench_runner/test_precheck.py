import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from sysbench_runner.config import BenchmarkConfig
from sysbench_runner.errors import InsufficientSpaceError, PreconditionError
from sysbench_runner.precheck import check_disk_space, check_free_space, prepare_work_dir, read_marker

MiB = 1024 * 1024


class TestPrepareWorkDir(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_creates_work_and_log_dirs(self):
        config = BenchmarkConfig(work_dir=self.root / "a" / "b", file_size=MiB)
        prepare_work_dir(config)
        self.assertTrue(config.work_dir.is_dir())
        self.assertTrue(config.log_dir.is_dir())

    def test_existing_file_is_rejected(self):
        target = self.root / "file"
        target.write_text("x")
        with self.assertRaises(PreconditionError):
            prepare_work_dir(BenchmarkConfig(work_dir=target, file_size=MiB))

    @patch("sysbench_runner.precheck.Path.mkdir", side_effect=PermissionError("denied"))
    def test_mkdir_failure(self, mock_mkdir):
        with self.assertRaises(PreconditionError):
            prepare_work_dir(BenchmarkConfig(work_dir=self.root / "new", file_size=MiB))

    def test_read_marker(self):
        marker = self.root / ".sysbench_prepared"
        self.assertIsNone(read_marker(marker))
        marker.write_text("1048576\n")
        self.assertEqual(read_marker(marker), MiB)
        marker.write_text("garbage")
        self.assertIsNone(read_marker(marker))


class TestFreeSpace(unittest.TestCase):
    @patch("sysbench_runner.precheck.shutil.disk_usage")
    def test_insufficient_space(self, mock_usage):
        mock_usage.return_value = MagicMock(free=100 * MiB)
        with self.assertRaises(InsufficientSpaceError):
            check_free_space("/data", 200 * MiB)

    @patch("sysbench_runner.precheck.shutil.disk_usage")
    def test_enough_space(self, mock_usage):
        mock_usage.return_value = MagicMock(free=300 * MiB)
        self.assertEqual(check_free_space("/data", 200 * MiB), 300 * MiB)
        mock_usage.assert_called_once_with("/data")

    @patch("sysbench_runner.precheck.shutil.disk_usage")
    def test_prepared_files_count_as_free(self, mock_usage):
        mock_usage.return_value = MagicMock(free=50 * MiB)
        with tempfile.TemporaryDirectory() as tmp:
            config = BenchmarkConfig(work_dir=Path(tmp), file_size=200 * MiB)
            config.marker_file.write_text(str(200 * MiB))
            check_disk_space(config)

            config.marker_file.write_text(str(100 * MiB))
            with self.assertRaises(InsufficientSpaceError):
                check_disk_space(config)

    @patch("sysbench_runner.precheck.shutil.disk_usage")
    def test_files_of_another_size_count_as_free(self, mock_usage):
        # 150 MiB free plus 100 MiB of old test files covers a 200 MiB prepare
        mock_usage.return_value = MagicMock(free=150 * MiB)
        with tempfile.TemporaryDirectory() as tmp:
            config = BenchmarkConfig(work_dir=Path(tmp), file_size=200 * MiB)
            config.marker_file.write_text(str(100 * MiB))
            check_disk_space(config)

            config.marker_file.unlink()
            with self.assertRaises(InsufficientSpaceError):
                check_disk_space(config)

    @patch("sysbench_runner.precheck.shutil.disk_usage")
    def test_cleanup_only_skips_check(self, mock_usage):
        check_disk_space(BenchmarkConfig(work_dir=Path("/data"), file_size=MiB, cleanup_only=True))
        mock_usage.assert_not_called()


if __name__ == "__main__":
    unittest.main()
