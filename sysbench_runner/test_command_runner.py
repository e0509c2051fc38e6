import subprocess
import unittest
from unittest.mock import MagicMock, patch

from sysbench_runner.command_runner import CommandRunner
from sysbench_runner.errors import CommandError, PrivilegeError


class TestCommandRunner(unittest.TestCase):
    @patch("sysbench_runner.command_runner.subprocess.run")
    def test_run_command_success(self, mock_run):
        mock_run.return_value = MagicMock(stdout="output\n", returncode=0)
        runner = CommandRunner()
        self.assertEqual(runner.run_command("echo test"), "output")
        self.assertEqual(runner.returncode, 0)
        mock_run.assert_called_once()
        self.assertEqual(mock_run.call_args[0][0], ["echo", "test"])

    @patch("sysbench_runner.command_runner.subprocess.run")
    def test_run_command_failure(self, mock_run):
        mock_run.return_value = MagicMock(stdout="boom", returncode=2)
        with self.assertRaises(CommandError) as ctx:
            CommandRunner().run_command("false")
        self.assertEqual(ctx.exception.returncode, 2)
        self.assertIn("boom", str(ctx.exception))

    @patch("sysbench_runner.command_runner.subprocess.run")
    def test_run_command_ignore_error(self, mock_run):
        mock_run.return_value = MagicMock(stdout="partial", returncode=1)
        runner = CommandRunner()
        self.assertEqual(runner.run_command("false", ignoreError=True), "partial")
        self.assertEqual(runner.returncode, 1)

    @patch("sysbench_runner.command_runner.subprocess.run", side_effect=FileNotFoundError("missing"))
    def test_missing_binary(self, mock_run):
        with self.assertRaises(CommandError):
            CommandRunner().run_command("nosuchcmd")
        self.assertIsNone(CommandRunner().run_command("nosuchcmd", ignoreError=True))

    @patch("sysbench_runner.command_runner.subprocess.run")
    @patch("sysbench_runner.command_runner.os.geteuid", return_value=1000)
    @patch.object(CommandRunner, "command_exists", return_value=True)
    def test_sudo_run_prefixes_sudo(self, mock_exists, mock_euid, mock_run):
        mock_run.return_value = MagicMock(stdout="", returncode=0)
        CommandRunner().sudo_run("apt-get update")
        self.assertEqual(mock_run.call_args[0][0], ["sudo", "apt-get", "update"])

    @patch("sysbench_runner.command_runner.subprocess.run")
    @patch("sysbench_runner.command_runner.os.geteuid", return_value=0)
    def test_sudo_run_as_root(self, mock_euid, mock_run):
        mock_run.return_value = MagicMock(stdout="", returncode=0)
        CommandRunner().sudo_run(["yum", "install", "-y", "sysbench"])
        self.assertEqual(mock_run.call_args[0][0], ["yum", "install", "-y", "sysbench"])

    @patch("sysbench_runner.command_runner.os.geteuid", return_value=1000)
    @patch.object(CommandRunner, "command_exists", return_value=False)
    def test_no_privileges(self, mock_exists, mock_euid):
        with self.assertRaises(PrivilegeError):
            CommandRunner().sudo_run("apt-get update")

    @patch("sysbench_runner.command_runner.subprocess.call", return_value=0)
    def test_command_exists(self, mock_call):
        self.assertTrue(CommandRunner.command_exists("sysbench"))
        self.assertEqual(mock_call.call_args[0][0], "type sysbench")
        self.assertEqual(mock_call.call_args[1]["stdout"], subprocess.PIPE)


if __name__ == "__main__":
    unittest.main()
