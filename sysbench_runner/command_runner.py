import logging
import os
import shlex
import subprocess
from typing import List, Optional, Union

from sysbench_runner.errors import CommandError, PrivilegeError

logger = logging.getLogger("SYSBENCH")


class CommandRunner:
    def __init__(self, ignoreError: bool = False, return_stdout: bool = True):
        self.ignoreError = ignoreError
        self.return_stdout = return_stdout
        self.returncode = None
        self.lastOut = ""

    @staticmethod
    def is_root() -> bool:
        return os.geteuid() == 0

    def sudo_prefix(self) -> List[str]:
        """Prefix for privileged commands; raise when neither root nor sudo is available."""
        if self.is_root():
            return []
        if self.command_exists("sudo"):
            return ["sudo"]
        raise PrivilegeError("Root privileges are required (run as root or install sudo)")

    def run_command(self, cmd: Union[str, List[str]], ignoreError: Optional[bool] = None) -> Optional[str]:
        """Run a command and return its stripped stdout."""
        cmd_args = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
        cmd_str = " ".join(cmd_args)
        ignoreError = self.ignoreError if ignoreError is None else ignoreError
        logger.debug(f"Executing command: {cmd_str}")
        try:
            result = subprocess.run(cmd_args, text=True, stdout=subprocess.PIPE if self.return_stdout else None, stderr=subprocess.STDOUT)
        except OSError as e:
            self.returncode = 127
            if ignoreError:
                logger.debug(f"Ignoring failure of {cmd_str}: {e}")
                return None
            raise CommandError(cmd_str, self.returncode, str(e)) from e

        self.returncode = result.returncode
        self.lastOut = result.stdout.strip() if self.return_stdout and result.stdout else ""
        if result.returncode != 0:
            if not ignoreError:
                raise CommandError(cmd_str, result.returncode, self.lastOut)
            logger.debug(f"Ignoring failure of {cmd_str} (rc={result.returncode})")
        return self.lastOut

    def sudo_run(self, cmd: Union[str, List[str]], ignoreError: Optional[bool] = None) -> Optional[str]:
        """Run a command with sudo unless already root."""
        cmd_args = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
        return self.run_command(self.sudo_prefix() + cmd_args, ignoreError=ignoreError)

    @staticmethod
    def command_exists(cmd: str) -> bool:
        """Check if a command exists on the system."""
        return subprocess.call(f"type {shlex.quote(cmd)}", shell=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE) == 0
