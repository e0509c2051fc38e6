import logging
from typing import Optional

from sysbench_runner.command_runner import CommandRunner
from sysbench_runner.distro import OsInfo, detect_os
from sysbench_runner.errors import CommandError, InstallError

logger = logging.getLogger("SYSBENCH")

SYSBENCH = "sysbench"

INSTALL_STEPS = {
    "apt": [("apt-get update", False), ("apt-get install -y sysbench", False)],
    "yum": [("yum install -y epel-release", True), ("yum install -y sysbench", False)],
}


def ensure_sysbench(runner: Optional[CommandRunner] = None, os_info: Optional[OsInfo] = None) -> bool:
    """
    Make sure the sysbench binary is available.
    :return: True if it had to be installed, False if it was already present.
    """
    runner = runner or CommandRunner()
    if runner.command_exists(SYSBENCH):
        logger.info("sysbench is already installed")
        return False

    os_info = os_info or detect_os(runner)
    steps = INSTALL_STEPS.get(os_info.package_manager)
    if steps is None:
        raise InstallError(f"No install recipe for package manager {os_info.package_manager}")

    logger.info(f"Installing sysbench with {os_info.package_manager}")
    for cmd, ignore_error in steps:
        try:
            runner.sudo_run(cmd, ignoreError=ignore_error)
        except CommandError as e:
            raise InstallError(f"Failed to install sysbench: {e}") from e

    if not runner.command_exists(SYSBENCH):
        raise InstallError("sysbench is still not available after installation")
    logger.info("sysbench installed")
    return True
