import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from sysbench_runner.command_runner import CommandRunner
from sysbench_runner.errors import UnsupportedDistroError

logger = logging.getLogger("SYSBENCH")

OS_RELEASE = Path("/etc/os-release")
REDHAT_RELEASE = Path("/etc/redhat-release")

APT_DISTROS = {"debian", "ubuntu", "linuxmint", "raspbian", "pop"}
YUM_DISTROS = {"rhel", "centos", "fedora", "rocky", "almalinux", "amzn", "ol"}


@dataclass
class OsInfo:
    distro_id: str
    version: str
    package_manager: str


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse KEY=value lines of an os-release file."""
    info = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        info[key.strip()] = value.strip().strip('"').strip("'")
    return info


def package_manager_for(distro_id: str, id_like: str = "") -> Optional[str]:
    distro_id = distro_id.lower()
    like = set(id_like.lower().split())
    if distro_id in APT_DISTROS or "debian" in like or "ubuntu" in like:
        return "apt"
    if distro_id in YUM_DISTROS or like & {"rhel", "fedora", "centos"}:
        return "yum"
    return None


def _from_os_release(path: Path):
    if not path.exists():
        return None
    info = parse_os_release(path.read_text(errors="ignore"))
    if "ID" not in info:
        return None
    return info["ID"], info.get("VERSION_ID", ""), info.get("ID_LIKE", "")


def _from_lsb_release(runner: CommandRunner):
    if not runner.command_exists("lsb_release"):
        return None
    distro_id = runner.run_command("lsb_release -si", ignoreError=True)
    if not distro_id:
        return None
    version = runner.run_command("lsb_release -sr", ignoreError=True) or ""
    return distro_id.lower(), version, ""


def _from_redhat_release(path: Path):
    if not path.exists():
        return None
    text = path.read_text(errors="ignore").strip()
    match = re.search(r"release\s+([\d.]+)", text)
    name = text.split()[0].lower() if text else "rhel"
    distro_id = {"red": "rhel", "centos": "centos", "fedora": "fedora", "rocky": "rocky"}.get(name, "rhel")
    return distro_id, match.group(1) if match else "", "rhel"


def detect_os(runner: Optional[CommandRunner] = None, os_release: Path = OS_RELEASE, redhat_release: Path = REDHAT_RELEASE) -> OsInfo:
    """Identify the distribution and the package manager to use for it."""
    runner = runner or CommandRunner()
    detected = _from_os_release(os_release) or _from_lsb_release(runner) or _from_redhat_release(redhat_release)
    if not detected:
        raise UnsupportedDistroError("Unable to identify the operating system")

    distro_id, version, id_like = detected
    package_manager = package_manager_for(distro_id, id_like)
    if not package_manager:
        raise UnsupportedDistroError(f"Unsupported distribution: {distro_id} {version}".rstrip())

    logger.info(f"Detected OS: {distro_id} {version} (package manager: {package_manager})")
    return OsInfo(distro_id, version, package_manager)
