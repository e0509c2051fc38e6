import logging
import os
import shutil
from pathlib import Path

from sysbench_runner.errors import InsufficientSpaceError, PreconditionError

logger = logging.getLogger("SYSBENCH")


def system_memory_bytes() -> int:
    """Physical memory in bytes."""
    return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")


def prepare_work_dir(config) -> Path:
    """Create the work directory and its logs/ subdirectory and make sure both are writable."""
    work_dir = Path(config.work_dir)
    if work_dir.exists() and not work_dir.is_dir():
        raise PreconditionError(f"{work_dir} exists and is not a directory")
    try:
        work_dir.mkdir(parents=True, exist_ok=True)
        config.log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PreconditionError(f"Cannot create {work_dir}: {e}") from e

    for path in (work_dir, config.log_dir):
        if not os.access(path, os.W_OK | os.X_OK):
            raise PreconditionError(f"{path} is not writable")
    logger.debug(f"Work directory ready: {work_dir}")
    return work_dir


def read_marker(marker_file: Path):
    """Return the file size recorded by a previous prepare, or None."""
    try:
        return int(Path(marker_file).read_text().strip())
    except FileNotFoundError:
        return None
    except ValueError:
        logger.warning(f"Ignoring malformed marker file {marker_file}")
        return None


def check_free_space(path, required: int, reusable: int = 0) -> int:
    """Raise InsufficientSpaceError when the filesystem holding path has less than required bytes free."""
    free = shutil.disk_usage(path).free
    available = free + reusable
    logger.info(f"Free space on {path}: {free // (1024 * 1024)} MiB, required: {required // (1024 * 1024)} MiB")
    if available < required:
        raise InsufficientSpaceError(f"Not enough free space in {path}: {available} bytes available, {required} bytes required")
    return free


def check_disk_space(config) -> None:
    """Free space check for the configured file size; test files left by any earlier prepare count as free."""
    if config.cleanup_only:
        return
    prepared = read_marker(config.marker_file)
    reusable = prepared or 0
    check_free_space(config.work_dir, config.file_size, reusable=reusable)
