import argparse
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sysbench_runner import __version__
from sysbench_runner.precheck import system_memory_bytes

DEFAULT_RUN_TIME = 300
DEFAULT_DELAY = 10
DEFAULT_THREADS = 1
DEFAULT_MODES = ["rndrw", "seqrd", "seqwr"]
VALID_MODES = ["seqwr", "seqrewr", "seqrd", "rndrd", "rndwr", "rndrw"]
MARKER_NAME = ".sysbench_prepared"
LOG_DIR_NAME = "logs"

SIZE_UNITS = {"": 1, "B": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}
SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?)(?:I?B)?\s*$", re.IGNORECASE)


def parse_size(value: str) -> int:
    """Convert '8G', '512M', '1.5g' or plain bytes into a byte count."""
    match = SIZE_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid size: {value!r}")
    number, unit = match.groups()
    size = int(float(number) * SIZE_UNITS[unit.upper()])
    if size <= 0:
        raise ValueError(f"Size must be positive: {value!r}")
    return size


def format_size(size: int) -> str:
    for unit in ("T", "G", "M", "K"):
        if size >= SIZE_UNITS[unit] and size % SIZE_UNITS[unit] == 0:
            return f"{size // SIZE_UNITS[unit]}{unit}"
    return f"{size}B"


def default_file_size() -> int:
    return 2 * system_memory_bytes()


@dataclass
class BenchmarkConfig:
    work_dir: Path
    file_size: int
    run_time: int = DEFAULT_RUN_TIME
    delay: int = DEFAULT_DELAY
    skip_cleanup: bool = False
    cleanup_only: bool = False
    verbose: bool = False
    debug: bool = False
    threads: int = DEFAULT_THREADS
    modes: List[str] = field(default_factory=lambda: list(DEFAULT_MODES))
    plot: Optional[str] = None
    xlsx: bool = False

    @property
    def log_dir(self) -> Path:
        return self.work_dir / LOG_DIR_NAME

    @property
    def marker_file(self) -> Path:
        return self.work_dir / MARKER_NAME

    @property
    def file_size_mb(self) -> int:
        return max(1, self.file_size // SIZE_UNITS["M"])


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _non_negative_int(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _size(value):
    try:
        return parse_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _modes(value):
    modes = [mode.strip() for mode in value.split(",") if mode.strip()]
    unknown = [mode for mode in modes if mode not in VALID_MODES]
    if not modes or unknown:
        raise argparse.ArgumentTypeError(f"invalid mode(s) {','.join(unknown) or value!r}, choose from {','.join(VALID_MODES)}")
    return modes


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="sysbench-runner", description="Run sysbench fileio disk benchmarks (prepare, run, cleanup)")
    parser.add_argument("-w", "--work-dir", required=True, type=Path, help="Directory where test files and logs are created")
    parser.add_argument("-f", "--file-size", type=_size, help="Total test file size, e.g. 16G (default: 2x system memory)")
    parser.add_argument("-t", "--time", dest="run_time", type=_positive_int, default=DEFAULT_RUN_TIME, help=f"Seconds per run mode (default: {DEFAULT_RUN_TIME})")
    parser.add_argument("-d", "--delay", type=_non_negative_int, default=DEFAULT_DELAY, help=f"Seconds to wait between phases (default: {DEFAULT_DELAY})")
    parser.add_argument("-s", "--skip-cleanup", action="store_true", help="Keep test files after the benchmark")
    parser.add_argument("-c", "--cleanup", dest="cleanup_only", action="store_true", help="Only remove previously prepared test files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Echo sysbench output to the console")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--threads", type=_positive_int, default=DEFAULT_THREADS, help=f"sysbench worker threads (default: {DEFAULT_THREADS})")
    parser.add_argument("--modes", type=_modes, default=list(DEFAULT_MODES), help=f"Comma separated run modes (default: {','.join(DEFAULT_MODES)})")
    parser.add_argument("--plot", nargs="?", const="iops", choices=["iops", "bw"], help="Save an iops (default) or bw bar chart next to the log")
    parser.add_argument("--xlsx", action="store_true", help="Save an Excel report next to the log")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> BenchmarkConfig:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.skip_cleanup and args.cleanup_only:
        parser.error("--skip-cleanup and --cleanup are mutually exclusive")

    return BenchmarkConfig(
        work_dir=args.work_dir.expanduser().absolute(),
        file_size=args.file_size if args.file_size is not None else default_file_size(),
        run_time=args.run_time,
        delay=args.delay,
        skip_cleanup=args.skip_cleanup,
        cleanup_only=args.cleanup_only,
        verbose=args.verbose,
        debug=args.debug,
        threads=args.threads,
        modes=args.modes,
        plot=args.plot,
        xlsx=args.xlsx,
    )
