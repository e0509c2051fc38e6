import re
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

SYSBENCH = "sysbench"

METRIC_PATTERNS = {
    "reads_per_sec": r"reads/s:\s*([\d.]+)",
    "writes_per_sec": r"writes/s:\s*([\d.]+)",
    "fsyncs_per_sec": r"fsyncs/s:\s*([\d.]+)",
    "read_mib_per_sec": r"read,\s*MiB/s:\s*([\d.]+)",
    "written_mib_per_sec": r"written,\s*MiB/s:\s*([\d.]+)",
    "latency_avg_ms": r"avg:\s*([\d.]+)",
    "latency_p95_ms": r"95th percentile:\s*([\d.]+)",
}


@dataclass
class FileioMetrics:
    reads_per_sec: float = 0.0
    writes_per_sec: float = 0.0
    fsyncs_per_sec: float = 0.0
    read_mib_per_sec: float = 0.0
    written_mib_per_sec: float = 0.0
    latency_avg_ms: float = 0.0
    latency_p95_ms: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def base_command(file_size_mb: int, threads: int = 1) -> List[str]:
    return [SYSBENCH, "fileio", f"--file-total-size={file_size_mb}M", f"--threads={threads}"]


def prepare_command(file_size_mb: int, threads: int = 1) -> List[str]:
    return base_command(file_size_mb, threads) + ["prepare"]


def run_command(file_size_mb: int, mode: str, run_time: int, threads: int = 1) -> List[str]:
    return base_command(file_size_mb, threads) + [
        f"--file-test-mode={mode}",
        f"--time={run_time}",
        "--max-requests=0",
        "--report-interval=0",
        "run",
    ]


def cleanup_command(file_size_mb: int, threads: int = 1) -> List[str]:
    return base_command(file_size_mb, threads) + ["cleanup"]


def parse_fileio_output(text: str) -> Optional[FileioMetrics]:
    """Extract the summary numbers from `sysbench fileio ... run` output."""
    if not text or "File operations" not in text:
        return None
    metrics = FileioMetrics()
    latency_section = text[text.find("Latency"):] if "Latency" in text else ""
    for name, pattern in METRIC_PATTERNS.items():
        match = re.search(pattern, latency_section if name.startswith("latency") else text)
        if match:
            setattr(metrics, name, float(match.group(1)))
    return metrics
