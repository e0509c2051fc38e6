import logging
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from sysbench_runner import sysbench
from sysbench_runner.errors import BenchmarkError, BenchmarkInterrupted
from sysbench_runner.precheck import read_marker
from sysbench_runner.sysbench import FileioMetrics

logger = logging.getLogger("SYSBENCH")

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass
class PhaseResult:
    phase: str
    mode: Optional[str]
    returncode: int
    elapsed: float
    output: str = ""
    metrics: Optional[FileioMetrics] = None

    @property
    def label(self) -> str:
        return f"{self.phase}:{self.mode}" if self.mode else self.phase


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:d}:{minutes:02d}:{secs:02d}" if hours else f"{minutes:02d}:{secs:02d}"


class BenchmarkRunner:
    """Drive sysbench fileio through prepare, one run per mode and cleanup, one child process at a time."""

    def __init__(self, config, log_file, popen=subprocess.Popen, sleep=time.sleep, clock=time.monotonic, progress_stream=None, poll_interval: float = 1.0, kill_timeout: float = 10.0):
        self.config = config
        self.log_file = Path(log_file)
        self.popen = popen
        self.sleep = sleep
        self.clock = clock
        self.progress_stream = progress_stream or sys.stdout
        self.poll_interval = poll_interval
        self.kill_timeout = kill_timeout
        self.proc = None
        self.interrupted: Optional[int] = None
        self.prepare_started = False
        self.results: List[PhaseResult] = []
        self._previous_handlers = {}
        self._progress_shown = False

    # signal handling

    def install_signal_handlers(self):
        for signum in HANDLED_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self.handle_signal)

    def restore_signal_handlers(self):
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers = {}

    def handle_signal(self, signum, frame=None):
        """Record the signal and ask the child to stop; the poll loop reaps it."""
        self.interrupted = signum
        proc = self.proc
        if proc is not None and proc.returncode is None:
            proc.terminate()

    def terminate_child(self):
        proc = self.proc
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=self.kill_timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    def _check_interrupted(self):
        if self.interrupted is not None:
            raise BenchmarkInterrupted(self.interrupted)

    # progress

    def _show_progress(self, label: str, elapsed: float, duration: Optional[int]):
        isatty = getattr(self.progress_stream, "isatty", None)
        if not (isatty and isatty()):
            return
        if duration:
            pct = min(100, int(elapsed * 100 / duration))
            line = f"\r[{label}] {format_duration(elapsed)} / {format_duration(duration)} ({pct}%)"
        else:
            line = f"\r[{label}] elapsed {format_duration(elapsed)}"
        self.progress_stream.write(line)
        self.progress_stream.flush()
        self._progress_shown = True

    def _end_progress(self):
        if self._progress_shown:
            self.progress_stream.write("\n")
            self.progress_stream.flush()
            self._progress_shown = False

    # phases

    def _read_output(self, offset: int) -> str:
        with open(self.log_file, "rb") as f:
            f.seek(offset)
            return f.read().decode(errors="replace")

    def _run_phase(self, phase: str, cmd: List[str], mode: Optional[str] = None, duration: Optional[int] = None) -> PhaseResult:
        label = f"{phase}:{mode}" if mode else phase
        logger.info(f"Starting {label}: {' '.join(cmd)}")
        offset = self.log_file.stat().st_size if self.log_file.exists() else 0

        start = self.clock()
        with open(self.log_file, "a") as log:
            try:
                self.proc = self.popen(cmd, cwd=str(self.config.work_dir), stdout=log, stderr=subprocess.STDOUT, text=True)
            except OSError as e:
                raise BenchmarkError(f"Cannot start sysbench {label}: {e}") from e
            try:
                while self.proc.poll() is None and self.interrupted is None:
                    self._show_progress(label, self.clock() - start, duration)
                    self.sleep(self.poll_interval)
                if self.interrupted is not None:
                    self.terminate_child()
            finally:
                self._end_progress()
            returncode = self.proc.returncode
            self.proc = None
        elapsed = self.clock() - start

        self._check_interrupted()

        output = self._read_output(offset)
        if self.config.verbose:
            for line in output.splitlines():
                self.progress_stream.write(f"[{label}] {line}\n")
            self.progress_stream.flush()

        if returncode != 0:
            raise BenchmarkError(f"sysbench {label} failed with exit code {returncode} (see {self.log_file})")

        result = PhaseResult(phase, mode, returncode, elapsed, output)
        if phase == "run":
            result.metrics = sysbench.parse_fileio_output(output)
        self.results.append(result)
        logger.info(f"Finished {label} in {format_duration(elapsed)}")
        return result

    def _pause(self):
        remaining = self.config.delay
        if remaining <= 0:
            return
        logger.info(f"Waiting {remaining}s before the next phase")
        while remaining > 0 and self.interrupted is None:
            step = min(self.poll_interval, remaining)
            self.sleep(step)
            remaining -= step
        self._check_interrupted()

    def prepare(self) -> Optional[PhaseResult]:
        config = self.config
        if read_marker(config.marker_file) == config.file_size:
            logger.info(f"Test files of {config.file_size_mb} MiB already prepared in {config.work_dir}, skipping prepare")
            self.prepare_started = True
            return None

        self.prepare_started = True
        result = self._run_phase("prepare", sysbench.prepare_command(config.file_size_mb, config.threads))
        config.marker_file.write_text(str(config.file_size))
        return result

    def run_mode(self, mode: str) -> PhaseResult:
        config = self.config
        cmd = sysbench.run_command(config.file_size_mb, mode, config.run_time, config.threads)
        return self._run_phase("run", cmd, mode=mode, duration=config.run_time)

    def cleanup(self) -> PhaseResult:
        config = self.config
        file_size = read_marker(config.marker_file) or config.file_size
        size_mb = max(1, file_size // (1024 * 1024))
        result = self._run_phase("cleanup", sysbench.cleanup_command(size_mb, config.threads))
        config.marker_file.unlink(missing_ok=True)
        return result

    def run(self) -> List[PhaseResult]:
        config = self.config
        self.install_signal_handlers()
        try:
            if config.cleanup_only:
                self.cleanup()
                return self.results

            try:
                self.prepare()
                for mode in config.modes:
                    self._pause()
                    self.run_mode(mode)
                if not config.skip_cleanup:
                    self._pause()
            except BenchmarkInterrupted as e:
                if self.prepare_started:
                    logger.warning(f"{e}, cleaning up test files")
                    self.interrupted = None
                    self.cleanup()
                raise

            if config.skip_cleanup:
                logger.info(f"Skipping cleanup, test files kept in {config.work_dir}")
            else:
                self.cleanup()
            return self.results
        finally:
            self.restore_signal_handlers()
