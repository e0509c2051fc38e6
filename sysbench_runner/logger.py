import logging
import sys
from pathlib import Path

LOG_NAME = "SYSBENCH"
FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BOLD = "\033[1m"
    END = "\033[0m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.CYAN,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.BOLD + Colors.RED,
}


class ColorFormatter(logging.Formatter):
    """Wrap the level name in an ANSI color when writing to a terminal."""

    def __init__(self, fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record):
        if not self.use_color:
            return super().format(record)
        levelname = record.levelname
        record.levelname = f"{LEVEL_COLORS.get(record.levelno, '')}{levelname}{Colors.END}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record):
        return record.levelno < self.max_level


def _is_tty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def set_logger(log_name=LOG_NAME, level=logging.INFO, stdout=None, stderr=None):
    """Console logger: DEBUG/INFO go to stdout, WARNING and above to stderr."""
    logger = logging.getLogger(log_name)
    if logger.handlers:
        logger.setLevel(level)
        return logger

    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    out_handler = logging.StreamHandler(stdout)
    out_handler.addFilter(MaxLevelFilter(logging.WARNING))
    out_handler.setFormatter(ColorFormatter(use_color=_is_tty(stdout)))

    err_handler = logging.StreamHandler(stderr)
    err_handler.setLevel(logging.WARNING)
    err_handler.setFormatter(ColorFormatter(use_color=_is_tty(stderr)))

    logger.addHandler(out_handler)
    logger.addHandler(err_handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger


def add_file_handler(logger: logging.Logger, log_file) -> logging.FileHandler:
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)
    return file_handler
