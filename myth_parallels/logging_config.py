"""
Logging setup for the service process.

Console lines stay short (level and message). The file log is verbose and
one file is written per process start, named <stem>_<YYYYmmdd_HHMMSS>.log
next to the configured path, so the newest sessions sort last by name.
"""
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

MAX_SESSION_LOGS = 5
SESSION_LOG_MAX_BYTES = 10 * 1024 * 1024
SESSION_LOG_BACKUPS = 10

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

NOISY_LOGGERS = ("uvicorn.access", "asyncpg")


def _prune_session_logs(log_dir: Path, stem: str, keep: int) -> List[Path]:
    """Delete all but the newest `keep` session files; return the deleted paths"""
    sessions = sorted(log_dir.glob(f"{stem}_*.log"), reverse=True)
    removed = []
    for path in sessions[keep:]:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        removed.append(path)
    return removed


def setup_logging(
    log_file: str = "logs/myth-parallels.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route the root logger to stdout and to a fresh session file.

    Args:
        log_file: Base log path; its directory is created when missing
        console_level: Minimum level printed to stdout
        file_level: Minimum level written to the session file

    Returns:
        Path of the session log opened by this call
    """
    base = Path(log_file)
    base.parent.mkdir(parents=True, exist_ok=True)

    removed = _prune_session_logs(base.parent, base.stem, keep=MAX_SESSION_LOGS - 1)
    session_log = base.parent / f"{base.stem}_{datetime.now():%Y%m%d_%H%M%S}.log"

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    session = RotatingFileHandler(
        session_log,
        maxBytes=SESSION_LOG_MAX_BYTES,
        backupCount=SESSION_LOG_BACKUPS,
        encoding='utf-8',
    )
    session.setLevel(file_level)
    session.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    root.addHandler(console)
    root.addHandler(session)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging to {session_log} "
        f"(console={logging.getLevelName(console_level)}, file={logging.getLevelName(file_level)})"
    )
    if removed:
        logger.debug(f"Removed {len(removed)} old session log(s)")

    return session_log
