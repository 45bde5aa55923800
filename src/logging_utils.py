"""
Unified logging utilities for the convergence duel engine.

Entrypoints call configure_logging() once at startup. Library modules only
ever do ``logger = logging.getLogger(__name__)``.
"""
import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, List, Optional, Union

# Track whether logging has been configured
_logging_configured = False
_session_id: Optional[str] = None
_HANDLER_TAG = "_dgs_handler"
_CONSOLE_FMT = '%(asctime)s | %(levelname)-5s | %(name)s | %(message)s'
_CONSOLE_FMT_WITH_SESSION = '%(asctime)s | %(levelname)-5s | %(name)s | session=%(session_id)s | %(message)s'
_FILE_FMT = '%(asctime)s | %(levelname)-5s | %(name)s | %(funcName)s:%(lineno)d | session=%(session_id)s | %(message)s'


class SessionIdFilter(logging.Filter):
    """Inject the game session id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id or "-"
        return True


def set_session_id(session_id: Optional[str]) -> None:
    """Set the session id stamped on log records."""
    global _session_id
    _session_id = session_id


def configure_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    file_level: str = 'DEBUG',
    force: bool = False,
    session_id: Optional[str] = None,
    console: bool = True,
    show_session_id: bool = False,
) -> None:
    """
    Configure logging for the whole process.

    Subsequent calls are ignored unless force=True.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to a log file
        file_level: Log level for file output
        force: Reconfigure even if already configured
        session_id: Optional game session identifier stamped on records
        console: Whether to install a stdout handler
        show_session_id: Include the session id in console output

    Environment variable overrides:
        LOG_LEVEL: Overrides ``level``
        LOG_FILE: Used when ``log_file`` is not given
    """
    global _logging_configured

    if session_id:
        set_session_id(session_id)

    if _logging_configured and not force:
        return

    level = os.getenv('LOG_LEVEL', level).upper()
    if log_file is None:
        log_file = os.getenv('LOG_FILE')

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Only remove handlers we installed ourselves
    for handler in root.handlers[:]:
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)

    root.filters = [f for f in root.filters if not isinstance(f, SessionIdFilter)]
    root.addFilter(SessionIdFilter())

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level, logging.INFO))
        fmt = _CONSOLE_FMT_WITH_SESSION if (show_session_id or level == "DEBUG") else _CONSOLE_FMT
        console_handler.setFormatter(logging.Formatter(fmt, datefmt='%H:%M:%S'))
        console_handler.addFilter(SessionIdFilter())
        setattr(console_handler, _HANDLER_TAG, True)
        root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
        file_handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt='%Y-%m-%d %H:%M:%S'))
        file_handler.addFilter(SessionIdFilter())
        setattr(file_handler, _HANDLER_TAG, True)
        root.addHandler(file_handler)

    _logging_configured = True

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, file=%s, session=%s", level, log_file or 'none', _session_id or '-'
    )


@contextmanager
def stage_timer(stage_name: str, logger: Optional[logging.Logger] = None):
    """
    Time a pipeline stage.

    Logs the start at DEBUG and the completion with elapsed time at INFO,
    also when the wrapped block raises.

    Usage:
        with stage_timer("Candidate scoring", logger):
            metrics = score_candidates(...)
    """
    logger = logger or logging.getLogger(__name__)
    logger.debug(f"{stage_name} starting...")
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if elapsed < 1:
            logger.info(f"{stage_name} completed in {elapsed * 1000:.0f}ms")
        else:
            logger.info(f"{stage_name} completed in {elapsed:.1f}s")


def format_count(n: int, singular: str, plural: Optional[str] = None) -> str:
    """Format a count with the right singular/plural form ("1 option", "9 options")."""
    if plural is None:
        plural = singular + 's'
    return f"{n:,} {singular if n == 1 else plural}"


def truncate_list(items: List[Any], max_items: int = 3, format_fn=str) -> str:
    """
    Format a list for logging, truncating if needed.

    Returns:
        Formatted string like "rock, pop, jazz (+5 more)"
    """
    if not items:
        return "(none)"

    result = ', '.join(format_fn(item) for item in items[:max_items])
    if len(items) > max_items:
        result += f" (+{len(items) - max_items} more)"
    return result


def add_logging_args(parser) -> None:
    """
    Add the standard logging CLI arguments to an argparse parser.

    Usage:
        parser = argparse.ArgumentParser()
        add_logging_args(parser)
        args = parser.parse_args()
        configure_logging(level=resolve_log_level(args), log_file=args.log_file)
    """
    group = parser.add_argument_group('logging')
    group.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Set logging level (default: INFO)',
    )
    group.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging (shortcut for --log-level DEBUG)',
    )
    group.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress most output (shortcut for --log-level WARNING)',
    )
    group.add_argument(
        '--log-file',
        type=str,
        metavar='PATH',
        help='Write logs to file',
    )


def resolve_log_level(args) -> str:
    """Resolve the log level from parsed arguments: --debug > --quiet > --log-level."""
    if getattr(args, 'debug', False):
        return 'DEBUG'
    if getattr(args, 'quiet', False):
        return 'WARNING'
    return getattr(args, 'log_level', 'INFO')


class RunSummary:
    """
    Collect metrics during a selection round and log a summary at the end.

    Usage:
        summary = RunSummary("Round 3")
        summary.add("candidates", 140)
        summary.increment("filtered_targets")
        summary.log()
    """

    def __init__(self, title: str, logger: Optional[logging.Logger] = None):
        self.title = title
        self.logger = logger or logging.getLogger(__name__)
        self.metrics: dict = {}
        self.timing: Optional[float] = None
        self.start_time = time.perf_counter()

    def add(self, key: str, value: Union[int, float, str]) -> None:
        """Add a metric to the summary."""
        self.metrics[key] = value

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter metric."""
        self.metrics[key] = self.metrics.get(key, 0) + amount

    def set_timing(self, seconds: float) -> None:
        """Set explicit timing (otherwise uses time since init)."""
        self.timing = seconds

    def log(self, level: int = logging.INFO) -> None:
        elapsed = self.timing if self.timing is not None else (time.perf_counter() - self.start_time)

        self.logger.log(level, "=" * 60)
        self.logger.log(level, f"{self.title.upper()} SUMMARY")
        for key, value in self.metrics.items():
            display_key = key.replace('_', ' ').title()
            if isinstance(value, float):
                self.logger.log(level, f"  {display_key}: {value:.3f}")
            else:
                self.logger.log(level, f"  {display_key}: {value}")
        self.logger.log(level, f"  Total Time: {elapsed * 1000:.0f}ms")
        self.logger.log(level, "=" * 60)
