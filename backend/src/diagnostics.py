"""Diagnostics: faulthandler, structured logging, crash dumps.

Layers:
1. faulthandler: C-level crash tracebacks (SIGSEGV, SIGABRT)
2. sys.excepthook: unhandled Python exceptions → JSON crash dumps
3. Structured logging with RotatingFileHandler
"""

import datetime
import faulthandler
import json
import logging
import logging.handlers
import os
import sys
import traceback
from pathlib import Path

from security import strip_pii

logger = logging.getLogger(__name__)

APP_DIR = "~/.cinecolor"
LOG_FILENAME = "cinecolor.log"
FAULT_FILENAME = "cinecolor_fault.log"

# Maximum crash reports to keep
MAX_CRASH_REPORTS = 5

# Maximum log age in days
MAX_LOG_AGE_DAYS = 7

# Fields of a LogRecord that are not user-supplied `extra=` context
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _validate_log_dir(env_dir: str) -> str:
    """Validate APP_LOG_DIR is under ~/.cinecolor. Returns safe path."""
    default = os.path.expanduser(f"{APP_DIR}/logs")
    if env_dir:
        resolved = os.path.realpath(env_dir)
        allowed = os.path.realpath(os.path.expanduser(APP_DIR))
        if not resolved.startswith(allowed + os.sep) and resolved != allowed:
            logger.warning("APP_LOG_DIR outside allowed prefix, using default")
            return default
        return resolved
    return default


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter. `extra=` fields land under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS
        }
        if context:
            log_entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_entry, default=str)


def _cleanup_old_logs(log_dir: str):
    """Delete log files older than MAX_LOG_AGE_DAYS."""
    cutoff = datetime.datetime.now() - datetime.timedelta(days=MAX_LOG_AGE_DAYS)
    try:
        for f in Path(log_dir).glob(f"{LOG_FILENAME}*"):
            if f.stat().st_mtime < cutoff.timestamp():
                f.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not clean up old logs in %s", log_dir)


def _cleanup_old_crash_reports(crash_dir: str):
    """Keep only the newest MAX_CRASH_REPORTS crash files."""
    try:
        crash_files = sorted(
            Path(crash_dir).glob("crash_*.json"),
            key=lambda f: f.stat().st_mtime,
            reverse=True,
        )
        for old_file in crash_files[MAX_CRASH_REPORTS:]:
            old_file.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not clean up old crash reports in %s", crash_dir)


def setup_structured_logging(log_dir: str | None = None) -> str:
    """Configure structured JSON logging with rotation.

    Args:
        log_dir: Override log directory (validated against ~/.cinecolor prefix).

    Returns:
        The directory actually used.
    """
    resolved_dir = _validate_log_dir(log_dir or os.environ.get("APP_LOG_DIR", ""))
    os.makedirs(resolved_dir, mode=0o700, exist_ok=True)

    log_path = os.path.join(resolved_dir, LOG_FILENAME)
    log_level = os.environ.get("APP_LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))

    # Re-initialization must not stack a second handler on the same file
    for existing in root.handlers:
        if getattr(existing, "baseFilename", None) == os.path.abspath(log_path):
            return resolved_dir

    # Rotating handler: 10MB max, 7 backups
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10_000_000,
        backupCount=7,
    )
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)

    _cleanup_old_logs(resolved_dir)

    return resolved_dir


def setup_faulthandler(log_dir: str):
    """Enable faulthandler for C-level crash tracebacks.

    Uses a SEPARATE file from the main log (RotatingFileHandler would
    invalidate the faulthandler file descriptor on rotation).
    """
    fault_path = os.path.join(log_dir, FAULT_FILENAME)
    try:
        fault_file = open(fault_path, "a", buffering=1)  # noqa: SIM115
        os.chmod(fault_path, 0o600)
        faulthandler.enable(file=fault_file, all_threads=True)
    except OSError as e:
        print(f"WARNING: Could not enable faulthandler: {e}", file=sys.stderr)


def build_crash_report(exc_type, exc_value, exc_tb) -> dict:
    """PII-scrubbed crash data for an exception triple."""
    crash_data = {
        "timestamp": datetime.datetime.now(tz=datetime.timezone.utc).strftime(
            "%Y%m%dT%H%M%SZ"
        ),
        "exception_type": exc_type.__name__ if exc_type else "Unknown",
        "exception_message": str(exc_value),
        "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        "python_version": sys.version,
        "platform": sys.platform,
    }
    # strip_pii works on Sentry events; wrap/unwrap through "extra"
    return strip_pii({"extra": crash_data}, {}).get("extra", crash_data)


def setup_excepthook():
    """Install sys.excepthook that writes structured crash dumps."""
    crash_dir = os.path.expanduser(f"{APP_DIR}/crash_reports")

    def _crash_excepthook(exc_type, exc_value, exc_tb):
        try:
            os.makedirs(crash_dir, mode=0o700, exist_ok=True)
            crash_data = build_crash_report(exc_type, exc_value, exc_tb)
            crash_path = os.path.join(
                crash_dir, f"crash_{crash_data['timestamp']}.json"
            )

            # Write with restricted permissions
            old_umask = os.umask(0o077)
            try:
                with open(crash_path, "w") as f:
                    json.dump(crash_data, f, indent=2)
            finally:
                os.umask(old_umask)

            _cleanup_old_crash_reports(crash_dir)

        except Exception as e:
            # Crash handler failed; fall back to default, do not recurse
            print(f"WARNING: Could not write crash report: {e}", file=sys.stderr)

        # Always call the original excepthook
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _crash_excepthook


def init_diagnostics(log_dir: str | None = None) -> str:
    """Initialize all diagnostic layers. Call from main.py."""
    resolved_dir = setup_structured_logging(log_dir)
    setup_faulthandler(resolved_dir)
    setup_excepthook()
    logger.info(
        "Diagnostics initialized: logging=%s, faulthandler=enabled", resolved_dir
    )
    return resolved_dir
