import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


_LOG_FILE_NAME = "angebotpdf.log"
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5
_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_CONFIGURED_MARKER = "_ap_logging_configured"

# Per-request access lines drown out the build log
_QUIET_LOGGERS = ("uvicorn.access",)


def _log_level(debug: bool | None) -> int:
    if debug is None:
        debug = os.getenv("AP_DEBUG") == "1"
    return logging.DEBUG if debug else logging.INFO


def default_log_dir() -> Path:
    configured = os.getenv("AP_LOG_DIR")
    if configured:
        return Path(configured)
    return Path(os.getenv("AP_ROOT_DIR") or ".") / "data" / "logs"


def _build_handlers(log_dir: Path) -> list[logging.Handler]:
    log_dir.mkdir(parents=True, exist_ok=True)
    return [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            log_dir / _LOG_FILE_NAME,
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        ),
    ]


def setup_logging(log_dir: Path | None = None, *, debug: bool | None = None) -> None:
    """
    Log to stdout and to a rotating ``angebotpdf.log``.

    Safe to call repeatedly: later calls only adjust the level, so the CLI and
    the preview server can both call it without duplicating handlers.
    """
    level = _log_level(debug)
    root_logger = logging.getLogger()
    if getattr(root_logger, _CONFIGURED_MARKER, False):
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return

    formatter = logging.Formatter(_LOG_FORMAT)
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in _build_handlers(log_dir or default_log_dir()):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    setattr(root_logger, _CONFIGURED_MARKER, True)
    logging.getLogger(__name__).debug("logging.configured level=%s", logging.getLevelName(level))
