"""Logging setup for helpwire.

Every event reaches the console, the combined helpwire.log, and the
file of its subsystem (bus.log, dispatch.log, modules.log, triggers.log).
Each subsystem logger is "helpwire.<subsystem>" and propagates upward.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict

import structlog

# One log file per subsystem
SUBSYSTEMS = ("bus", "dispatch", "modules", "triggers")

LOGGER_PREFIX = "helpwire"

# Keys whose values identify a chat user
_SOURCE_KEYS = ("source", "sender", "target")

# Identifiers at most this long are left as-is (ordinary nicks)
_MAX_VISIBLE_SOURCE = 16


def _mask(value: str) -> str:
    if len(value) <= _MAX_VISIBLE_SOURCE or value.startswith("#"):
        return value
    return "..." + value[-4:]


def mask_sources(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that abbreviates long sender identifiers.

    Nicks and channel names pass through. Long opaque identifiers
    (phone numbers, UUIDs, bridge ids) are cut to their last 4 chars.
    """
    for key in _SOURCE_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = _mask(value)
    return event_dict


def _level(name: str, default: int) -> int:
    return getattr(logging, name.upper(), default) if name else default


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int,
                  formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(config=None) -> None:
    """Configure structlog and the stdlib handlers behind it.

    Called twice by the console entry point: once with no config, so
    startup errors are visible, and again once the Config is loaded.
    Only the second call caches bound loggers.
    """
    if config is not None:
        log_dir = config.log_dir
        root_level = _level(config.logging_level, logging.INFO)
        subsystem_levels = config.logging_subsystem_levels
        max_bytes = config.logging_max_file_size_mb * 1024 * 1024
        backup_count = config.logging_backup_count
    else:
        log_dir = Path.cwd() / "logs"
        root_level = logging.INFO
        subsystem_levels = {}
        max_bytes = 10 * 1024 * 1024
        backup_count = 5

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        write_files = True
    except OSError as exc:
        print(
            f"WARNING: Cannot create log directory {log_dir}: {exc}. "
            "Logging to the console only.",
            file=sys.stderr,
        )
        write_files = False

    file_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(root_level)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    root_logger.addHandler(console)

    combined = logging.getLogger(LOGGER_PREFIX)
    combined.setLevel(logging.DEBUG)
    combined.handlers.clear()
    if write_files:
        combined.addHandler(_file_handler(
            log_dir / f"{LOGGER_PREFIX}.log", root_level, max_bytes, backup_count, file_formatter
        ))

    for subsystem in SUBSYSTEMS:
        level = _level(subsystem_levels.get(subsystem, ""), root_level)
        sub_logger = logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}")
        sub_logger.setLevel(level)
        sub_logger.handlers.clear()
        if write_files:
            sub_logger.addHandler(_file_handler(
                log_dir / f"{subsystem}.log", level, max_bytes, backup_count, file_formatter
            ))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            mask_sources,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=config is not None,
    )
