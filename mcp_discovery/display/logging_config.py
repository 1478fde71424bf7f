"""Logging configuration setup."""

import copy
import logging
import logging.config
import os
import re
import sys
from typing import Optional, Set, Tuple  # noqa: UP035

# ── Secret redaction filter ──────────────────────────────────────────────

_REDACTED = "***REDACTED***"


class SecretRedactionFilter(logging.Filter):
    """Logging filter that replaces registered secret values with a placeholder.

    Registry request headers (bearer tokens for private registries) are
    registered when the registry is built.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: Set[str] = set()
        self._pattern: Optional[re.Pattern[str]] = None

    def register(self, value: str) -> None:
        """Register a secret value for redaction."""
        if value and len(value) >= 4:  # skip trivially short values
            self._secrets.add(value)
            # Longest first so overlapping secrets redact fully
            escaped = sorted((re.escape(s) for s in self._secrets), key=len, reverse=True)
            self._pattern = re.compile("|".join(escaped))

    def redact(self, text: str) -> str:
        if self._pattern is None:
            return text
        return self._pattern.sub(_REDACTED, text)

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is not None:
            if isinstance(record.msg, str):
                record.msg = self.redact(record.msg)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {
                        k: self.redact(v) if isinstance(v, str) else v
                        for k, v in record.args.items()
                    }
                elif isinstance(record.args, tuple):
                    record.args = tuple(
                        self.redact(a) if isinstance(a, str) else a for a in record.args
                    )
        return True


# Module-level singleton so registry builders can register header values.
secret_redaction_filter = SecretRedactionFilter()

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_file": {
            "format": ("%(asctime)s - %(name)30s:%(lineno)-4d - " "%(levelname)-7s - %(message)s"),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "console": {
            "format": "%(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console_handler": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "console",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "mcp_discovery": {
            "handlers": ["console_handler"],
            "propagate": False,
            "level": "WARNING",
        },
        "httpx": {
            "handlers": ["console_handler"],
            "propagate": False,
            "level": "WARNING",
        },
    },
    "root": {
        "handlers": ["console_handler"],
        "level": "WARNING",
    },
}


def setup_logging(
    log_lvl_str: str,
    log_path: Optional[str] = None,
    *,
    quiet: bool = True,
) -> Tuple[Optional[str], str]:
    """
    Set up the logging system.

    Logs go to stderr unless *log_path* is given, in which case a file
    handler replaces the console handler.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').
        log_path: Optional log file path.
        quiet: If *False*, report invalid levels and config errors on stderr.

    Returns:
        A tuple of (log_file_path or None, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in VALID_LEVELS:
        if not quiet:
            print(f"Warning: invalid log level '{log_lvl_str}'. Using 'INFO'.", file=sys.stderr)
        log_lvl_valid = "INFO"

    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    handler_name = "console_handler"
    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler_name = "file_handler"
        log_cfg["handlers"] = {
            handler_name: {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "formatter": "simple_file",
                "filename": log_path,
                "encoding": "utf-8",
            },
        }

    for name, logger_cfg in log_cfg["loggers"].items():
        logger_cfg["handlers"] = [handler_name]
        if name == "mcp_discovery":
            logger_cfg["level"] = log_lvl_valid
    log_cfg["loggers"]["httpx"]["level"] = "INFO" if log_lvl_valid == "DEBUG" else "WARNING"
    log_cfg["root"]["handlers"] = [handler_name]
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    try:
        logging.config.dictConfig(log_cfg)
        # Attach secret redaction filter to all handlers
        for handler in logging.root.handlers:
            handler.addFilter(secret_redaction_filter)
        for handler in logging.getLogger("mcp_discovery").handlers:
            handler.addFilter(secret_redaction_filter)
    except (ValueError, TypeError, AttributeError, ImportError, OSError) as e_log_cfg:
        if not quiet:
            print(
                f"Error applying logging configuration: {e_log_cfg}",
                file=sys.stderr,
            )

    return log_path, log_lvl_valid
