"""Logging configuration: console, JSON log file and the human-readable run log."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from pythonjsonlogger import jsonlogger

from gallery_collector.config import Settings, settings as default_settings

RUN_LOG_NAME = "run.txt"
JSON_LOG_NAME = "run.jsonl"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with timestamp, level and source location fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['source'] = f"{record.filename}:{record.lineno}"

        if record.funcName:
            log_record['function'] = record.funcName


class RunLogFormatter(logging.Formatter):
    """One line per record: ``[ISO timestamp] message``."""

    def format(self, record):
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        return f"[{stamp}] {record.getMessage()}"


def setup_logging(config: Settings | None = None) -> logging.Logger:
    """Configure logging for a collection run.

    The run log in the debug directory is truncated at the start of each run.

    Args:
        config: Settings to read the log level and debug directory from.
                Defaults to the module-level settings.
    """
    config = config or default_settings

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    # Console handler (human-readable)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root_logger.addHandler(console_handler)

    # File logs are diagnostic; an unwritable debug dir leaves console logging only
    debug_dir = Path(config.debug_dir)
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)

        # Run log (line-oriented, for post-run inspection)
        run_handler = logging.FileHandler(debug_dir / RUN_LOG_NAME, mode="w", encoding="utf-8")
        run_handler.setLevel(logging.DEBUG)
        run_handler.setFormatter(RunLogFormatter())
        root_logger.addHandler(run_handler)

        # Structured log
        json_handler = logging.FileHandler(debug_dir / JSON_LOG_NAME, mode="w", encoding="utf-8")
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
        root_logger.addHandler(json_handler)
    except OSError as e:
        root_logger.warning(f"Debug log files disabled, cannot write to {debug_dir}: {e}")

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its context into each record's ``extra``."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with optional context fields.

    Args:
        name: Logger name (usually __name__)
        **context: Additional context fields (e.g., backend='bing_images')
    """
    return LoggerAdapter(logging.getLogger(name), context)
