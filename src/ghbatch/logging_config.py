import logging
import json
import sys


class SafeStreamHandler(logging.StreamHandler):
    """
    Stream handler that gracefully handles closed streams during shutdown.
    """

    def emit(self, record):
        try:
            super().emit(record)
        except (ValueError, OSError) as e:
            # Closed stream during interpreter shutdown
            if "closed file" in str(e).lower() or "bad file descriptor" in str(e).lower():
                pass
            else:
                raise


class StructuredLogFormatter(logging.Formatter):
    """
    Formats log records as structured JSON with contextual fields.
    """

    CONTEXT_FIELDS = ("owner", "repo", "branch", "step", "commit_sha", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add contextual fields if present
        for field in self.CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
        # Add exception info if present
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_record["exception"] = record.exc_text
        return json.dumps(log_record, ensure_ascii=False)


def configure_logging(log_level: str = "INFO", structured: bool = True) -> None:
    """
    Centralized logging configuration for ghbatch.
    Sets up root logger on stderr, as JSON lines or plain text.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = SafeStreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())
    # Silence overly verbose loggers
    logging.getLogger("asyncio").setLevel("WARNING")
    logging.getLogger("aiohttp").setLevel("WARNING")
