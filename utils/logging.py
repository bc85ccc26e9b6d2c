"""
Structured logging for the indexer.

Install the logger once at startup:

        from utils.logging import setup_logging
        setup_logging(logging.INFO)

and log with the usual `logging` calls, passing structured values in `extra`:

        logging.info("[Router] Event skipped", extra={"contract_address": address})

Each record is rendered as one JSON document:
    {
        "timestamp": "2021-03-15T14:29:31.000Z",
        "level": "INFO",
        "fields": {
            "message": "[Router] Event skipped",
            "contract_address": "0x..."
        },
        "module": "router",
        "func_name": "route",
        "path_name": "/.../processors/item_exchange/router.py",
        "line_no": 41
    }
"""

import logging

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "item_exchange_indexer"


class CustomLogger(logging.Logger):
    """Nests the `extra` dict under a single `fields` attribute of the record so
    structured values never collide with LogRecord attributes."""

    def makeRecord(
        self, name, level, fn, lno, msg, args, exc_info, func=None, extra=None, sinfo=None
    ):
        extra = {"fields": extra} if extra else None
        return super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func, extra, sinfo
        )


class JsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        fields = {
            "message": record.getMessage(),
            **getattr(record, "fields", {}),
            **message_dict,
        }
        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["fields"] = fields
        log_record["module"] = record.module
        log_record["func_name"] = record.funcName
        log_record["path_name"] = record.pathname
        log_record["line_no"] = record.lineno


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    logger = CustomLogger(DEFAULT_LOGGER_NAME)
    logger.setLevel(level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(JsonFormatter())
    logger.addHandler(stream_handler)

    # Module level logging.* calls go through the root logger
    logging.root = logger
    return logger
