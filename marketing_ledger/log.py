"""Structured logging for the marketing ledger process."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from marketing_ledger.config import settings


PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(service_name)s %(name)s %(message)s"


class ServiceNameFilter(logging.Filter):
    """Tag every record with the service name so shipped logs can be grouped."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = settings.APP_NAME
        return True


def configure_logging() -> None:
    """Configure the root logger once per process."""

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ServiceNameFilter())
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.LOG_LEVEL)
