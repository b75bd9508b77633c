import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from gcp_parameter_manager.helpers.environment import env

from .base import BaseLogger


class JsonLineFormatter(logging.Formatter):
    """Render each record as a single JSON object using Cloud Logging field names."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "service": record.name,
            "environment": env("APP_ENVIRONMENT", "unknown"),
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            **getattr(record, "context", {}),
        }
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }
        return json.dumps(payload, default=str)


class StandardLogger(BaseLogger):
    """Structured logger on top of the standard library ``logging`` module."""

    def __init__(self, service_name: str, level: str = "INFO"):
        self.service_name = service_name
        self.level = level.upper()
        self.logger = logging.getLogger(service_name)
        self.logger.setLevel(self._resolve_level(self.level))

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JsonLineFormatter())
            self.logger.addHandler(handler)
            self.logger.propagate = False

    @staticmethod
    def _resolve_level(level: str) -> int:
        """Map a level name to its number, falling back to INFO for unknown names."""
        resolved = logging.getLevelName(level)
        return resolved if isinstance(resolved, int) else logging.INFO

    def _log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        # LogRecord reserves keys such as "message"; nest the context instead
        self.logger.log(
            level,
            message,
            extra={"context": self.sanitize(extra or {})},
            exc_info=exc_info,
        )

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.WARNING, message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.ERROR, message, extra)

    def critical(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.CRITICAL, message, extra)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log(logging.ERROR, message, extra, exc_info=True)
