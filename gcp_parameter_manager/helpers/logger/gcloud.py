"""
Google Cloud Logging backend.

Entries are written with ``log_struct`` so that ``extra`` context lands in
``jsonPayload`` and can be filtered in the Logs Explorer. Inside Cloud Run
(``K_SERVICE`` set) stdout is already collected as structured logs, so the
logger prints one JSON object per line instead of calling the API.
"""

import json
import sys
from functools import lru_cache
from typing import Any, Dict, Optional

from google.auth.exceptions import DefaultCredentialsError
from google.cloud import logging as gcp_logging
from google.cloud.logging_v2.resource import Resource

from gcp_parameter_manager.helpers.environment import env

from .base import BaseLogger


@lru_cache(maxsize=1)
def get_gcp_logging_client() -> Optional[gcp_logging.Client]:
    """Get or create the shared Cloud Logging client, or None without credentials."""
    try:
        return gcp_logging.Client()
    except (DefaultCredentialsError, OSError):
        return None


class GCloudLogger(BaseLogger):
    """Structured logger writing to Google Cloud Logging."""

    SEVERITY_ORDER = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def __init__(self, service_name: str, level: str = "INFO"):
        self.service_name = service_name
        self.level = level.upper()

        if env("K_SERVICE") is not None:
            self.client = None
        else:
            self.client = get_gcp_logging_client()
        self.logger = self.client.logger(service_name) if self.client else None
        self.resource = self._get_resource()

    def _get_resource(self) -> Resource:
        """Describe the monitored resource so entries group under the right service."""
        service = env("K_SERVICE")
        function_name = env("FUNCTION_NAME")

        if service:
            return Resource(
                type="cloud_run_revision",
                labels={
                    "service_name": service,
                    "revision_name": env("K_REVISION", "unknown"),
                    "configuration_name": env("K_CONFIGURATION", service),
                    "location": env("FUNCTION_REGION", "us-central1"),
                },
            )
        if function_name:
            return Resource(
                type="cloud_function",
                labels={
                    "function_name": function_name,
                    "region": env("FUNCTION_REGION", "us-central1"),
                },
            )
        return Resource(type="global", labels={})

    def _is_enabled_for(self, severity: str) -> bool:
        threshold = self.level if self.level in self.SEVERITY_ORDER else "INFO"
        return self.SEVERITY_ORDER.index(severity) >= self.SEVERITY_ORDER.index(
            threshold
        )

    def _write_log(
        self, severity: str, message: str, extra: Optional[Dict[str, Any]] = None
    ):
        if not self._is_enabled_for(severity):
            return

        json_payload = {
            "message": message,
            "service": self.service_name,
            "environment": env("APP_ENVIRONMENT", "unknown"),
            **self.sanitize(extra or {}),
        }

        if self.logger is not None:
            self.logger.log_struct(
                json_payload,
                severity=severity,
                resource=self.resource,
                labels={
                    "service": self.service_name,
                    "environment": env("APP_ENVIRONMENT", "production"),
                },
            )
        else:
            print(json.dumps({"severity": severity, **json_payload}, default=str))
            sys.stdout.flush()

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._write_log("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._write_log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._write_log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._write_log("ERROR", message, extra)

    def critical(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._write_log("CRITICAL", message, extra)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log at ERROR, attaching the exception currently being handled."""
        exc_type, exc_value, _ = sys.exc_info()
        if exc_type is not None:
            extra = dict(extra or {})
            extra["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
            }
        self._write_log("ERROR", message, extra)
