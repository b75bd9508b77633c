from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseLogger(ABC):
    """
    Interface shared by every logger returned from ``get_logger``.

    Each method takes a message and an optional ``extra`` dict of structured
    context, e.g. ``logger.info("Starting x", extra={"parameter_id": "db"})``.
    """

    # Keys whose values are never written to a log sink
    SENSITIVE_FIELDS = frozenset(
        {
            "password",
            "token",
            "secret",
            "key",
            "auth",
            "credentials",
            "api_key",
            "access_token",
            "refresh_token",
            "private_key",
            "authorization",
            "cookie",
            "session",
        }
    )

    def sanitize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively redact sensitive values.

        Args:
            data: Dictionary to sanitize

        Returns:
            A new dictionary with sensitive values replaced by ``[REDACTED]``
        """
        if not isinstance(data, dict):
            return data

        sanitized = {}
        for key, value in data.items():
            if str(key).lower() in self.SENSITIVE_FIELDS:
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = self.sanitize(value)
            elif isinstance(value, list):
                sanitized[key] = [
                    self.sanitize(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                sanitized[key] = value
        return sanitized

    @abstractmethod
    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None): ...

    @abstractmethod
    def info(self, message: str, extra: Optional[Dict[str, Any]] = None): ...

    @abstractmethod
    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None): ...

    @abstractmethod
    def error(self, message: str, extra: Optional[Dict[str, Any]] = None): ...

    @abstractmethod
    def critical(self, message: str, extra: Optional[Dict[str, Any]] = None): ...

    @abstractmethod
    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None): ...
