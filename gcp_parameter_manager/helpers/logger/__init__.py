from gcp_parameter_manager.helpers.environment import env

from .base import BaseLogger
from .standard import StandardLogger


def get_logger(service_name: str) -> BaseLogger:
    """
    Return a structured logger for ``service_name``.

    ``LOG_CHANNEL=gcloud`` sends entries to Google Cloud Logging; any other
    value logs JSON lines to stdout. ``LOG_LEVEL`` sets the threshold.
    """
    level = env("LOG_LEVEL", "INFO")
    channel = (env("LOG_CHANNEL", "default") or "default").lower()

    if channel == "gcloud":
        from .gcloud import GCloudLogger

        return GCloudLogger(service_name, level=level)

    return StandardLogger(service_name, level=level)


__all__ = ["BaseLogger", "StandardLogger", "get_logger"]
