# Project ID providers
# Supply the default Google Cloud project for identifiers and operations that
# do not name one.

import subprocess
import threading
from typing import List, Optional

import google.auth
import requests
from google.auth.exceptions import DefaultCredentialsError

from gcp_parameter_manager.exceptions.parameter_manager import (
    ProjectIdNotFoundException,
)
from gcp_parameter_manager.helpers.environment import env
from gcp_parameter_manager.helpers.logger import get_logger


PROJECT_ENV_VARS: List[str] = [
    "GOOGLE_CLOUD_PROJECT",
    "GCP_PROJECT",
    "GCLOUD_PROJECT",
    "PROJECT_ID",
]

METADATA_PROJECT_URL = (
    "http://metadata.google.internal/computeMetadata/v1/project/project-id"
)


class StaticProjectIdProvider:
    """Always returns the project ID it was created with."""

    def __init__(self, project_id: str):
        self.project_id = project_id

    def get_project_id(self) -> str:
        return self.project_id


class DefaultProjectIdProvider:
    """
    Detects the project ID of the current environment on first use.

    Sources are tried in order and the first hit is remembered:

    1. ``GOOGLE_CLOUD_PROJECT``, ``GCP_PROJECT``, ``GCLOUD_PROJECT``, ``PROJECT_ID``
       environment variables (``.env`` included)
    2. The project attached to Application Default Credentials
    3. ``gcloud config get-value project``
    4. The Compute Engine metadata server

    Nothing is detected until ``get_project_id()`` is called, so building a
    provider never touches the network.

    Example:
        >>> provider = DefaultProjectIdProvider()
        >>> provider.get_project_id()
        'my-project'
    """

    def __init__(self, metadata_timeout: float = 2.0, gcloud_timeout: float = 5.0):
        self.logger = get_logger("gcp_parameter_manager.services.project_id")
        self.metadata_timeout = metadata_timeout
        self.gcloud_timeout = gcloud_timeout
        self._project_id: Optional[str] = None
        self._lock = threading.Lock()

    def get_project_id(self) -> str:
        """
        Return the detected project ID.

        Raises:
            ProjectIdNotFoundException: If no source yields a project ID.
        """
        with self._lock:
            if self._project_id is None:
                self._project_id = self._detect_project_id()
            return self._project_id

    def _detect_project_id(self) -> str:
        for detect in (
            self._try_env_vars_project_id,
            self._try_default_credentials_project_id,
            self._try_gcloud_config_project_id,
            self._try_metadata_service_project_id,
        ):
            project_id = detect()
            if project_id:
                return project_id

        self.logger.error(
            "Project ID could not be determined from any source",
            extra={
                "attempted_sources": [
                    "environment_variables",
                    "default_credentials",
                    "gcloud_config",
                    "metadata_service",
                ],
                "checked_env_vars": PROJECT_ENV_VARS,
            },
        )
        raise ProjectIdNotFoundException(
            "Project ID must be provided or available in environment. "
            "Set GOOGLE_CLOUD_PROJECT environment variable, configure gcloud CLI, "
            "or provide project_id explicitly."
        )

    def _try_env_vars_project_id(self) -> Optional[str]:
        """Try the standard Google Cloud project environment variables."""
        for env_var in PROJECT_ENV_VARS:
            project_id = env(env_var)
            if project_id:
                self.logger.debug(
                    "Project ID detected from environment variable",
                    extra={
                        "project_id": project_id,
                        "source_env_var": env_var,
                        "detection_method": "environment_variable",
                    },
                )
                return project_id
        return None

    def _try_default_credentials_project_id(self) -> Optional[str]:
        """Try the project associated with Application Default Credentials."""
        try:
            _, project_id = google.auth.default()
        except DefaultCredentialsError as e:
            self.logger.debug(
                "Failed to load default credentials",
                extra={"error": str(e), "detection_method": "default_credentials"},
            )
            return None

        if project_id:
            self.logger.debug(
                "Project ID detected from default credentials",
                extra={
                    "project_id": project_id,
                    "detection_method": "default_credentials",
                },
            )
        return project_id

    def _try_gcloud_config_project_id(self) -> Optional[str]:
        """Try the active gcloud CLI configuration."""
        try:
            result = subprocess.run(
                ["gcloud", "config", "get-value", "project"],
                capture_output=True,
                text=True,
                timeout=self.gcloud_timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            self.logger.debug(
                "Failed to get project from gcloud config",
                extra={"error": str(e), "detection_method": "gcloud_cli"},
            )
            return None

        project_id = result.stdout.strip() if result.returncode == 0 else ""
        if project_id:
            self.logger.debug(
                "Project ID detected from gcloud config",
                extra={"project_id": project_id, "detection_method": "gcloud_cli"},
            )
            return project_id
        return None

    def _try_metadata_service_project_id(self) -> Optional[str]:
        """Try the metadata server available on Google Cloud compute."""
        try:
            response = requests.get(
                METADATA_PROJECT_URL,
                headers={"Metadata-Flavor": "Google"},
                timeout=self.metadata_timeout,
            )
        except requests.RequestException as e:
            self.logger.debug(
                "Failed to get project from metadata service",
                extra={"error": str(e), "detection_method": "gcp_metadata"},
            )
            return None

        if response.status_code == 200 and response.text.strip():
            project_id = response.text.strip()
            self.logger.debug(
                "Project ID detected from metadata service",
                extra={"project_id": project_id, "detection_method": "gcp_metadata"},
            )
            return project_id
        return None
