# Parameter Manager configuration
#
#   GCP_PARAMETER_MANAGER_ENABLED                  default: true
#   GCP_PARAMETER_MANAGER_PROJECT_ID               default: detected
#   GCP_PARAMETER_MANAGER_LOCATION                 default: global
#   GCP_PARAMETER_MANAGER_ALLOW_DEFAULT_PARAMETER  default: false

from typing import Optional

from google.auth.credentials import Credentials
from google.cloud import parametermanager_v1
from pydantic import BaseModel

from gcp_parameter_manager.exceptions.parameter_manager import (
    ParameterManagerDisabledException,
)
from gcp_parameter_manager.helpers.environment import env, env_bool
from gcp_parameter_manager.models.parameter_manager import GLOBAL_LOCATION
from gcp_parameter_manager.services.parameter_manager import ParameterManagerService


class ParameterManagerSettings(BaseModel):
    enabled: bool = True
    project_id: Optional[str] = None
    location: str = GLOBAL_LOCATION
    allow_default_parameter: bool = False

    @classmethod
    def from_env(cls) -> "ParameterManagerSettings":
        """Build settings from ``GCP_PARAMETER_MANAGER_*`` environment variables."""
        return cls(
            enabled=env_bool("GCP_PARAMETER_MANAGER_ENABLED", True),
            project_id=env("GCP_PARAMETER_MANAGER_PROJECT_ID") or None,
            location=env("GCP_PARAMETER_MANAGER_LOCATION") or GLOBAL_LOCATION,
            allow_default_parameter=env_bool(
                "GCP_PARAMETER_MANAGER_ALLOW_DEFAULT_PARAMETER", False
            ),
        )


def create_parameter_manager_service(
    settings: Optional[ParameterManagerSettings] = None,
    client: Optional[parametermanager_v1.ParameterManagerClient] = None,
    credentials: Optional[Credentials] = None,
) -> ParameterManagerService:
    """
    Create a ParameterManagerService from settings.

    A configured ``project_id`` overrides project detection.

    Raises:
        ParameterManagerDisabledException: If the integration is disabled
    """
    settings = settings or ParameterManagerSettings.from_env()
    if not settings.enabled:
        raise ParameterManagerDisabledException(
            "GCP Parameter Manager integration is disabled "
            "(GCP_PARAMETER_MANAGER_ENABLED=false)"
        )

    return ParameterManagerService(
        client=client,
        project_id=settings.project_id,
        location=settings.location,
        credentials=credentials,
        allow_default_parameter_value=settings.allow_default_parameter,
    )
