"""Google Cloud Parameter Manager integration with ``pm@`` identifier resolution."""

from gcp_parameter_manager.config.parameter_manager import (
    ParameterManagerSettings,
    create_parameter_manager_service,
)
from gcp_parameter_manager.exceptions.parameter_manager import (
    MalformedParameterIdentifierException,
    ParameterManagerDisabledException,
    ParameterManagerException,
    ProjectIdNotFoundException,
)
from gcp_parameter_manager.helpers.parameter_identifier import (
    PARAMETER_PREFIX,
    get_parameter_version_name,
    is_parameter_reference,
)
from gcp_parameter_manager.models.parameter_manager import (
    LocationName,
    ParameterFormat,
    ParameterName,
    ParameterVersionName,
)
from gcp_parameter_manager.requests.parameter_manager import ParameterCreateRequest
from gcp_parameter_manager.services.parameter_manager import ParameterManagerService
from gcp_parameter_manager.services.project_id import (
    DefaultProjectIdProvider,
    StaticProjectIdProvider,
)
from gcp_parameter_manager.services.property_source import (
    ParameterManagerPropertySource,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "PARAMETER_PREFIX",
    "DefaultProjectIdProvider",
    "LocationName",
    "MalformedParameterIdentifierException",
    "ParameterCreateRequest",
    "ParameterFormat",
    "ParameterManagerDisabledException",
    "ParameterManagerException",
    "ParameterManagerPropertySource",
    "ParameterManagerService",
    "ParameterManagerSettings",
    "ParameterName",
    "ParameterVersionName",
    "ProjectIdNotFoundException",
    "StaticProjectIdProvider",
    "create_parameter_manager_service",
    "get_parameter_version_name",
    "is_parameter_reference",
]
