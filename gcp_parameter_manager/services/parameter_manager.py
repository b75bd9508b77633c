# Parameter Manager Service
# Parameter and parameter version operations addressed by pm@ identifiers

import threading
import time
from datetime import datetime
from typing import Callable, Dict, Optional, Type, TypeVar, Union

from google.api_core import exceptions as gcp_exceptions
from google.api_core.client_options import ClientOptions
from google.auth.credentials import Credentials
from google.cloud import parametermanager_v1
from google.protobuf import field_mask_pb2
from pydantic import BaseModel, ValidationError

from gcp_parameter_manager.exceptions.parameter_manager import (
    MalformedParameterIdentifierException,
)
from gcp_parameter_manager.helpers.logger import get_logger
from gcp_parameter_manager.helpers.parameter_identifier import (
    PARAMETER_PREFIX,
    ProjectIdProvider,
    get_parameter_version_name,
)
from gcp_parameter_manager.models.parameter_manager import (
    GLOBAL_LOCATION,
    ParameterFormat,
    ParameterName,
    ParameterVersionName,
)
from gcp_parameter_manager.requests.parameter_manager import ParameterCreateRequest
from gcp_parameter_manager.responses.parameter_manager import (
    ParameterOperationResponse,
)
from gcp_parameter_manager.services.project_id import (
    DefaultProjectIdProvider,
    StaticProjectIdProvider,
)


ParameterIdentifier = Union[str, ParameterVersionName]
NameT = TypeVar("NameT", bound=BaseModel)


def _build_name(model: Type[NameT], **fields: str) -> NameT:
    """Build a resource name, reporting empty or missing parts as malformed."""
    try:
        return model(**fields)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise MalformedParameterIdentifierException(
            f"Invalid GCP Parameter Manager resource name ({details}): {fields}"
        ) from e


class ParameterManagerService:
    """
    Service class for Google Cloud Parameter Manager.

    Reads parameter versions by ``pm@`` identifier and manages parameters and
    versions by their IDs. Operations that take IDs accept an optional
    ``location_id`` (defaults to the service location, ``global`` unless
    configured) and ``project_id`` (defaults to the project ID provider).
    A blank ID raises ``MalformedParameterIdentifierException`` before any API
    call is made.

    Every call goes straight to the Parameter Manager API; nothing is cached.
    Errors raised by the API client are logged and re-raised unchanged, except
    that ``NotFound`` on reads becomes ``None`` when
    ``allow_default_parameter_value`` is enabled.

    Attributes:
        location: Default location for operations taking IDs
        allow_default_parameter_value: Return None instead of raising NotFound
            on reads
        logger: Framework logger instance for structured logging

    Example:
        >>> service = ParameterManagerService(project_id="my-project")
        >>> service.create_parameter(
        ...     ParameterCreateRequest(
        ...         parameter_id="app-config", version_id="v1", payload="debug=false"
        ...     )
        ... )
        >>> service.get_parameter_string("pm@app-config/v1")
        'debug=false'
    """

    def __init__(
        self,
        client: Optional[parametermanager_v1.ParameterManagerClient] = None,
        project_id: Optional[str] = None,
        project_id_provider: Optional[ProjectIdProvider] = None,
        location: str = GLOBAL_LOCATION,
        credentials: Optional[Credentials] = None,
        allow_default_parameter_value: bool = False,
    ):
        """
        Initialize the Parameter Manager service.

        Args:
            client: Parameter Manager client to use for every location. If None,
                clients are created on first use, one per location.
            project_id: Default project ID. Takes precedence over
                ``project_id_provider``.
            project_id_provider: Supplies the default project ID. If neither this
                nor ``project_id`` is given, the project is detected from the
                environment on first use.
            location: Default location for operations taking IDs.
            credentials: Credentials passed to clients created by the service.
            allow_default_parameter_value: Return None from reads of missing
                parameter versions instead of raising NotFound.
        """
        self.logger = get_logger("gcp_parameter_manager.services.parameter_manager")

        if project_id:
            self.project_id_provider = StaticProjectIdProvider(project_id)
        elif project_id_provider is not None:
            self.project_id_provider = project_id_provider
        else:
            self.project_id_provider = DefaultProjectIdProvider()

        self.location = location
        self.credentials = credentials
        self.allow_default_parameter_value = allow_default_parameter_value

        self._client = client
        self._clients: Dict[str, parametermanager_v1.ParameterManagerClient] = {}
        self._clients_lock = threading.Lock()

        self.logger.info(
            "ParameterManagerService initialized",
            extra={
                "location": self.location,
                "client_type": "ParameterManagerClient",
                "client_injected": client is not None,
                "project_id_provider": type(self.project_id_provider).__name__,
                "allow_default_parameter_value": allow_default_parameter_value,
            },
        )

    def set_allow_default_parameter_value(
        self, allow_default_parameter_value: bool
    ) -> "ParameterManagerService":
        """Toggle whether reads of missing versions return None. Returns self."""
        self.allow_default_parameter_value = allow_default_parameter_value
        return self

    def get_project_id(self) -> str:
        """Return the default project ID."""
        return self.project_id_provider.get_project_id()

    def _get_client(self, location: str) -> parametermanager_v1.ParameterManagerClient:
        """
        Return the client serving ``location``.

        Regional parameters are only reachable through their regional endpoint,
        so clients are kept per location.
        """
        if self._client is not None:
            return self._client

        with self._clients_lock:
            if location not in self._clients:
                start_time = time.time()
                client_options = None
                if location != GLOBAL_LOCATION:
                    client_options = ClientOptions(
                        api_endpoint=f"parametermanager.{location}.rep.googleapis.com"
                    )
                self._clients[location] = parametermanager_v1.ParameterManagerClient(
                    credentials=self.credentials, client_options=client_options
                )
                self.logger.info(
                    "Parameter Manager client created",
                    extra={
                        "location": location,
                        "api_endpoint": (
                            client_options.api_endpoint if client_options else "default"
                        ),
                        "credential_source": (
                            "custom_credentials"
                            if self.credentials
                            else "default_credentials"
                        ),
                        "initialization_time_ms": round(
                            (time.time() - start_time) * 1000, 2
                        ),
                    },
                )
            return self._clients[location]

    def _log_operation_start(self, operation: str, **context) -> float:
        """
        Log the start of an operation and return start time for timing.

        Args:
            operation: Name of the operation being started
            **context: Additional context to include in logs

        Returns:
            Start time for calculating operation duration
        """
        start_time = time.time()
        self.logger.info(
            f"Starting {operation}",
            extra={"operation": operation, **context},
        )
        return start_time

    def _log_operation_success(self, operation: str, start_time: float, **context):
        duration_ms = round((time.time() - start_time) * 1000, 2)
        self.logger.info(
            f"Completed {operation}",
            extra={"operation": operation, "duration_ms": duration_ms, **context},
        )

    def _log_operation_error(
        self, operation: str, start_time: float, error: Exception, **context
    ):
        duration_ms = round((time.time() - start_time) * 1000, 2)
        self.logger.error(
            f"Failed {operation}",
            extra={
                "operation": operation,
                "duration_ms": duration_ms,
                "error": str(error),
                "error_type": type(error).__name__,
                **context,
            },
        )

    def _parameter_name(
        self,
        parameter_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ParameterName:
        return _build_name(
            ParameterName,
            project=project_id or self.get_project_id(),
            location=location_id or self.location,
            parameter=parameter_id,
        )

    def _parameter_version_name(
        self,
        parameter_id: str,
        version_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ParameterVersionName:
        return _build_name(
            ParameterVersionName,
            project=project_id or self.get_project_id(),
            location=location_id or self.location,
            parameter=parameter_id,
            version=version_id,
        )

    def resolve_identifier(
        self, parameter_identifier: ParameterIdentifier
    ) -> ParameterVersionName:
        """
        Turn a read identifier into a fully qualified version name.

        Accepts a ``ParameterVersionName``, a ``pm@`` identifier, or the same
        identifier without the prefix (``app-config/v1``).

        Raises:
            MalformedParameterIdentifierException: If the identifier cannot be
                resolved.
        """
        if isinstance(parameter_identifier, ParameterVersionName):
            return parameter_identifier

        identifier = parameter_identifier
        if not identifier.startswith(PARAMETER_PREFIX):
            identifier = PARAMETER_PREFIX + identifier

        version_name = get_parameter_version_name(identifier, self.project_id_provider)
        if version_name is None:
            raise MalformedParameterIdentifierException(
                "Not a GCP Parameter Manager parameter identifier "
                f"(':' is not allowed): {parameter_identifier}"
            )
        return version_name

    def create_parameter(
        self, request: ParameterCreateRequest
    ) -> ParameterOperationResponse:
        """
        Create a parameter version, creating its parameter first if needed.

        The parent parameter is looked up and created with
        ``request.format_type`` only when the lookup reports NotFound. The
        check and the creation are separate API calls: two callers creating
        the same missing parameter at once may both attempt the creation, and
        the loser receives ``AlreadyExists``.

        Args:
            request: ParameterCreateRequest naming the parameter, the version
                and its payload

        Returns:
            ParameterOperationResponse for the created version

        Raises:
            google.api_core.exceptions.AlreadyExists: If the version, or a
                concurrently created parameter, already exists
            google.api_core.exceptions.GoogleAPICallError: For other API errors

        Example:
            >>> service.create_parameter(
            ...     ParameterCreateRequest(
            ...         parameter_id="app-config",
            ...         version_id="v2",
            ...         payload='{"debug": true}',
            ...         format_type="JSON",
            ...         location_id="us-central1",
            ...     )
            ... )
        """
        parameter_name = self._parameter_name(
            request.parameter_id, request.location_id, request.project_id
        )
        payload = request.payload_bytes

        operation = "parameter version creation"
        start_time = self._log_operation_start(
            operation,
            parameter_name=str(parameter_name),
            version_id=request.version_id,
            format_type=request.format_type.value,
            payload_size=len(payload),
        )

        try:
            if not self._parameter_exists(parameter_name):
                self._create_parameter_resource(parameter_name, request.format_type)

            client = self._get_client(parameter_name.location)
            client.create_parameter_version(
                parent=str(parameter_name),
                parameter_version=parametermanager_v1.ParameterVersion(
                    payload=parametermanager_v1.ParameterVersionPayload(data=payload)
                ),
                parameter_version_id=request.version_id,
            )
        except Exception as e:
            self._log_operation_error(
                operation,
                start_time,
                e,
                parameter_name=str(parameter_name),
                version_id=request.version_id,
            )
            raise

        self._log_operation_success(
            operation,
            start_time,
            parameter_name=str(parameter_name),
            version_id=request.version_id,
        )
        return ParameterOperationResponse(
            success=True,
            message=(
                f"Created version '{request.version_id}' of parameter "
                f"'{request.parameter_id}'"
            ),
            resource_name=f"{parameter_name}/versions/{request.version_id}",
            operation_time=datetime.now(),
        )

    def _create_parameter_resource(
        self, parameter_name: ParameterName, format_type: ParameterFormat
    ):
        self.logger.info(
            "Creating missing parameter",
            extra={
                "parameter_name": str(parameter_name),
                "format_type": format_type.value,
            },
        )
        client = self._get_client(parameter_name.location)
        client.create_parameter(
            parent=str(parameter_name.location_name),
            parameter=parametermanager_v1.Parameter(
                format_=parametermanager_v1.ParameterFormat[format_type.value]
            ),
            parameter_id=parameter_name.parameter,
        )

    def enable_parameter_version(
        self,
        parameter_id: str,
        version_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ParameterOperationResponse:
        """Enable a parameter version so that it can be read again."""
        return self._set_parameter_version_disabled(
            self._parameter_version_name(
                parameter_id, version_id, location_id, project_id
            ),
            disabled=False,
        )

    def disable_parameter_version(
        self,
        parameter_id: str,
        version_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ParameterOperationResponse:
        """Disable a parameter version; reads of it fail until it is enabled."""
        return self._set_parameter_version_disabled(
            self._parameter_version_name(
                parameter_id, version_id, location_id, project_id
            ),
            disabled=True,
        )

    def _set_parameter_version_disabled(
        self, version_name: ParameterVersionName, disabled: bool
    ) -> ParameterOperationResponse:
        operation = (
            "parameter version disabling" if disabled else "parameter version enabling"
        )
        start_time = self._log_operation_start(
            operation, parameter_version_name=str(version_name), disabled=disabled
        )

        try:
            client = self._get_client(version_name.location)
            client.update_parameter_version(
                parameter_version=parametermanager_v1.ParameterVersion(
                    name=str(version_name), disabled=disabled
                ),
                update_mask=field_mask_pb2.FieldMask(paths=["disabled"]),
            )
        except Exception as e:
            self._log_operation_error(
                operation, start_time, e, parameter_version_name=str(version_name)
            )
            raise

        self._log_operation_success(
            operation, start_time, parameter_version_name=str(version_name)
        )
        return ParameterOperationResponse(
            success=True,
            message=(
                f"{'Disabled' if disabled else 'Enabled'} version "
                f"'{version_name.version}' of parameter '{version_name.parameter}'"
            ),
            resource_name=str(version_name),
            operation_time=datetime.now(),
        )

    def delete_parameter(
        self,
        parameter_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ParameterOperationResponse:
        """
        Delete a parameter.

        The Parameter Manager API rejects the deletion while the parameter
        still has versions; delete them first with ``delete_parameter_version``.

        Raises:
            MalformedParameterIdentifierException: If an ID is blank
            google.api_core.exceptions.GoogleAPICallError: For API errors
        """
        parameter_name = self._parameter_name(parameter_id, location_id, project_id)

        operation = "parameter deletion"
        start_time = self._log_operation_start(
            operation, parameter_name=str(parameter_name)
        )

        try:
            client = self._get_client(parameter_name.location)
            client.delete_parameter(name=str(parameter_name))
        except Exception as e:
            self._log_operation_error(
                operation, start_time, e, parameter_name=str(parameter_name)
            )
            raise

        self._log_operation_success(
            operation, start_time, parameter_name=str(parameter_name)
        )
        return ParameterOperationResponse(
            success=True,
            message=f"Deleted parameter '{parameter_id}'",
            resource_name=str(parameter_name),
            operation_time=datetime.now(),
        )

    def delete_parameter_version(
        self,
        parameter_id: str,
        version_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ParameterOperationResponse:
        """Delete a single version of a parameter."""
        version_name = self._parameter_version_name(
            parameter_id, version_id, location_id, project_id
        )

        operation = "parameter version deletion"
        start_time = self._log_operation_start(
            operation, parameter_version_name=str(version_name)
        )

        try:
            client = self._get_client(version_name.location)
            client.delete_parameter_version(name=str(version_name))
        except Exception as e:
            self._log_operation_error(
                operation, start_time, e, parameter_version_name=str(version_name)
            )
            raise

        self._log_operation_success(
            operation, start_time, parameter_version_name=str(version_name)
        )
        return ParameterOperationResponse(
            success=True,
            message=f"Deleted version '{version_id}' of parameter '{parameter_id}'",
            resource_name=str(version_name),
            operation_time=datetime.now(),
        )

    def parameter_exists(
        self,
        parameter_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> bool:
        """
        Check if a parameter exists.

        Returns:
            True if the parameter exists, False if the API reports NotFound.
            Any other API error propagates.

        Example:
            >>> if not service.parameter_exists("new-config", "us-central1"):
            ...     print("Parameter does not exist")
        """
        return self._parameter_exists(
            self._parameter_name(parameter_id, location_id, project_id)
        )

    def _parameter_exists(self, parameter_name: ParameterName) -> bool:
        try:
            self._get_client(parameter_name.location).get_parameter(
                name=str(parameter_name)
            )
        except gcp_exceptions.NotFound:
            self.logger.debug(
                "Parameter not found",
                extra={"parameter_name": str(parameter_name)},
            )
            return False
        return True

    def parameter_version_exists(
        self,
        parameter_id: str,
        version_id: str,
        location_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> bool:
        """Check if a parameter version exists. NotFound maps to False."""
        version_name = self._parameter_version_name(
            parameter_id, version_id, location_id, project_id
        )
        try:
            self._get_client(version_name.location).get_parameter_version(
                name=str(version_name)
            )
        except gcp_exceptions.NotFound:
            self.logger.debug(
                "Parameter version not found",
                extra={"parameter_version_name": str(version_name)},
            )
            return False
        return True

    def get_parameter_bytes(
        self, parameter_identifier: ParameterIdentifier
    ) -> Optional[bytes]:
        """
        Read the payload of a parameter version.

        Args:
            parameter_identifier: ``pm@`` identifier (the prefix may be
                omitted) or a ParameterVersionName

        Returns:
            The raw payload, or None if the version does not exist and
            ``allow_default_parameter_value`` is enabled

        Raises:
            MalformedParameterIdentifierException: If the identifier is invalid
            google.api_core.exceptions.NotFound: If the version does not exist
                and default values are not allowed
        """
        version_name = self.resolve_identifier(parameter_identifier)
        return self._read_version(
            version_name,
            "parameter retrieval",
            lambda client: client.get_parameter_version(name=str(version_name))
            .payload.data,
        )

    def get_parameter_string(
        self, parameter_identifier: ParameterIdentifier
    ) -> Optional[str]:
        """Read the payload of a parameter version decoded as UTF-8."""
        data = self.get_parameter_bytes(parameter_identifier)
        return None if data is None else data.decode("utf-8")

    def get_rendered_parameter_bytes(
        self, parameter_identifier: ParameterIdentifier
    ) -> Optional[bytes]:
        """
        Read the rendered payload of a parameter version.

        Rendering is done by Parameter Manager: references embedded in the
        payload, such as Secret Manager secrets, are replaced by their values.
        Missing versions behave as in ``get_parameter_bytes``.
        """
        version_name = self.resolve_identifier(parameter_identifier)
        return self._read_version(
            version_name,
            "parameter rendering",
            lambda client: client.render_parameter_version(
                name=str(version_name)
            ).rendered_payload,
        )

    def get_rendered_parameter_string(
        self, parameter_identifier: ParameterIdentifier
    ) -> Optional[str]:
        """Read the rendered payload of a parameter version decoded as UTF-8."""
        data = self.get_rendered_parameter_bytes(parameter_identifier)
        return None if data is None else data.decode("utf-8")

    def _read_version(
        self,
        version_name: ParameterVersionName,
        operation: str,
        read: Callable[[parametermanager_v1.ParameterManagerClient], bytes],
    ) -> Optional[bytes]:
        start_time = self._log_operation_start(
            operation, parameter_version_name=str(version_name)
        )

        try:
            data = read(self._get_client(version_name.location))
        except gcp_exceptions.NotFound as e:
            self.logger.warning(
                f"{version_name} doesn't exist in Parameter Manager.",
                extra={
                    "operation": operation,
                    "parameter_version_name": str(version_name),
                    "allow_default_parameter_value": self.allow_default_parameter_value,
                },
            )
            if not self.allow_default_parameter_value:
                self._log_operation_error(
                    operation,
                    start_time,
                    e,
                    parameter_version_name=str(version_name),
                )
                raise
            return None
        except Exception as e:
            self._log_operation_error(
                operation, start_time, e, parameter_version_name=str(version_name)
            )
            raise

        self._log_operation_success(
            operation,
            start_time,
            parameter_version_name=str(version_name),
            payload_size=len(data),
        )
        return data
