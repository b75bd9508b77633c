from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from gcp_parameter_manager.models.parameter_manager import ParameterFormat


class ParameterCreateRequest(BaseModel):
    """
    Request model for creating a parameter version.

    The parent parameter is created first when it does not exist yet, using
    ``format_type``. ``location_id`` and ``project_id`` fall back to the
    service's location and default project when omitted.

    Attributes:
        parameter_id: ID of the parameter (created if missing)
        version_id: ID of the new version
        payload: Version data; strings are encoded as UTF-8
        format_type: Format of the parent parameter (UNFORMATTED, JSON or YAML)
        location_id: Location of the parameter, e.g. "global" or "us-central1"
        project_id: Project of the parameter

    Example:
        >>> request = ParameterCreateRequest(
        ...     parameter_id="app-config",
        ...     version_id="v1",
        ...     payload='{"debug": false}',
        ...     format_type="JSON",
        ... )
    """

    parameter_id: str = Field(..., min_length=1)
    version_id: str = Field(..., min_length=1)
    payload: Union[bytes, str]
    format_type: ParameterFormat = ParameterFormat.UNFORMATTED
    location_id: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator("parameter_id", "version_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @property
    def payload_bytes(self) -> bytes:
        if isinstance(self.payload, bytes):
            return self.payload
        return self.payload.encode("utf-8")
