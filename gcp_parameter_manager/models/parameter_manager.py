# Resource names for Google Cloud Parameter Manager.
#
# These mirror the path templates of the Parameter Manager API:
#   projects/{project}/locations/{location}
#   projects/{project}/locations/{location}/parameters/{parameter}
#   projects/{project}/locations/{location}/parameters/{parameter}/versions/{version}

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


GLOBAL_LOCATION = "global"


class ParameterFormat(str, Enum):
    """Payload format declared on a parameter."""

    UNFORMATTED = "UNFORMATTED"
    YAML = "YAML"
    JSON = "JSON"


class _ResourceName(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_validator("*")
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return value


class LocationName(_ResourceName):
    project: str
    location: str = GLOBAL_LOCATION

    def __str__(self) -> str:
        return f"projects/{self.project}/locations/{self.location}"


class ParameterName(_ResourceName):
    project: str
    location: str = GLOBAL_LOCATION
    parameter: str

    @property
    def location_name(self) -> LocationName:
        return LocationName(project=self.project, location=self.location)

    def __str__(self) -> str:
        return f"{self.location_name}/parameters/{self.parameter}"


class ParameterVersionName(_ResourceName):
    """
    Fully qualified name of a parameter version.

    All four fields are required and non-blank, so a value of this type is
    always a complete name the Parameter Manager API accepts. ``str()`` gives
    the canonical long form.

    Example:
        >>> name = ParameterVersionName(
        ...     project="my-project", parameter="db-config", version="v1"
        ... )
        >>> str(name)
        'projects/my-project/locations/global/parameters/db-config/versions/v1'
    """

    project: str
    location: str = GLOBAL_LOCATION
    parameter: str
    version: str

    @property
    def parameter_name(self) -> ParameterName:
        return ParameterName(
            project=self.project, location=self.location, parameter=self.parameter
        )

    def __str__(self) -> str:
        return f"{self.parameter_name}/versions/{self.version}"

    @classmethod
    def parse(cls, name: str) -> "ParameterVersionName":
        """
        Parse a canonical long-form version name.

        Raises:
            ValueError: If ``name`` is not of the form
                projects/P/locations/L/parameters/X/versions/V
        """
        tokens = name.split("/")
        if (
            len(tokens) != 8
            or tokens[0] != "projects"
            or tokens[2] != "locations"
            or tokens[4] != "parameters"
            or tokens[6] != "versions"
        ):
            raise ValueError(f"Invalid parameter version name: {name}")
        return cls(
            project=tokens[1],
            location=tokens[3],
            parameter=tokens[5],
            version=tokens[7],
        )
