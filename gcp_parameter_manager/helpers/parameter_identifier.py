"""
Resolution of ``pm@`` parameter identifiers.

A parameter identifier names one version of a Parameter Manager parameter.
The following forms are supported; omitted projects come from the default
project provider and omitted locations are ``global``:

1. ``pm@projects/{project}/locations/{location}/parameters/{parameter}/versions/{version}``
2. ``pm@projects/{project}/parameters/{parameter}/versions/{version}``
3. ``pm@locations/{location}/parameters/{parameter}/versions/{version}``
4. ``pm@{project}/{location}/{parameter}/{version}``
5. ``pm@locations/{location}/{parameter}/{version}``
6. ``pm@{project}/{parameter}/{version}``
7. ``pm@{parameter}/{version}``

Strings without the prefix, or containing a colon, are not parameter
references. Configuration placeholders such as ``${pm@db/v1:fallback}`` may be
looked up once with the fallback attached; the colon check keeps that
combined string from being read as a parameter ID.
"""

from typing import Callable, Dict, List, Optional, Protocol, Tuple

from gcp_parameter_manager.exceptions.parameter_manager import (
    MalformedParameterIdentifierException,
)
from gcp_parameter_manager.models.parameter_manager import (
    GLOBAL_LOCATION,
    ParameterVersionName,
)


PARAMETER_PREFIX = "pm@"


class ProjectIdProvider(Protocol):
    def get_project_id(self) -> str: ...


# Each form is (predicate, extractor). Extractors return the fields present in
# the identifier; a missing "project" or "location" is filled in afterwards.
_Tokens = List[str]
_IdentifierForm = Tuple[Callable[[_Tokens], bool], Callable[[_Tokens], Dict[str, str]]]

_IDENTIFIER_FORMS: List[_IdentifierForm] = [
    # {parameter}/{version}
    (
        lambda t: len(t) == 2,
        lambda t: {"parameter": t[0], "version": t[1]},
    ),
    # {project}/{parameter}/{version}
    (
        lambda t: len(t) == 3,
        lambda t: {"project": t[0], "parameter": t[1], "version": t[2]},
    ),
    # locations/{location}/{parameter}/{version}
    (
        lambda t: len(t) == 4 and t[0] == "locations",
        lambda t: {"location": t[1], "parameter": t[2], "version": t[3]},
    ),
    # {project}/{location}/{parameter}/{version}
    (
        lambda t: len(t) == 4,
        lambda t: {
            "project": t[0],
            "location": t[1],
            "parameter": t[2],
            "version": t[3],
        },
    ),
    # locations/{location}/parameters/{parameter}/versions/{version}
    (
        lambda t: len(t) == 6
        and t[0] == "locations"
        and t[2] == "parameters"
        and t[4] == "versions",
        lambda t: {"location": t[1], "parameter": t[3], "version": t[5]},
    ),
    # projects/{project}/parameters/{parameter}/versions/{version}
    (
        lambda t: len(t) == 6
        and t[0] == "projects"
        and t[2] == "parameters"
        and t[4] == "versions",
        lambda t: {"project": t[1], "parameter": t[3], "version": t[5]},
    ),
    # projects/{project}/locations/{location}/parameters/{parameter}/versions/{version}
    (
        lambda t: len(t) == 8
        and t[0] == "projects"
        and t[2] == "locations"
        and t[4] == "parameters"
        and t[6] == "versions",
        lambda t: {
            "project": t[1],
            "location": t[3],
            "parameter": t[5],
            "version": t[7],
        },
    ),
]

_FIELD_LABELS = [
    ("project", "project id"),
    ("location", "location id"),
    ("parameter", "parameter id"),
    ("version", "parameter version"),
]


def is_parameter_reference(identifier: str) -> bool:
    """Whether ``identifier`` should be resolved against Parameter Manager."""
    return identifier.startswith(PARAMETER_PREFIX) and ":" not in identifier


def get_matched_prefix(matcher: Callable[[str], bool]) -> Optional[str]:
    """
    Return the ``pm@`` prefix if ``matcher`` accepts it, otherwise None.

    Lets configuration loaders ask whether a location such as
    ``pm@app-config/v1`` belongs to Parameter Manager, e.g.
    ``get_matched_prefix(location.startswith)``.
    """
    return PARAMETER_PREFIX if matcher(PARAMETER_PREFIX) else None


def get_parameter_version_name(
    identifier: str, project_id_provider: ProjectIdProvider
) -> Optional[ParameterVersionName]:
    """
    Resolve a ``pm@`` identifier into a fully qualified parameter version name.

    Args:
        identifier: String that may hold a parameter reference
        project_id_provider: Supplies the project when the identifier has none.
            It is only called in that case.

    Returns:
        The resolved name, or None if ``identifier`` is not a parameter
        reference (no ``pm@`` prefix, or contains a colon).

    Raises:
        MalformedParameterIdentifierException: If the identifier matches none of
            the supported forms, or a resolved field is empty.
    """
    if not is_parameter_reference(identifier):
        return None

    tokens = identifier[len(PARAMETER_PREFIX) :].split("/")
    # Trailing separators are ignored; empty tokens inside the path are kept
    while len(tokens) > 1 and tokens[-1] == "":
        tokens.pop()

    for matches, extract in _IDENTIFIER_FORMS:
        if matches(tokens):
            fields = extract(tokens)
            break
    else:
        raise MalformedParameterIdentifierException(
            "Unrecognized format for specifying a GCP Parameter Manager "
            f"parameter: {identifier}"
        )

    if "project" not in fields:
        fields["project"] = project_id_provider.get_project_id()
    fields.setdefault("location", GLOBAL_LOCATION)

    for field, label in _FIELD_LABELS:
        value = fields[field]
        if value is None or not value.strip():
            raise MalformedParameterIdentifierException(
                f"The GCP Parameter Manager {label} must not be empty: {identifier}"
            )

    return ParameterVersionName(**fields)
