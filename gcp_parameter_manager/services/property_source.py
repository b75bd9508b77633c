"""
Configuration values backed by Parameter Manager.

``ParameterManagerPropertySource`` replaces ``${pm@...}`` placeholders in
configuration strings with parameter payloads::

    database:
        url: ${pm@db-url/v3}
        pool: ${pm@locations/us-central1/db-pool/latest:10}

The text after the first colon is a fallback used when the parameter version
does not exist. Fallbacks only apply when the service was created with
``allow_default_parameter_value``; otherwise the NotFound error propagates.
"""

import re
from typing import Any, Optional

from gcp_parameter_manager.helpers.logger import get_logger
from gcp_parameter_manager.helpers.parameter_identifier import (
    get_matched_prefix,
    get_parameter_version_name,
)
from gcp_parameter_manager.services.parameter_manager import ParameterManagerService


PLACEHOLDER_PATTERN = re.compile(r"\$\{(pm@[^}:]*)(?::([^}]*))?\}")


class ParameterManagerPropertySource:
    """
    Resolves configuration properties named by ``pm@`` identifiers.

    Attributes:
        name: Name of this property source ("pm")
    """

    name = "pm"

    def __init__(self, service: ParameterManagerService):
        self.service = service
        self.logger = get_logger("gcp_parameter_manager.services.property_source")

    @staticmethod
    def supports(location: str) -> bool:
        """Whether a configuration import location refers to Parameter Manager."""
        return get_matched_prefix(location.startswith) is not None

    def get_property(self, name: str) -> Optional[str]:
        """
        Look up a property by ``pm@`` identifier.

        Returns:
            The parameter payload as a string, or None when ``name`` is not a
            parameter reference or the version is missing and default values
            are allowed.
        """
        version_name = get_parameter_version_name(
            name, self.service.project_id_provider
        )
        if version_name is None:
            return None
        return self.service.get_parameter_string(version_name)

    def resolve(self, value: str) -> str:
        """
        Replace every ``${pm@...}`` placeholder in ``value``.

        Placeholders for other sources are left untouched.

        Raises:
            KeyError: If a parameter is missing and its placeholder has no
                fallback
        """

        def substitute(match: "re.Match[str]") -> str:
            identifier, fallback = match.group(1), match.group(2)
            resolved = self.get_property(identifier)
            if resolved is not None:
                return resolved

            if fallback is None:
                raise KeyError(f"Parameter Manager property not found: {identifier}")

            self.logger.debug(
                "Using fallback value for missing parameter",
                extra={"identifier": identifier},
            )
            return fallback

        return PLACEHOLDER_PATTERN.sub(substitute, value)

    def resolve_mapping(self, data: Any) -> Any:
        """
        Resolve placeholders in every string of a nested dict/list structure.

        Returns a new structure; ``data`` is not modified.
        """
        if isinstance(data, str):
            return self.resolve(data)
        if isinstance(data, dict):
            return {key: self.resolve_mapping(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self.resolve_mapping(item) for item in data]
        return data
