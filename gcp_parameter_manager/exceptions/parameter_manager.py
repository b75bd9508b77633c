# Parameter Manager Exceptions
# Errors raised by the parameter identifier resolver and the service layer.
# Errors returned by the Google Cloud client (NotFound, AlreadyExists, ...)
# are not wrapped; they reach the caller as google.api_core exceptions.


class ParameterManagerException(Exception):
    """Base exception for all Parameter Manager errors raised by this package."""


class MalformedParameterIdentifierException(ParameterManagerException, ValueError):
    """
    Raised when a ``pm@`` identifier does not match any supported form, when
    one of its resolved fields is empty, or when a parameter name built from
    IDs has an empty part.

    The message always contains the offending identifier or IDs verbatim.
    """


class ProjectIdNotFoundException(ParameterManagerException):
    """Raised when no Google Cloud project ID could be detected."""


class ParameterManagerDisabledException(ParameterManagerException):
    """Raised when a service is requested while the integration is disabled."""
