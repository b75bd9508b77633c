import pytest
from google.api_core import exceptions as gcp_exceptions

from gcp_parameter_manager.exceptions.parameter_manager import (
    MalformedParameterIdentifierException,
)
from gcp_parameter_manager.services.parameter_manager import ParameterManagerService
from gcp_parameter_manager.services.property_source import (
    ParameterManagerPropertySource,
)


PAYLOADS = {
    "projects/my-project/locations/global/parameters/db-url/versions/v3": b"postgres://db",
    "projects/my-project/locations/us-central1/parameters/pool/versions/v1": b"20",
}


@pytest.fixture
def store_client(mocker):
    """Mock client serving PAYLOADS and raising NotFound for anything else."""
    client = mocker.Mock()

    def get_parameter_version(name):
        if name not in PAYLOADS:
            raise gcp_exceptions.NotFound(name)
        version = mocker.Mock()
        version.payload.data = PAYLOADS[name]
        return version

    client.get_parameter_version.side_effect = get_parameter_version
    return client


@pytest.fixture
def property_source(store_client):
    service = ParameterManagerService(
        client=store_client,
        project_id="my-project",
        allow_default_parameter_value=True,
    )
    return ParameterManagerPropertySource(service)


def test_get_property(property_source):
    assert property_source.get_property("pm@db-url/v3") == "postgres://db"


def test_get_property_ignores_non_references(property_source, store_client):
    assert property_source.get_property("spring.datasource.url") is None
    assert property_source.get_property("pm@db-url/v3:fallback") is None
    store_client.get_parameter_version.assert_not_called()


def test_get_property_missing_parameter(property_source):
    assert property_source.get_property("pm@missing/v1") is None


def test_resolve_placeholders(property_source):
    value = property_source.resolve(
        "url=${pm@db-url/v3} pool=${pm@locations/us-central1/pool/v1}"
    )

    assert value == "url=postgres://db pool=20"


def test_resolve_uses_fallback_for_missing_parameter(property_source):
    assert property_source.resolve("${pm@missing/v1:10}") == "10"
    assert property_source.resolve("${pm@missing/v1:}") == ""


def test_resolve_prefers_stored_value_over_fallback(property_source):
    assert property_source.resolve("${pm@db-url/v3:sqlite://}") == "postgres://db"


def test_resolve_without_fallback_raises(property_source):
    with pytest.raises(KeyError, match="pm@missing/v1"):
        property_source.resolve("${pm@missing/v1}")


def test_resolve_leaves_other_placeholders(property_source):
    assert property_source.resolve("${env:HOME}/${pm@db-url/v3}") == (
        "${env:HOME}/postgres://db"
    )


def test_resolve_malformed_placeholder(property_source):
    with pytest.raises(MalformedParameterIdentifierException):
        property_source.resolve("${pm@a/b/c/d/e}")


def test_fallback_ignored_when_defaults_not_allowed(store_client):
    service = ParameterManagerService(client=store_client, project_id="my-project")
    property_source = ParameterManagerPropertySource(service)

    with pytest.raises(gcp_exceptions.NotFound):
        property_source.resolve("${pm@missing/v1:10}")


def test_resolve_mapping(property_source):
    config = {
        "database": {"url": "${pm@db-url/v3}", "pool": "${pm@missing/v1:5}"},
        "hosts": ["${pm@locations/us-central1/pool/v1}", 8080],
        "debug": False,
    }

    resolved = property_source.resolve_mapping(config)

    assert resolved == {
        "database": {"url": "postgres://db", "pool": "5"},
        "hosts": ["20", 8080],
        "debug": False,
    }
    assert config["database"]["url"] == "${pm@db-url/v3}"


@pytest.mark.parametrize(
    "location, expected",
    [("pm@db-url/v3", True), ("sm@secret", False), ("classpath:app.yaml", False)],
)
def test_supports(location, expected):
    assert ParameterManagerPropertySource.supports(location) is expected
