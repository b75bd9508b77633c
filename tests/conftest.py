import os

import pytest
from hypothesis import HealthCheck, settings

from gcp_parameter_manager.helpers.environment import env


# Hypothesis global profiles: fast by default for local runs
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _setup_testing_environment(monkeypatch):
    """Setup test environment variables to override .env"""
    monkeypatch.setenv("APP_ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_CHANNEL", "default")
    env.cache_clear()
    yield
    env.cache_clear()


@pytest.fixture(autouse=True)
def _prevent_external_calls(monkeypatch, request):
    """Prevent any accidental external calls during unit testing"""
    if request.node.get_closest_marker("integration"):
        return

    def mock_external_call(*args, **kwargs):
        raise RuntimeError("External calls are not allowed during testing")

    monkeypatch.setattr("socket.socket", mock_external_call)


@pytest.fixture
def clean_project_environment(monkeypatch):
    """Remove every environment variable used for project detection."""
    for var in [
        "GOOGLE_CLOUD_PROJECT",
        "GCP_PROJECT",
        "GCLOUD_PROJECT",
        "PROJECT_ID",
        "GCP_PARAMETER_MANAGER_ENABLED",
        "GCP_PARAMETER_MANAGER_PROJECT_ID",
        "GCP_PARAMETER_MANAGER_LOCATION",
        "GCP_PARAMETER_MANAGER_ALLOW_DEFAULT_PARAMETER",
    ]:
        monkeypatch.delenv(var, raising=False)
    env.cache_clear()
    yield


@pytest.fixture
def default_project_provider():
    """Project ID provider that always answers "defaultProject"."""
    from gcp_parameter_manager.services.project_id import StaticProjectIdProvider

    return StaticProjectIdProvider("defaultProject")


@pytest.fixture
def mock_client(mocker):
    """Mocked Parameter Manager client."""
    return mocker.Mock(name="ParameterManagerClient")


@pytest.fixture
def service(mock_client):
    """ParameterManagerService using the mocked client and project "my-project"."""
    from gcp_parameter_manager.services.parameter_manager import (
        ParameterManagerService,
    )

    return ParameterManagerService(client=mock_client, project_id="my-project")
