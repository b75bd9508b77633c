import json
import logging
import sys

import pytest

from gcp_parameter_manager.helpers.environment import env
from gcp_parameter_manager.helpers.logger import StandardLogger, get_logger
from gcp_parameter_manager.helpers.logger.gcloud import GCloudLogger
from gcp_parameter_manager.helpers.logger.standard import JsonLineFormatter
from gcp_parameter_manager.services.parameter_manager import ParameterManagerService


def _record(message, level=logging.INFO, context=None, exc_info=None):
    record = logging.LogRecord(
        name="tests.logger",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )
    if context is not None:
        record.context = context
    return record


def test_get_logger_defaults_to_standard_logger():
    logger = get_logger("tests.default-channel")

    assert isinstance(logger, StandardLogger)
    assert logger.level == "INFO"


def test_get_logger_uses_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    env.cache_clear()

    logger = get_logger("tests.debug-level")

    assert logger.logger.level == logging.DEBUG


def test_unknown_log_level_falls_back_to_info(monkeypatch, mock_client):
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    env.cache_clear()

    logger = get_logger("tests.unknown-level")
    service = ParameterManagerService(client=mock_client, project_id="p")

    assert logger.logger.level == logging.INFO
    assert service.get_project_id() == "p"


def test_get_logger_gcloud_channel(monkeypatch, mocker):
    monkeypatch.setenv("LOG_CHANNEL", "gcloud")
    env.cache_clear()
    mocker.patch(
        "gcp_parameter_manager.helpers.logger.gcloud.get_gcp_logging_client",
        return_value=None,
    )

    assert isinstance(get_logger("tests.gcloud-channel"), GCloudLogger)


def test_sanitize_redacts_nested_sensitive_fields():
    logger = StandardLogger("tests.sanitize")

    sanitized = logger.sanitize(
        {
            "parameter_id": "db",
            "Token": "abc",
            "request": {"password": "hunter2", "version_id": "v1"},
            "items": [{"secret": "s"}, "plain"],
        }
    )

    assert sanitized == {
        "parameter_id": "db",
        "Token": "[REDACTED]",
        "request": {"password": "[REDACTED]", "version_id": "v1"},
        "items": [{"secret": "[REDACTED]"}, "plain"],
    }


def test_json_line_formatter():
    line = JsonLineFormatter().format(
        _record("Parameter created", context={"parameter_id": "db"})
    )

    payload = json.loads(line)
    assert payload["severity"] == "INFO"
    assert payload["message"] == "Parameter created"
    assert payload["service"] == "tests.logger"
    assert payload["environment"] == "test"
    assert payload["parameter_id"] == "db"
    assert "timestamp" in payload


def test_json_line_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record("failed", level=logging.ERROR, exc_info=sys.exc_info())

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["exception"] == {"type": "ValueError", "message": "boom"}


def test_standard_logger_writes_json_lines(capsys):
    logger = StandardLogger("tests.standard-output")

    logger.info("Reading parameter", extra={"version_id": "v1", "token": "t"})

    payload = json.loads(capsys.readouterr().out.strip())
    assert payload["message"] == "Reading parameter"
    assert payload["version_id"] == "v1"
    assert payload["token"] == "[REDACTED]"


@pytest.fixture
def cloud_logging_client(mocker):
    client = mocker.Mock(name="logging.Client")
    mocker.patch(
        "gcp_parameter_manager.helpers.logger.gcloud.get_gcp_logging_client",
        return_value=client,
    )
    return client


def test_gcloud_logger_writes_structured_entries(monkeypatch, cloud_logging_client):
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("FUNCTION_NAME", raising=False)
    env.cache_clear()

    logger = GCloudLogger("parameter-manager")
    logger.warning("Missing parameter", extra={"parameter_id": "db"})

    cloud_logging_client.logger.assert_called_once_with("parameter-manager")
    log_struct = cloud_logging_client.logger.return_value.log_struct
    log_struct.assert_called_once()
    payload = log_struct.call_args.args[0]
    assert payload == {
        "message": "Missing parameter",
        "service": "parameter-manager",
        "environment": "test",
        "parameter_id": "db",
    }
    assert log_struct.call_args.kwargs["severity"] == "WARNING"
    assert log_struct.call_args.kwargs["resource"].type == "global"


def test_gcloud_logger_respects_level(monkeypatch, cloud_logging_client):
    monkeypatch.delenv("K_SERVICE", raising=False)
    env.cache_clear()

    logger = GCloudLogger("parameter-manager", level="ERROR")
    logger.info("ignored")
    logger.error("kept")

    log_struct = cloud_logging_client.logger.return_value.log_struct
    assert log_struct.call_count == 1
    assert log_struct.call_args.args[0]["message"] == "kept"


def test_gcloud_logger_prints_inside_cloud_run(
    monkeypatch, capsys, cloud_logging_client
):
    monkeypatch.setenv("K_SERVICE", "config-service")
    env.cache_clear()

    logger = GCloudLogger("parameter-manager")
    try:
        raise KeyError("db")
    except KeyError:
        logger.exception("Lookup failed")

    cloud_logging_client.logger.assert_not_called()
    assert logger.resource.type == "cloud_run_revision"
    payload = json.loads(capsys.readouterr().out.strip())
    assert payload["severity"] == "ERROR"
    assert payload["exception"]["type"] == "KeyError"
