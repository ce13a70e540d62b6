"""Tests for telemetry module."""

import io
import json
import logging

import pytest

from aiowharf.telemetry import (
    JsonFormatter,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    WharfLogger,
    current_log_fields,
    get_logger,
    log_context,
)


def make_record(msg: str, **fields) -> logging.LogRecord:
    record = logging.LogRecord("aiowharf.test", logging.INFO, __file__, 1, msg, None, None)
    record.wharf_fields = fields
    return record


@pytest.fixture
def restore_logging():
    """Undo WharfLogger.configure() after the test."""
    root = logging.getLogger("aiowharf")
    saved = (list(root.handlers), root.level, root.propagate, WharfLogger._configured)
    yield
    root.handlers[:], level, root.propagate, WharfLogger._configured = saved
    root.setLevel(level)


class TestLogLevel:
    """Tests for LogLevel."""

    def test_to_logging_level(self) -> None:
        assert LogLevel.DEBUG.to_logging_level() == logging.DEBUG
        assert LogLevel.WARNING.to_logging_level() == logging.WARNING

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test WHARF_LOG_LEVEL is read case-insensitively."""
        monkeypatch.setenv("WHARF_LOG_LEVEL", "debug")
        assert LogLevel.from_env(LogLevel.WARNING) == LogLevel.DEBUG

    def test_from_env_invalid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unknown level falls back to the default."""
        monkeypatch.setenv("WHARF_LOG_LEVEL", "verbose")
        assert LogLevel.from_env(LogLevel.WARNING) == LogLevel.WARNING


class TestLogContext:
    """Tests for bound log fields."""

    def test_nested_bindings(self) -> None:
        """Test inner bindings extend outer ones and are undone on exit."""
        with log_context(daemon="unix:///var/run/docker.sock"):
            with log_context(container="abc"):
                assert current_log_fields() == {
                    "daemon": "unix:///var/run/docker.sock",
                    "container": "abc",
                }
            assert current_log_fields() == {"daemon": "unix:///var/run/docker.sock"}
        assert current_log_fields() == {}

    def test_bound_fields_rendered(self) -> None:
        """Test bound fields appear before the call's own fields."""
        formatter = TextFormatter()
        with log_context(daemon="tcp"):
            line = formatter.format(make_record("Response received", status=200))
        assert line.endswith("| daemon=tcp status=200")


class TestSensitiveDataMasker:
    """Tests for credential masking."""

    def test_mask_registry_header(self) -> None:
        masker = SensitiveDataMasker()
        text = masker.mask("headers={'X-Registry-Auth': 'eyJ1c2VybmFtZSI6ImNpIn0'}")
        assert "eyJ1c2VybmFtZSI6ImNpIn0" not in text
        assert "***REDACTED***" in text

    def test_mask_json_password(self) -> None:
        masker = SensitiveDataMasker()
        text = masker.mask('{"username": "ci", "password": "s3cret"}')
        assert "s3cret" not in text
        assert '"username": "ci"' in text

    def test_mask_fields(self) -> None:
        """Test credential-like keys are replaced and nested values walked."""
        masker = SensitiveDataMasker()
        result = masker.mask_fields(
            {
                "image": "alpine",
                "registry_auth": "abc",
                "nested": {"identity_token": "tok"},
                "items": [{"password": "p"}, 3],
            }
        )
        assert result == {
            "image": "alpine",
            "registry_auth": "***REDACTED***",
            "nested": {"identity_token": "***REDACTED***"},
            "items": [{"password": "***REDACTED***"}, 3],
        }


class TestFormatters:
    """Tests for log formatters."""

    def test_json_formatter(self) -> None:
        """Test records are rendered as one JSON object with masked fields."""
        formatter = JsonFormatter(include_timestamp=False)
        line = formatter.format(make_record("Image pulled", image="alpine", password="x"))
        data = json.loads(line)
        assert data["message"] == "Image pulled"
        assert data["image"] == "alpine"
        assert data["password"] == "***REDACTED***"
        assert "timestamp" not in data

    def test_text_formatter(self) -> None:
        """Test fields are appended as key=value pairs."""
        formatter = TextFormatter(include_bound=False)
        line = formatter.format(make_record("Container started", container="abc"))
        assert " | INFO     | aiowharf.test | Container started" in line
        assert line.endswith("| container=abc")


class TestWharfLogger:
    """Tests for WharfLogger."""

    def test_names_are_namespaced(self) -> None:
        """Test loggers always live under the package namespace."""
        assert get_logger("aiowharf.transport").name == "aiowharf.transport"
        assert get_logger("plugins").name == "aiowharf.plugins"

    @pytest.mark.usefixtures("restore_logging")
    def test_configure_json(self) -> None:
        """Test configure() redirects loggers created earlier."""
        stream = io.StringIO()
        logger = get_logger("aiowharf.test.configured")

        WharfLogger.configure(level=LogLevel.DEBUG, format="json", stream=stream)
        logger.debug("Response received", status=200)

        data = json.loads(stream.getvalue().strip())
        assert data["level"] == "DEBUG"
        assert data["logger"] == "aiowharf.test.configured"
        assert data["status"] == 200

    @pytest.mark.usefixtures("restore_logging")
    def test_level_filters(self) -> None:
        """Test records below the configured level are dropped."""
        stream = io.StringIO()
        WharfLogger.configure(level=LogLevel.WARNING, stream=stream)
        logger = get_logger("aiowharf.test.filtered")

        logger.info("hidden")
        logger.warning("Daemon warning on create", warning="memory limit ignored")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "warning=memory limit ignored" in output
