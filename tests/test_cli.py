"""Tests for CLI commands"""

from unittest.mock import Mock, patch

import httpx
import pytest
from typer.testing import CliRunner

from jobrelay_cli.client.base import APIClient, JobRelayError
from jobrelay_cli.main import app
from jobrelay_cli.utils.config_manager import ConfigManager


# Test fixtures
@pytest.fixture
def runner():
    """CLI test runner"""
    return CliRunner()


@pytest.fixture
def mock_client():
    """Mock API client usable as a context manager"""
    client = Mock()
    client.__enter__ = Mock(return_value=client)
    client.__exit__ = Mock(return_value=None)
    return client


@pytest.fixture
def temp_config(tmp_path):
    """Config manager writing to a temporary directory"""
    manager = ConfigManager(tmp_path / ".jobrelay")
    with patch("jobrelay_cli.commands.config.config", manager), patch(
        "jobrelay_cli.commands.jobs.config", manager
    ):
        yield manager


ENQUEUED = {
    "succeeded": True,
    "attempts_used": 1,
    "elapsed_ms": 12.5,
    "strategy_used": "rpc",
    "error_code": None,
    "error_message": None,
}


class TestMainCommands:
    """Test main CLI commands"""

    def test_version(self, runner):
        """Test version command"""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Job Relay CLI" in result.stdout

    @patch("jobrelay_cli.main.JobRelayClient")
    def test_status_success(self, mock_client_class, runner, mock_client):
        """Test status command with successful connection"""
        mock_client.health_check.return_value = {
            "ok": True,
            "version": "1.0.0",
            "environment": "development",
            "backend": {"kind": "supabase", "connected": True},
        }
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Connected Successfully" in result.stdout
        assert "supabase" in result.stdout

    @patch("jobrelay_cli.main.JobRelayClient")
    def test_status_failure(self, mock_client_class, runner, mock_client):
        """Test status command with connection failure"""
        mock_client.health_check.side_effect = JobRelayError("Connection failed")
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "Connection Failed" in result.stdout

    def test_invalid_command(self, runner):
        """Test unknown commands exit with an error"""
        result = runner.invoke(app, ["does-not-exist"])
        assert result.exit_code != 0


class TestJobCommands:
    """Test jobs subcommands"""

    @patch("jobrelay_cli.commands.jobs.JobRelayClient")
    def test_enqueue(self, mock_client_class, runner, mock_client, temp_config):
        """Test enqueue with payload, run time and attempts"""
        mock_client.enqueue_job.return_value = ENQUEUED
        mock_client_class.return_value = mock_client

        result = runner.invoke(
            app,
            [
                "jobs", "enqueue", "send_email",
                "--payload", '{"to": "a@b.c"}',
                "--run-at", "2030-01-01T12:00:00+00:00",
                "--max-attempts", "5",
            ],
        )

        assert result.exit_code == 0
        assert "Enqueued send_email" in result.stdout
        mock_client.enqueue_job.assert_called_once_with(
            "send_email",
            payload={"to": "a@b.c"},
            run_at="2030-01-01T12:00:00+00:00",
            max_attempts=5,
        )

    @patch("jobrelay_cli.commands.jobs.JobRelayClient")
    def test_enqueue_uses_configured_max_attempts(
        self, mock_client_class, runner, mock_client, temp_config
    ):
        """Test that the configured default fills in a missing --max-attempts"""
        temp_config.set("jobs.default_max_attempts", 7)
        mock_client.enqueue_job.return_value = ENQUEUED
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["jobs", "enqueue", "cleanup"])

        assert result.exit_code == 0
        assert mock_client.enqueue_job.call_args.kwargs["max_attempts"] == 7

    @patch("jobrelay_cli.commands.jobs.JobRelayClient")
    def test_enqueue_via_fallback_warns(
        self, mock_client_class, runner, mock_client, temp_config
    ):
        """Test that a fallback success is flagged"""
        mock_client.enqueue_job.return_value = {**ENQUEUED, "strategy_used": "direct_insert"}
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["jobs", "enqueue", "cleanup"])

        assert result.exit_code == 0
        assert "via direct_insert fallback" in result.stdout

    @patch("jobrelay_cli.commands.jobs.JobRelayClient")
    def test_enqueue_failure(self, mock_client_class, runner, mock_client, temp_config):
        """Test that an exhausted enqueue exits non-zero and shows the result"""
        mock_client.enqueue_job.side_effect = JobRelayError(
            "API Error 503: Failed to enqueue after 3 attempts.",
            status_code=503,
            details={
                "succeeded": False,
                "attempts_used": 3,
                "elapsed_ms": 3012.0,
                "strategy_used": "none",
                "error_code": "MAX_RETRIES_EXCEEDED",
                "error_message": "Failed to enqueue after 3 attempts.",
            },
        )
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["jobs", "enqueue", "cleanup"])

        assert result.exit_code == 1
        assert "MAX_RETRIES_EXCEEDED" in result.stdout
        assert "Failed to enqueue job" in result.stdout

    def test_enqueue_invalid_payload(self, runner, temp_config):
        """Test that malformed JSON is rejected before any request"""
        result = runner.invoke(app, ["jobs", "enqueue", "cleanup", "--payload", "{not json"])
        assert result.exit_code == 2

    def test_enqueue_payload_must_be_object(self, runner, temp_config):
        result = runner.invoke(app, ["jobs", "enqueue", "cleanup", "--payload", "[1, 2]"])
        assert result.exit_code == 2

    def test_enqueue_invalid_run_at(self, runner, temp_config):
        result = runner.invoke(app, ["jobs", "enqueue", "cleanup", "--run-at", "tomorrow"])
        assert result.exit_code == 2

    @patch("jobrelay_cli.commands.jobs.JobRelayClient")
    def test_stats(self, mock_client_class, runner, mock_client):
        """Test queue stats table"""
        mock_client.get_queue_stats.return_value = {
            "status": "healthy",
            "timestamp": "2030-01-01T00:00:00+00:00",
            "config": {
                "max_retries": 3,
                "initial_delay_ms": 1000,
                "max_delay_ms": 30000,
                "backoff_multiplier": 2.0,
            },
            "strategies": ["rpc", "direct_insert"],
        }
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["jobs", "stats"])

        assert result.exit_code == 0
        assert "healthy" in result.stdout
        assert "max_retries" in result.stdout

    @patch("jobrelay_cli.commands.jobs.JobRelayClient")
    def test_stats_error(self, mock_client_class, runner, mock_client):
        """Test API error handling"""
        mock_client.get_queue_stats.side_effect = JobRelayError("API Error 500: boom")
        mock_client_class.return_value = mock_client

        result = runner.invoke(app, ["jobs", "stats"])
        assert result.exit_code == 1
        assert "Failed to get queue stats" in result.stdout


class TestConfigCommands:
    """Test configuration commands"""

    def test_set_and_get_config(self, runner, temp_config):
        result = runner.invoke(app, ["config", "set", "api.base_url", "http://relay:9000"])
        assert result.exit_code == 0
        assert temp_config.get("api.base_url") == "http://relay:9000"

        result = runner.invoke(app, ["config", "get", "api.base_url"])
        assert result.exit_code == 0
        assert "http://relay:9000" in result.stdout

    def test_set_config_invalid_url(self, runner, temp_config):
        result = runner.invoke(app, ["config", "set", "api.base_url", "relay:9000"])
        assert result.exit_code == 1

    def test_set_numeric_config(self, runner, temp_config):
        result = runner.invoke(app, ["config", "set", "jobs.default_max_attempts", "4"])
        assert result.exit_code == 0
        assert temp_config.get("jobs.default_max_attempts") == 4

    def test_set_numeric_config_rejects_text(self, runner, temp_config):
        result = runner.invoke(app, ["config", "set", "api.timeout", "soon"])
        assert result.exit_code == 1

    def test_get_missing_key(self, runner, temp_config):
        result = runner.invoke(app, ["config", "get", "api.nope"])
        assert result.exit_code == 0
        assert "not found" in result.stdout

    def test_show_config(self, runner, temp_config):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "base_url" in result.stdout

    def test_reset_config(self, runner, temp_config):
        temp_config.set("api.timeout", 5)

        result = runner.invoke(app, ["config", "reset", "--yes"])

        assert result.exit_code == 0
        assert temp_config.get("api.timeout") == 30


def make_api_client(handler) -> APIClient:
    return APIClient("http://relay", transport=httpx.MockTransport(handler))


class TestAPIClient:
    """Test envelope handling in the HTTP client"""

    def test_unwraps_success_envelope(self):
        def handler(request):
            assert request.url.path == "/v1/jobs"
            return httpx.Response(202, json={"ok": True, "data": ENQUEUED})

        with make_api_client(handler) as client:
            assert client.post("/jobs", json={"task_identifier": "x"}) == ENQUEUED

    def test_error_envelope_carries_details(self):
        def handler(request):
            return httpx.Response(
                503,
                json={
                    "ok": False,
                    "error": {
                        "message": "Failed to enqueue after 3 attempts.",
                        "code": 503,
                        "details": {"error_code": "MAX_RETRIES_EXCEEDED"},
                    },
                },
            )

        with make_api_client(handler) as client:
            with pytest.raises(JobRelayError) as exc_info:
                client.post("/jobs", json={"task_identifier": "x"})

        assert exc_info.value.status_code == 503
        assert exc_info.value.details == {"error_code": "MAX_RETRIES_EXCEEDED"}
        assert "Failed to enqueue" in str(exc_info.value)

    def test_validation_error_without_envelope(self):
        def handler(request):
            return httpx.Response(422, json={"detail": [{"msg": "field required"}]})

        with make_api_client(handler) as client:
            with pytest.raises(JobRelayError, match="API Error 422"):
                client.post("/jobs", json={})

    def test_invalid_json(self):
        with make_api_client(lambda request: httpx.Response(502, text="<html>")) as client:
            with pytest.raises(JobRelayError, match="Invalid JSON response: 502"):
                client.get("/healthz")

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with make_api_client(handler) as client:
            with pytest.raises(JobRelayError, match="Connection failed"):
                client.get("/healthz")
