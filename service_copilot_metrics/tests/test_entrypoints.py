"""
Unit tests for the command line and serverless entry points.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from service_copilot_metrics.app import cli, handler
from service_copilot_metrics.app.orchestrator import RunSummary, ScopeResult
from shared.errors import FetchError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GITHUB_TOKEN", "GITHUB_ENTERPRISE_ID", "DATADOG_API_KEY", "GITHUB_TEAM_SLUGS",
                 "MOCK_GITHUB_API", "SKIP_ENTERPRISE_METRICS", "DATADOG_METRIC_NAMESPACE"):
        monkeypatch.delenv(name, raising=False)


def failed_summary():
    error = FetchError(scope="acme", reason="authentication", message="HTTP error 401", status_code=401)
    return RunSummary(run_id="run-1", root=ScopeResult(scope="root", kind="root", namespace="ns", error=error))


class TestCli:
    """Test cases for the copilot-metrics command."""

    def test_dry_run(self, capsys, tmp_path):
        output = tmp_path / "summary.json"

        code = cli.main(["--dry-run", "--team", "platform", "--team", "web", "--namespace", "acme.copilot",
                         "--output", str(output)])

        assert code == 0
        assert "DRY RUN" in capsys.readouterr().out
        summary = json.loads(output.read_text())
        assert summary["root"]["namespace"] == "acme.copilot"
        assert [team["scope"] for team in summary["sub_groups"]] == ["platform", "web"]

    def test_dry_run_skip_enterprise(self, capsys):
        code = cli.main(["--dry-run", "--skip-enterprise", "--team", "platform"])

        assert code == 0
        assert '"root": null' in capsys.readouterr().out

    def test_missing_credentials(self, capsys):
        code = cli.main([])

        assert code == 2
        assert "Missing required settings" in capsys.readouterr().err

    def test_invalid_setting_exit_code(self, monkeypatch, capsys):
        monkeypatch.setenv("DATADOG_CHUNK_SIZE", "0")

        code = cli.main(["--dry-run"])

        assert code == 2
        assert "DATADOG_CHUNK_SIZE" in capsys.readouterr().err

    def test_unwritable_output(self, capsys, tmp_path):
        code = cli.main(["--dry-run", "--output", str(tmp_path)])

        assert code == 1
        assert "could not write summary" in capsys.readouterr().err

    def test_failed_run_exit_code(self):
        with patch.object(cli, "run_pipeline", AsyncMock(return_value=failed_summary())):
            assert cli.main(["--team", "platform"]) == 1


class TestHandler:
    """Test cases for the serverless handler."""

    def test_verification_run(self, monkeypatch):
        monkeypatch.setenv("MOCK_GITHUB_API", "true")
        monkeypatch.setenv("GITHUB_TEAM_SLUGS", "platform")

        response = handler.handler({}, None)

        assert response["statusCode"] == 200
        assert response["summary"]["sub_groups"][0]["points"] == 2

    def test_missing_credentials(self):
        response = handler.handler({})

        assert response["statusCode"] == 500
        assert response["summary"] is None
        assert "DATADOG_API_KEY" in response["message"]

    def test_invalid_setting(self, monkeypatch):
        monkeypatch.setenv("GITHUB_SCOPE_TYPE", "bogus")

        response = handler.handler({})

        assert response["statusCode"] == 500
        assert response["summary"] is None
        assert "GITHUB_SCOPE_TYPE" in response["message"]

    def test_failed_run(self):
        with patch.object(handler, "run_pipeline", AsyncMock(return_value=failed_summary())):
            response = handler.handler({})

        assert response["statusCode"] == 502
        assert response["summary"]["root"]["error"]["code"] == "FETCH_ERROR"
