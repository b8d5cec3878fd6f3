"""
Integration tests for a full GitHub-to-Datadog run over mocked HTTP.
"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from service_copilot_metrics.app.config import get_copilot_config
from service_copilot_metrics.app.pipeline import run_pipeline
from shared.test_helpers import SnapshotFactory


def _response(method, url, status_code, body):
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(body),
        request=httpx.Request(method, url)
    )


class TestPipelineFlow:
    """End-to-end runs through the GitHub client, flattener, dispatcher and Datadog client."""

    @pytest.fixture
    def config(self):
        return get_copilot_config(
            github_token="ghp_test",
            github_enterprise_id="acme",
            github_team_slugs="healthy,broken",
            datadog_api_key="dd-key",
            datadog_metric_namespace="acme.copilot",
            datadog_rollup_namespace="acme.rollup",
            datadog_chunk_size=10,
            skip_enterprise_metrics=False,
            mock_github_api=False
        )

    @pytest.fixture
    def github_get(self):
        async def fake_get(url, params=None, headers=None):
            if "/team/broken/" in url:
                return _response("GET", url, 404, {"message": "Not Found"})
            if "/team/healthy/" in url:
                return _response("GET", url, 200, [SnapshotFactory.minimal_payload("2024-01-01", 10, 8)])
            return _response("GET", url, 200, [SnapshotFactory.full_payload("2024-01-01")])

        return AsyncMock(side_effect=fake_get)

    @pytest.fixture
    def datadog_post(self):
        return AsyncMock(return_value=_response("POST", "https://api.datadoghq.eu/api/v2/series", 202, {}))

    @pytest.mark.asyncio
    async def test_full_run(self, config, github_get, datadog_post):
        """Test root and healthy team delivered while the broken team is reported."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = github_get
            mock_client.return_value.__aenter__.return_value.post = datadog_post

            summary = await run_pipeline(config)

        assert not summary.ok
        assert summary.root.ok
        assert summary.root.points == 27
        assert summary.root.chunks == 3
        assert summary.aggregate_error.count == 1
        assert summary.failed_sub_groups[0].error.reason == "not_found"

        sent = [entry for call in datadog_post.call_args_list for entry in call.kwargs["json"]["series"]]
        assert len(sent) == 27 + 2
        assert [len(call.kwargs["json"]["series"]) for call in datadog_post.call_args_list] == [10, 10, 7, 2]

        names = [entry["metric"] for entry in sent]
        assert names[-2:] == [
            "acme.copilot.team.healthy.total_active_users",
            "acme.copilot.team.healthy.total_engaged_users",
        ]
        [rollup] = [entry for entry in sent if entry["metric"] == "acme.rollup.copilot_ide_chat.total_chats"]
        assert rollup["points"][0]["value"] == 900.0
        assert "source:github-copilot-metrics" in rollup["tags"]

    @pytest.mark.asyncio
    async def test_team_only_run(self, config, github_get, datadog_post):
        config = config.model_copy(update={"skip_enterprise_metrics": True, "github_team_slugs": "healthy"})

        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = github_get
            mock_client.return_value.__aenter__.return_value.post = datadog_post

            summary = await run_pipeline(config)

        assert summary.ok
        assert summary.root is None
        assert github_get.await_count == 1
        assert datadog_post.await_count == 1
