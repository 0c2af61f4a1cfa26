"""Tests for Jenkins MCP Server tools - all Jenkins calls are mocked."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import sequence
from jenkins_api.exceptions import JenkinsApiException
from jenkins_api.server import (
    cancel_build as _cancel_build_tool,
    get_build_log as _get_build_log_tool,
    get_job_parameters as _get_job_parameters_tool,
    get_job_status as _get_job_status_tool,
    get_queue as _get_queue_tool,
    list_build_artifacts as _list_build_artifacts_tool,
    list_jobs as _list_jobs_tool,
    list_nodes as _list_nodes_tool,
    trigger_job as _trigger_job_tool,
)

# @mcp.tool wraps functions as FunctionTool objects; access the
# underlying plain function via the `.fn` attribute for direct testing.
trigger_job = _trigger_job_tool.fn
get_job_parameters = _get_job_parameters_tool.fn
get_job_status = _get_job_status_tool.fn
get_build_log = _get_build_log_tool.fn
cancel_build = _cancel_build_tool.fn
list_build_artifacts = _list_build_artifacts_tool.fn
list_jobs = _list_jobs_tool.fn
get_queue = _get_queue_tool.fn
list_nodes = _list_nodes_tool.fn


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def mock_client(fake_jenkins):
    """Make every tool talk to the route-backed fake server."""
    with patch("jenkins_api.server.get_client", return_value=fake_jenkins):
        yield fake_jenkins


# ---------------------------------------------------------------------------
# trigger_job
# ---------------------------------------------------------------------------
class TestTriggerJob:
    def test_trigger_without_waiting(self, mock_client, routes):
        routes["/job/my-job/api/json"] = {}

        result = trigger_job("my-job", parameters={"BRANCH": "main"})

        assert result["success"] is True
        assert result["queue_id"] == 7
        assert "my-job" in result["message"]
        mock_client.post.assert_called_once_with(
            "/job/my-job/buildWithParameters", data={"BRANCH": "main"}
        )

    def test_trigger_in_folder(self, mock_client, routes):
        routes["/job/team/api/json"] = {}
        routes["/job/team/job/my-job/api/json"] = {}

        trigger_job("team/my-job")

        mock_client.post.assert_called_once_with("/job/team/job/my-job/build")

    def test_trigger_and_wait(self, mock_client, routes):
        routes["/job/my-job/api/json"] = sequence(
            {"lastBuild": {"number": 1}},
            {"lastBuild": {"number": 2}},
            {"lastBuild": {"number": 2}},
        )
        routes["/job/my-job/1/api/json"] = {"building": False, "result": "SUCCESS"}
        routes["/job/my-job/2/api/json"] = sequence(
            {"building": True, "estimatedDuration": 5000},
            {
                "building": False,
                "result": "UNSTABLE",
                "timestamp": 1700000000000,
                "duration": 4000,
                "estimatedDuration": 5000,
            },
        )

        with patch("jenkins_api.job.time.sleep"):
            result = trigger_job("my-job", wait=True, poll_interval=1)

        assert result["success"] is True
        assert result["build_number"] == 2
        assert result["result"] == "UNSTABLE"
        assert result["building"] is False
        assert result["duration_s"] == 4
        assert "finished" in result["message"]

    def test_trigger_and_wait_times_out(self, mock_client, routes):
        routes["/job/my-job/api/json"] = sequence(
            {"lastBuild": {"number": 1}},
            {"lastBuild": {"number": 2}},
        )
        routes["/job/my-job/1/api/json"] = {"building": False}
        routes["/job/my-job/2/api/json"] = {"building": True, "estimatedDuration": 5000}

        with patch("jenkins_api.job.time") as mock_time:
            mock_time.monotonic.side_effect = [0, 0, 100]
            result = trigger_job("my-job", wait=True, timeout=50)

        assert result["success"] is True
        assert result["building"] is True
        assert result["result"] == "RUNNING"
        assert "still running" in result["message"]

    def test_trigger_missing_job(self, mock_client):
        result = trigger_job("bad-job")

        assert result["error"] is True
        assert "bad-job" in result["message"]

    def test_trigger_missing_url(self):
        """get_client raises ValueError when JENKINS_URL is missing."""
        with patch("jenkins_api.server.get_client") as patched:
            patched.side_effect = ValueError("JENKINS_URL environment variable is required.")
            result = trigger_job("any-job")

        assert result["error"] is True
        assert "JENKINS_URL" in result["message"]


# ---------------------------------------------------------------------------
# get_job_parameters
# ---------------------------------------------------------------------------
class TestGetJobParameters:
    def test_parameters_returned(self, mock_client, routes):
        routes["/job/my-job/api/json"] = {
            "property": [
                {
                    "parameterDefinitions": [
                        {
                            "name": "BRANCH",
                            "type": "StringParameterDefinition",
                            "description": "Git branch",
                            "defaultParameterValue": {"value": "main"},
                        },
                        {
                            "name": "DEPLOY",
                            "type": "BooleanParameterDefinition",
                            "description": "Deploy after build",
                            "defaultParameterValue": {"value": False},
                        },
                    ]
                }
            ]
        }

        result = get_job_parameters("my-job")

        assert result["success"] is True
        assert result["parameter_count"] == 2
        params = result["parameters"]
        assert params[0]["name"] == "BRANCH"
        assert params[0]["default_value"] == "main"
        assert params[1]["default_value"] is False

    def test_no_parameters(self, mock_client, routes):
        routes["/job/no-param-job/api/json"] = {"property": []}

        result = get_job_parameters("no-param-job")

        assert result["parameter_count"] == 0
        assert result["parameters"] == []


# ---------------------------------------------------------------------------
# get_job_status
# ---------------------------------------------------------------------------
class TestGetJobStatus:
    def test_specific_build(self, mock_client, routes):
        routes["/job/my-job/api/json"] = {}
        routes["/job/my-job/10/api/json"] = {
            "number": 10,
            "result": "SUCCESS",
            "building": False,
            "timestamp": 1609459200000,  # 2021-01-01T00:00:00Z
            "duration": 30000,
            "estimatedDuration": 25000,
            "displayName": "#10",
            "url": "http://j/job/my-job/10/",
        }

        result = get_job_status("my-job", build_number=10)

        assert result["success"] is True
        assert result["build_number"] == 10
        assert result["result"] == "SUCCESS"
        assert result["duration_s"] == 30
        assert result["estimated_duration_s"] == 25
        assert "2021-01-01" in result["start_time"]

    def test_latest_build(self, mock_client, routes):
        routes["/job/my-job/api/json"] = {"lastBuild": {"number": 5}}
        routes["/job/my-job/5/api/json"] = {
            "result": None,
            "building": True,
            "timestamp": 1700000000000,
            "estimatedDuration": 60000,
        }

        result = get_job_status("my-job")

        assert result["build_number"] == 5
        assert result["building"] is True
        assert result["result"] == "RUNNING"
        assert result["duration_s"] is None

    def test_no_builds(self, mock_client, routes):
        routes["/job/empty-job/api/json"] = {"lastBuild": None}

        result = get_job_status("empty-job")

        assert result["success"] is True
        assert "No builds found" in result["message"]

    def test_missing_build(self, mock_client, routes):
        routes["/job/my-job/api/json"] = {}

        result = get_job_status("my-job", build_number=1)

        assert result["error"] is True
        assert "#1" in result["message"]


# ---------------------------------------------------------------------------
# get_build_log
# ---------------------------------------------------------------------------
class TestGetBuildLog:
    """Tests for paginated log retrieval."""

    SAMPLE_LOG = "\n".join(f"line {i}" for i in range(200))  # 200 lines

    @pytest.fixture(autouse=True)
    def _with_log(self, mock_client, routes):
        routes["/job/my-job/1/api/json"] = {}
        mock_client.get_text.return_value = self.SAMPLE_LOG

    def test_forward_default(self, mock_client):
        result = get_build_log("my-job", build_number=1)

        assert result["total_lines"] == 200
        assert result["start_line"] == 0
        assert result["lines_returned"] == 100
        assert result["has_more"] is True
        assert result["log"].startswith("line 0")
        mock_client.get_text.assert_called_once_with("/job/my-job/1/consoleText")

    def test_forward_with_offset(self):
        result = get_build_log("my-job", build_number=1, start_line=150, max_lines=100)

        assert result["start_line"] == 150
        assert result["lines_returned"] == 50
        assert result["has_more"] is False

    def test_from_end_with_offset(self):
        result = get_build_log(
            "my-job", build_number=1, start_line=50, max_lines=50, from_end=True
        )

        # end_idx = 200 - 50 = 150, begin_idx = 150 - 50 = 100
        assert result["start_line"] == 100
        assert result["has_more"] is True
        lines = result["log"].split("\n")
        assert lines[0] == "line 100"
        assert lines[-1] == "line 149"

    def test_from_end_offset_exceeds_total(self):
        result = get_build_log(
            "my-job", build_number=1, start_line=300, max_lines=50, from_end=True
        )

        assert result["lines_returned"] == 0
        assert result["has_more"] is False

    def test_empty_log(self, mock_client):
        mock_client.get_text.return_value = ""

        result = get_build_log("my-job", build_number=1)

        assert result["total_lines"] == 0
        assert result["has_more"] is False

    def test_transport_error(self, mock_client):
        mock_client.get_text.side_effect = JenkinsApiException("timed out")

        result = get_build_log("my-job", build_number=1)

        assert result["error"] is True
        assert "timed out" in result["message"]


# ---------------------------------------------------------------------------
# cancel_build
# ---------------------------------------------------------------------------
class TestCancelBuild:
    def test_cancel_running(self, mock_client, routes):
        routes["/job/my-job/10/api/json"] = {"building": True}

        result = cancel_build("my-job", build_number=10)

        assert result["success"] is True
        assert "cancelled" in result["message"]
        mock_client.post.assert_called_once_with("/job/my-job/10/stop")

    def test_cancel_finished(self, mock_client, routes):
        routes["/job/my-job/10/api/json"] = {"building": False}

        result = cancel_build("my-job", build_number=10)

        assert result["success"] is False
        assert "not running" in result["message"]
        mock_client.post.assert_not_called()


# ---------------------------------------------------------------------------
# list_build_artifacts
# ---------------------------------------------------------------------------
class TestListBuildArtifacts:
    def test_latest_build_artifacts(self, mock_client, routes):
        routes["/job/my-job/api/json"] = {"lastBuild": {"number": 5}}
        routes["/job/my-job/5/api/json"] = {
            "url": "http://j/job/my-job/5/",
            "artifacts": [
                {"fileName": "app.jar", "relativePath": "target/app.jar"},
                {"fileName": "report.html", "relativePath": "reports/report.html"},
            ],
        }

        result = list_build_artifacts("my-job")

        assert result["build_number"] == 5
        assert result["artifact_count"] == 2
        assert result["artifacts"][0]["download_url"] == (
            "http://j/job/my-job/5/artifact/target/app.jar"
        )

    def test_no_builds(self, mock_client, routes):
        routes["/job/empty-job/api/json"] = {"lastBuild": None}

        result = list_build_artifacts("empty-job")

        assert "No builds found" in result["message"]


# ---------------------------------------------------------------------------
# list_jobs, get_queue, list_nodes
# ---------------------------------------------------------------------------
class TestListing:
    def test_list_top_level_jobs(self, mock_client, routes):
        routes["/api/json"] = {"jobs": [{"name": "app"}]}
        routes["/job/app/api/json"] = {"color": "blue", "buildable": True}

        result = list_jobs()

        assert result["job_count"] == 1
        assert result["jobs"][0] == {
            "name": "app",
            "full_name": "app",
            "color": "blue",
            "buildable": True,
        }

    def test_list_folder_jobs(self, mock_client, routes):
        routes["/job/team/api/json"] = {"jobs": [{"name": "svc"}]}
        routes["/job/team/job/svc/api/json"] = {"color": "red"}

        result = list_jobs(folder="team")

        assert result["jobs"][0]["full_name"] == "team/svc"
        assert result["jobs"][0]["buildable"] is False

    def test_get_queue(self, mock_client, routes):
        routes["/queue/api/json"] = {
            "items": [{"id": 3, "task": {"name": "app"}, "why": "Waiting", "blocked": True}]
        }

        result = get_queue()

        assert result["item_count"] == 1
        assert result["items"][0]["queue_id"] == 3
        assert result["items"][0]["blocked"] is True

    def test_list_nodes(self, mock_client, routes):
        routes["/computer/api/json"] = {
            "computer": [
                {
                    "displayName": "agent-1",
                    "offline": True,
                    "offlineCauseReason": "disk full",
                    "numExecutors": 2,
                    "assignedLabels": [{"name": "linux"}],
                }
            ]
        }

        result = list_nodes()

        assert result["nodes"][0] == {
            "name": "agent-1",
            "online": False,
            "offline_reason": "disk full",
            "executors": 2,
            "labels": ["linux"],
        }

    def test_listing_error(self, mock_client):
        result = get_queue()

        assert result["error"] is True
