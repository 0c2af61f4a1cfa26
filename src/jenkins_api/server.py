"""Jenkins MCP Server - expose the jenkins_api object model as MCP tools."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import jenkins
from fastmcp import FastMCP

from jenkins_api.build import Build
from jenkins_api.jenkins_client import get_client

mcp = FastMCP("Jenkins MCP Server")


def _format_error(e: Exception) -> dict[str, Any]:
    """Format an exception into a consistent error response."""
    return {"error": True, "message": str(e)}


def _build_status(build: Build) -> dict[str, Any]:
    timestamp = build.get_timestamp()
    start_time = (
        datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
        if timestamp
        else None
    )
    building = build.is_building()
    return {
        "build_number": build.number,
        # SUCCESS, FAILURE, UNSTABLE, ABORTED, WAITING or RUNNING
        "result": build.get_result().value,
        "building": building,
        "start_time": start_time,
        "duration_s": None if building else build.get_duration(),
        "estimated_duration_s": build.get_estimated_duration(),
        "display_name": build.get_display_name() or "",
        "url": build.get_build_url() or "",
    }


# ---------------------------------------------------------------------------
# Tool 1: trigger_job
# ---------------------------------------------------------------------------
@mcp.tool
def trigger_job(
    job_name: str,
    parameters: dict[str, Any] | None = None,
    wait: bool = False,
    timeout: int = 3600,
    poll_interval: int = 5,
) -> dict[str, Any]:
    """Trigger a Jenkins job build, optionally with parameters.

    Args:
        job_name: Full name of the Jenkins job (use '/' for folder paths).
        parameters: Optional dict of build parameters (key-value pairs).
        wait: If True, block until the build finishes or `timeout` elapses.
        timeout: Maximum seconds to wait when `wait` is True.
        poll_interval: Seconds between status checks when `wait` is True.

    Returns:
        A dict containing the queue_id of the triggered build, or the final
        build status when waiting.
    """
    try:
        job = get_client().get_job(job_name)
        if not wait:
            queue_id = job.launch(parameters)
            return {
                "success": True,
                "job_name": job_name,
                "queue_id": queue_id,
                "message": f"Job '{job_name}' has been triggered. Queue ID: {queue_id}",
            }

        build = job.launch_and_wait(
            parameters, timeout=timeout, check_interval=poll_interval
        )
        if build is None:
            return {
                "success": True,
                "job_name": job_name,
                "message": f"Job '{job_name}' was triggered but no build started in time.",
            }
        status = _build_status(build)
        if status["building"]:
            message = f"Build #{build.number} of '{job_name}' is still running."
        else:
            message = f"Build #{build.number} of '{job_name}' finished: {status['result']}"
        return {"success": True, "job_name": job_name, **status, "message": message}
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 2: get_job_parameters
# ---------------------------------------------------------------------------
@mcp.tool
def get_job_parameters(job_name: str) -> dict[str, Any]:
    """Get the parameter definitions for a Jenkins job.

    Args:
        job_name: Full name of the Jenkins job.

    Returns:
        A dict containing a list of parameter definitions with name, type,
        default value and description for each parameter.
    """
    try:
        job = get_client().get_job(job_name)
        params = [
            {
                "name": name,
                "type": definition["type"] or "",
                "description": definition["description"] or "",
                "default_value": definition["default"],
                "choices": definition["choices"],
            }
            for name, definition in job.get_parameters_definition().items()
        ]
        return {
            "success": True,
            "job_name": job_name,
            "parameter_count": len(params),
            "parameters": params,
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 3: get_job_status
# ---------------------------------------------------------------------------
@mcp.tool
def get_job_status(
    job_name: str, build_number: int | None = None
) -> dict[str, Any]:
    """Get the status of a Jenkins job build.

    Args:
        job_name: Full name of the Jenkins job.
        build_number: Specific build number to query. If not provided, the
            latest build is used.

    Returns:
        A dict with build status information including build number, result,
        whether it is still building, start time and duration.
    """
    try:
        job = get_client().get_job(job_name)
        if build_number is None:
            build = job.get_last_build()
            if build is None:
                return {
                    "success": True,
                    "job_name": job_name,
                    "message": "No builds found for this job.",
                }
        else:
            build = job.get_build(build_number)

        return {"success": True, "job_name": job_name, **_build_status(build)}
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 4: get_build_log
# ---------------------------------------------------------------------------
@mcp.tool
def get_build_log(
    job_name: str,
    build_number: int,
    start_line: int = 0,
    max_lines: int = 100,
    from_end: bool = False,
) -> dict[str, Any]:
    """Get paginated console output for a Jenkins build.

    Supports reading from the beginning or the end of the log.

    Args:
        job_name: Full name of the Jenkins job.
        build_number: The build number to fetch logs for.
        start_line: Line offset. When from_end is False, this is the 0-based
            line number to start reading from. When from_end is True, this is
            the number of lines to skip from the very end.
        max_lines: Maximum number of lines to return (default 100).
        from_end: If True, read lines from the end of the log instead of the
            beginning.

    Returns:
        A dict with the log content, total line count, the actual start line
        number, and whether more lines are available.
    """
    try:
        build = get_client().get_build(job_name, build_number)
        all_lines = build.get_console_text().splitlines()
        total_lines = len(all_lines)

        if from_end:
            # start_line=0, max_lines=50 => last 50 lines
            end_idx = max(total_lines - start_line, 0)
            begin_idx = max(end_idx - max_lines, 0)
            has_more = begin_idx > 0
        else:
            begin_idx = min(start_line, total_lines)
            end_idx = min(begin_idx + max_lines, total_lines)
            has_more = end_idx < total_lines
        selected = all_lines[begin_idx:end_idx]

        return {
            "success": True,
            "job_name": job_name,
            "build_number": build_number,
            "log": "\n".join(selected),
            "total_lines": total_lines,
            "start_line": begin_idx,
            "lines_returned": len(selected),
            "has_more": has_more,
            "from_end": from_end,
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 5: cancel_build
# ---------------------------------------------------------------------------
@mcp.tool
def cancel_build(job_name: str, build_number: int) -> dict[str, Any]:
    """Cancel (stop) a running Jenkins build.

    Args:
        job_name: Full name of the Jenkins job.
        build_number: The build number to cancel.

    Returns:
        A dict indicating whether the cancellation was requested.
    """
    try:
        build = get_client().get_build(job_name, build_number)
        if build.stop() is None:
            return {
                "success": False,
                "job_name": job_name,
                "build_number": build_number,
                "message": f"Build #{build_number} of '{job_name}' is not running.",
            }
        return {
            "success": True,
            "job_name": job_name,
            "build_number": build_number,
            "message": f"Build #{build_number} of '{job_name}' has been cancelled.",
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 6: list_build_artifacts
# ---------------------------------------------------------------------------
@mcp.tool
def list_build_artifacts(
    job_name: str, build_number: int | None = None
) -> dict[str, Any]:
    """List the archived artifacts of a build.

    Args:
        job_name: Full name of the Jenkins job.
        build_number: Build to inspect; the latest build when omitted.

    Returns:
        A dict with the file name, relative path and download URL of each
        artifact.
    """
    try:
        job = get_client().get_job(job_name)
        if build_number is None:
            build = job.get_last_build()
            if build is None:
                return {
                    "success": True,
                    "job_name": job_name,
                    "message": "No builds found for this job.",
                }
        else:
            build = job.get_build(build_number)

        artifacts = build.get_artifacts()
        return {
            "success": True,
            "job_name": job_name,
            "build_number": build.number,
            "artifact_count": len(artifacts),
            "artifacts": artifacts,
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 7: list_jobs
# ---------------------------------------------------------------------------
@mcp.tool
def list_jobs(folder: str | None = None) -> dict[str, Any]:
    """List jobs at the top level or inside a folder.

    Args:
        folder: Full name of a folder job. Top-level jobs when omitted.
    """
    try:
        client = get_client()
        jobs = client.get_job(folder).get_jobs() if folder else client.get_jobs()
        return {
            "success": True,
            "folder": folder,
            "job_count": len(jobs),
            "jobs": [
                {
                    "name": name,
                    "full_name": job.get_full_name(),
                    "color": job.get_color(),
                    "buildable": job.is_buildable(),
                }
                for name, job in jobs.items()
            ],
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 8: get_queue
# ---------------------------------------------------------------------------
@mcp.tool
def get_queue() -> dict[str, Any]:
    """List the items waiting in the build queue."""
    try:
        items = get_client().get_queue().get_items()
        return {
            "success": True,
            "item_count": len(items),
            "items": [
                {
                    "queue_id": item.id,
                    "job_name": item.get_job_name(),
                    "why": item.why,
                    "blocked": item.is_blocked(),
                    "stuck": item.is_stuck(),
                }
                for item in items
            ],
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Tool 9: list_nodes
# ---------------------------------------------------------------------------
@mcp.tool
def list_nodes() -> dict[str, Any]:
    """List build nodes with their online state and executor count."""
    try:
        nodes = get_client().get_nodes()
        return {
            "success": True,
            "node_count": len(nodes),
            "nodes": [
                {
                    "name": node.name,
                    "online": node.is_online(),
                    "offline_reason": node.get_offline_reason(),
                    "executors": node.get_num_executors(),
                    "labels": node.get_labels(),
                }
                for node in nodes
            ],
        }
    except jenkins.JenkinsException as e:
        return _format_error(e)
    except ValueError as e:
        return _format_error(e)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
