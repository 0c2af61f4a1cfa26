"""Shared fixtures: a Jenkins facade whose JSON comes from an in-memory route table."""

from __future__ import annotations

import functools
from typing import Any
from unittest.mock import MagicMock

import pytest

from jenkins_api.exceptions import JenkinsApiException
from jenkins_api.jenkins_client import Jenkins

NAVIGATION = (
    "get_info",
    "get_jobs",
    "get_job",
    "get_build",
    "get_executors",
    "get_queue",
    "get_queue_item",
    "get_nodes",
    "get_node",
    "get_views",
    "get_view",
    "get_primary_view",
)


def sequence(*values: Any):
    """Return a route that yields each value in turn, then repeats the last."""
    remaining = list(values)

    def next_value() -> Any:
        if len(remaining) > 1:
            return remaining.pop(0)
        return remaining[0]

    return next_value


@pytest.fixture
def routes() -> dict[str, Any]:
    """Map of ``/path/api/json`` to a JSON dict (or a callable returning one)."""
    return {}


@pytest.fixture
def fake_jenkins(routes):
    """A ``Jenkins`` whose transport is mocked and whose navigation is real."""
    server = MagicMock(spec=Jenkins)
    server.base_url = "http://j/"

    def get_json(path, depth=None, params=None):
        if path not in routes:
            raise JenkinsApiException(f"GET {path}: resource not found")
        value = routes[path]
        return value() if callable(value) else value

    server.get_json.side_effect = get_json
    server.post.return_value = MagicMock(headers={"Location": "http://j/queue/item/7/"})
    for name in NAVIGATION:
        getattr(server, name).side_effect = functools.partial(getattr(Jenkins, name), server)
    return server
