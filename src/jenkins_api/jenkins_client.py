"""Jenkins facade over python-jenkins, with environment-based configuration."""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import urljoin

import jenkins
import requests
from loguru import logger

from jenkins_api.build import Build
from jenkins_api.exceptions import ActionFailedException, JenkinsApiException
from jenkins_api.executor import Executor
from jenkins_api.job import XML_HEADERS, Job, job_path
from jenkins_api.node import Node
from jenkins_api.queue import Queue, QueueItem
from jenkins_api.view import View


class Jenkins:
    """Entry point to a Jenkins server.

    HTTP, authentication and CSRF crumbs are handled by a
    :class:`jenkins.Jenkins` handle; this class turns the JSON it returns into
    :class:`Job`, :class:`Build`, :class:`Node`, ... objects.

    Paths passed to :meth:`get_json`, :meth:`get_text` and :meth:`post` are
    relative to the server root (``/job/foo/api/json``).
    """

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._server = jenkins.Jenkins(url, username=username, password=password, **kwargs)

    def __repr__(self) -> str:
        return f"<Jenkins {self.base_url}>"

    @property
    def base_url(self) -> str:
        return self._server.server

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_url, path.lstrip("/"))

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        logger.debug(f"{method} {url}")
        try:
            return self._server.jenkins_request(requests.Request(method, url, **kwargs))
        except jenkins.NotFoundException as e:
            raise JenkinsApiException(f"{method} {url}: resource not found") from e
        except jenkins.JenkinsException as e:
            raise JenkinsApiException(f"{method} {url} failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise JenkinsApiException(f"{method} {url} failed: {e}") from e

    def get_json(
        self,
        path: str,
        depth: int | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        query = dict(params or {})
        if depth is not None:
            query["depth"] = depth
        response = self._request("GET", path, params=query)
        try:
            return response.json()
        except ValueError as e:
            raise JenkinsApiException(f"Could not parse JSON from {self._url(path)}") from e

    def get_text(self, path: str) -> str:
        return self._request("GET", path).text

    def post(
        self,
        path: str,
        data: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> requests.Response:
        """POST to an action endpoint and return the response, body or not."""
        return self._request("POST", path, data=data, headers=headers or {}, params=params)

    def get_info(self) -> dict[str, Any]:
        return self.get_json("/api/json")

    def get_version(self) -> str:
        try:
            return self._server.get_version()
        except jenkins.JenkinsException as e:
            raise JenkinsApiException(f"Could not read version of {self.base_url}: {e}") from e

    # ------------------------------------------------------------------
    # Jobs and builds
    # ------------------------------------------------------------------
    def get_jobs(self) -> dict[str, Job]:
        """Return the top level jobs keyed by name."""
        return {job["name"]: Job(job["name"], self) for job in self.get_info().get("jobs", [])}

    def get_job(self, name: str) -> Job:
        """Return a job; ``folder/sub/job`` walks into folders."""
        parts = name.strip("/").split("/")
        job = Job(parts[0], self)
        for part in parts[1:]:
            job = job.get_job(part)
        return job

    def get_build(self, job: Job | str, number: int) -> Build:
        return Build(number, job, self)

    def create_job(self, name: str, config_xml: str) -> Job:
        """Create a job from its ``config.xml``; ``folder/job`` creates it in a folder."""
        folder, _, short_name = name.strip("/").rpartition("/")
        base = job_path(folder) if folder else ""
        try:
            self.post(
                base + "/createItem",
                data=config_xml.encode("utf-8"),
                headers=XML_HEADERS,
                params={"name": short_name},
            )
        except JenkinsApiException as e:
            raise ActionFailedException(f"Error creating job {name} on {self.base_url}") from e
        logger.info(f"Created job {name}")
        return self.get_job(name)

    # ------------------------------------------------------------------
    # Executors, queue, nodes and views
    # ------------------------------------------------------------------
    def get_executors(self) -> list[Executor]:
        data = self.get_json("/computer/api/json", depth=1)
        return [
            Executor(computer["displayName"], executor["number"], self, data=executor)
            for computer in data.get("computer", [])
            for executor in computer.get("executors") or []
        ]

    def get_queue(self) -> Queue:
        return Queue(self)

    def get_queue_item(self, item_id: int) -> QueueItem:
        return QueueItem(item_id, self)

    def get_nodes(self) -> list[Node]:
        data = self.get_json("/computer/api/json")
        return [Node(computer["displayName"], self, data=computer) for computer in data.get("computer", [])]

    def get_node(self, name: str) -> Node:
        return Node(name, self)

    def get_views(self) -> dict[str, View]:
        return {view["name"]: View(view["name"], self) for view in self.get_info().get("views", [])}

    def get_view(self, name: str) -> View:
        return View(name, self)

    def get_primary_view(self) -> View | None:
        primary = self.get_info().get("primaryView")
        if not primary:
            return None
        return View(primary["name"], self)


def get_client() -> Jenkins:
    """Create a Jenkins client from environment variables.

    Environment variables:
        JENKINS_URL: Jenkins server URL (required)
        JENKINS_USERNAME: Jenkins username (optional)
        JENKINS_API_TOKEN: Jenkins API token (optional)
        JENKINS_TIMEOUT: Request timeout in seconds (optional)

    Returns:
        A configured Jenkins client instance.

    Raises:
        ValueError: If JENKINS_URL is not set or JENKINS_TIMEOUT is not a number.
    """
    url = os.environ.get("JENKINS_URL")
    if not url:
        raise ValueError(
            "JENKINS_URL environment variable is required. "
            "Please set it to your Jenkins server URL."
        )
    username = os.environ.get("JENKINS_USERNAME") or None
    token = os.environ.get("JENKINS_API_TOKEN") or None
    timeout = os.environ.get("JENKINS_TIMEOUT")
    return Jenkins(
        url,
        username=username,
        password=token,
        timeout=float(timeout) if timeout else None,
    )
