"""Jobs, including jobs nested inside folders."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from loguru import logger

from jenkins_api.build import Build
from jenkins_api.exceptions import (
    ActionFailedException,
    JenkinsApiException,
    JobNotFoundException,
)
from jenkins_api.item import JenkinsItem

if TYPE_CHECKING:
    from jenkins_api.jenkins_client import Jenkins

XML_HEADERS = {"Content-Type": "text/xml; charset=utf-8"}


def job_path(full_name: str) -> str:
    """Return the URL path of a job given its ``folder/sub/job`` name."""
    segments = [quote(part, safe="") for part in full_name.strip("/").split("/")]
    return "/job/" + "/job/".join(segments)


def queue_id_from_location(location: str | None) -> int | None:
    # Location looks like "http://jenkins/queue/item/25/"
    if not location:
        return None
    tail = location.rstrip("/").rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else None


class Job(JenkinsItem):
    def __init__(self, name: str, parent: Jenkins | Job, data: dict[str, Any] | None = None) -> None:
        from jenkins_api.jenkins_client import Jenkins

        self._name = name
        if isinstance(parent, Job):
            self._parent_job: Job | None = parent
            jenkins = parent.jenkins
        elif isinstance(parent, Jenkins):
            self._parent_job = None
            jenkins = parent
        else:
            raise TypeError("parent must be either a Jenkins instance or a Job")
        super().__init__(jenkins, data)

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"<Job {self.get_full_name()}>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent_job(self) -> Job | None:
        return self._parent_job

    def get_name(self) -> str:
        return self._name

    def get_parent_job(self) -> Job | None:
        return self._parent_job

    def get_full_name(self) -> str:
        names = [self._name]
        parent = self._parent_job
        while parent is not None:
            names.append(parent.name)
            parent = parent.parent_job
        return "/".join(reversed(names))

    def refresh(self) -> Job:
        try:
            super().refresh()
        except JenkinsApiException as e:
            raise JobNotFoundException(self.get_full_name()) from e
        return self

    def get_base_url(self) -> str:
        """Return ``/job/<a>/job/<b>/.../job/<name>`` for this job.

        Ancestor names are collected walking up to the root, then reversed so
        the outermost folder comes first.
        """
        ancestors = []
        parent = self._parent_job
        while parent is not None:
            ancestors.append(quote(parent.name, safe=""))
            parent = parent.parent_job
        ancestors.reverse()
        segments = ancestors + [quote(self._name, safe="")]
        return "/job/" + "/job/".join(segments)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def get_job(self, name: str) -> Job:
        return Job(name, self)

    def get_jobs(self) -> dict[str, Job]:
        """Return the jobs contained in this folder, keyed by name."""
        data = self._jenkins.get_json(self.get_url())
        return {job["name"]: self.get_job(job["name"]) for job in data.get("jobs", [])}

    def get_build(self, number: int) -> Build:
        return Build(number, self, self._jenkins)

    def get_builds(self) -> list[Build]:
        return [self.get_build(build["number"]) for build in self.get("builds", [])]

    def _build_from(self, key: str) -> Build | None:
        ref = self.get(key)
        if not ref:
            return None
        return self.get_build(ref["number"])

    def get_last_build(self) -> Build | None:
        return self._build_from("lastBuild")

    def get_last_successful_build(self) -> Build | None:
        return self._build_from("lastSuccessfulBuild")

    def get_last_failed_build(self) -> Build | None:
        return self._build_from("lastFailedBuild")

    def get_last_completed_build(self) -> Build | None:
        return self._build_from("lastCompletedBuild")

    def is_currently_building(self) -> bool:
        last_build = self.get_last_build()
        if last_build is None:
            return False
        return last_build.is_building()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def get_parameters_definition(self) -> dict[str, dict[str, Any]]:
        """Return the job's parameter definitions keyed by parameter name.

        Older servers list ``parameterDefinitions`` under ``actions``, newer
        ones under ``property``; both are read.
        """
        parameters: dict[str, dict[str, Any]] = {}
        for entry in (self.get("actions") or []) + (self.get("property") or []):
            if not entry or "parameterDefinitions" not in entry:
                continue
            for definition in entry["parameterDefinitions"]:
                default = definition.get("defaultParameterValue")
                parameters[definition["name"]] = {
                    "default": default.get("value") if default else None,
                    "choices": definition.get("choices"),
                    "description": definition.get("description"),
                    "type": definition.get("type"),
                }
        return parameters

    def is_buildable(self) -> bool:
        return bool(self.get("buildable"))

    def get_color(self) -> str | None:
        return self.get("color")

    def get_description(self) -> str | None:
        return self.get("description")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def launch(self, parameters: dict[str, Any] | None = None) -> int | None:
        """Queue a build and return the queue item id, if the server gave one."""
        if not parameters:
            response = self._jenkins.post(self.get_base_url() + "/build")
        else:
            response = self._jenkins.post(
                self.get_base_url() + "/buildWithParameters", data=parameters
            )
        queue_id = queue_id_from_location(response.headers.get("Location"))
        logger.info(f"Launched job {self.get_full_name()} (queue item {queue_id})")
        return queue_id

    def launch_and_wait(
        self,
        parameters: dict[str, Any] | None = None,
        timeout: float = 86400,
        check_interval: float = 5,
    ) -> Build | None:
        """Launch a build and block until it has finished.

        Returns the last build observed when the wait ends. Reaching
        ``timeout`` is not an error: the returned build may still be running
        (or may be the previous build) and callers must check it.

        If the job was already building, no new build is launched and the
        call waits for the running build instead.
        """
        deadline = time.monotonic() + timeout
        last_build = self.get_last_build()

        if last_build is not None and last_build.is_building():
            logger.info(
                f"Job {self.get_full_name()} is already building "
                f"#{last_build.number}, waiting for it"
            )
            while last_build.is_building() and time.monotonic() < deadline:
                time.sleep(check_interval)
                last_build.refresh()
            if last_build.is_building():
                logger.warning(f"Timed out waiting for {self.get_full_name()} #{last_build.number}")
            return last_build

        last_number = last_build.number if last_build is not None else 0
        self.launch(parameters)

        build = last_build
        while self._still_pending(build, last_number) and time.monotonic() < deadline:
            time.sleep(check_interval)
            self.refresh()
            build = self.get_last_build()

        if self._still_pending(build, last_number):
            logger.warning(f"Timed out waiting for a new build of {self.get_full_name()}")
        return build

    @staticmethod
    def _still_pending(build: Build | None, last_number: int) -> bool:
        number = build.number if build is not None else 0
        if number == last_number:
            return True
        return number == last_number + 1 and build.is_building()

    def _post_action(self, action: str, description: str, **kwargs: Any) -> None:
        try:
            self._jenkins.post(self.get_base_url() + action, **kwargs)
        except JenkinsApiException as e:
            raise ActionFailedException(
                f"Error {description} job {self.get_full_name()} on {self._jenkins.base_url}"
            ) from e

    def delete(self) -> None:
        self._post_action("/doDelete", "deleting")

    def disable(self) -> None:
        self._post_action("/disable", "disabling")

    def enable(self) -> None:
        self._post_action("/enable", "enabling")

    def get_config(self) -> str:
        config = self._jenkins.get_text(self.get_base_url() + "/config.xml")
        if not config:
            raise ActionFailedException(
                f"Error getting configuration for job {self.get_full_name()}"
            )
        return config

    def set_config(self, config_xml: str) -> None:
        self._post_action(
            "/config.xml",
            "updating configuration of",
            data=config_xml.encode("utf-8"),
            headers=XML_HEADERS,
        )
