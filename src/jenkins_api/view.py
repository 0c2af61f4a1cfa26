"""List views grouping jobs on the dashboard."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from jenkins_api.exceptions import ActionFailedException, JenkinsApiException
from jenkins_api.item import JenkinsItem
from jenkins_api.job import Job

if TYPE_CHECKING:
    from jenkins_api.jenkins_client import Jenkins


class View(JenkinsItem):
    def __init__(self, name: str, jenkins: Jenkins, data: dict[str, Any] | None = None) -> None:
        self._name = name
        super().__init__(jenkins, data)

    def __str__(self) -> str:
        return self._name

    @property
    def name(self) -> str:
        return self._name

    def get_base_url(self) -> str:
        return "/view/" + quote(self._name, safe="")

    def get_name(self) -> str:
        return self._name

    def get_description(self) -> str | None:
        return self.get("description")

    def get_jobs(self) -> dict[str, Job]:
        return {job["name"]: Job(job["name"], self._jenkins) for job in self.get("jobs", [])}

    def _post_action(self, action: str, job_name: str) -> None:
        try:
            self._jenkins.post(self.get_base_url() + action, params={"name": job_name})
        except JenkinsApiException as e:
            raise ActionFailedException(
                f"Error updating view {self._name} with job {job_name}"
            ) from e
        self.refresh()

    def add_job(self, job_name: str) -> None:
        self._post_action("/addJobToView", job_name)

    def remove_job(self, job_name: str) -> None:
        self._post_action("/removeJobFromView", job_name)
