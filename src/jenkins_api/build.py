"""A single numbered build of a job."""

from __future__ import annotations

import math
import time
from enum import Enum
from typing import TYPE_CHECKING, Any

from jenkins_api.exceptions import BuildNotFoundException, JenkinsApiException
from jenkins_api.item import JenkinsItem

if TYPE_CHECKING:
    from jenkins_api.executor import Executor
    from jenkins_api.jenkins_client import Jenkins
    from jenkins_api.job import Job


class BuildResult(str, Enum):
    FAILURE = "FAILURE"
    SUCCESS = "SUCCESS"
    RUNNING = "RUNNING"
    WAITING = "WAITING"
    UNSTABLE = "UNSTABLE"
    ABORTED = "ABORTED"


class Build(JenkinsItem):
    """One execution of a :class:`~jenkins_api.job.Job`.

    ``job`` may be a Job instance or a job name; a name containing ``/`` is
    treated as a folder path.
    """

    def __init__(
        self,
        number: int,
        job: Job | str,
        jenkins: Jenkins,
        data: dict[str, Any] | None = None,
    ) -> None:
        self._number = int(number)
        self._job = job
        super().__init__(jenkins, data)

    def __repr__(self) -> str:
        return f"<Build {self.get_job_name()} #{self._number}>"

    @property
    def number(self) -> int:
        return self._number

    @property
    def job(self) -> Job | str:
        return self._job

    def refresh(self) -> Build:
        try:
            super().refresh()
        except JenkinsApiException as e:
            raise BuildNotFoundException(self._number, self.get_job_name()) from e
        return self

    def get_base_url(self) -> str:
        from jenkins_api.job import Job, job_path

        if isinstance(self._job, Job):
            return f"{self._job.get_base_url()}/{self._number}"
        return f"{job_path(self._job)}/{self._number}"

    def get_number(self) -> int:
        return self._number

    def get_job_name(self) -> str:
        from jenkins_api.job import Job

        if isinstance(self._job, Job):
            return self._job.get_full_name()
        return self._job

    def get_built_on(self) -> str | None:
        return self.get("builtOn")

    def get_build_url(self) -> str | None:
        return self.get("url")

    def get_display_name(self) -> str | None:
        return self.get("displayName")

    def get_result(self) -> BuildResult:
        """Return the build outcome; anything unrecognised counts as RUNNING."""
        try:
            return BuildResult(self.get("result"))
        except ValueError:
            return BuildResult.RUNNING

    def is_building(self) -> bool:
        return bool(self.get("building"))

    def get_timestamp(self) -> int:
        """Start time in seconds since the epoch."""
        return int((self.get("timestamp") or 0) / 1000)

    def get_duration(self) -> int:
        """Duration in seconds, or time elapsed so far while still running."""
        duration = self.get("duration") or 0
        if duration == 0:
            return int(time.time() - self.get_timestamp())
        return int(duration / 1000)

    def get_input_parameters(self) -> dict[str, Any]:
        parameters: dict[str, Any] = {}
        for action in self.get("actions") or []:
            if not action or "parameters" not in action:
                continue
            for parameter in action["parameters"]:
                if "value" in parameter:
                    parameters[parameter["name"]] = parameter["value"]
                elif "number" in parameter and "jobName" in parameter:
                    # run parameter: points at another job's build
                    parameters[parameter["name"]] = {
                        "number": parameter["number"],
                        "jobName": parameter["jobName"],
                    }
            break
        return parameters

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------
    def get_executor(self) -> Executor | None:
        if not self.is_building():
            return None
        build_url = self.get_build_url()
        # a build can show up on more than one slot; the last one listed wins
        match = None
        for executor in self._jenkins.get_executors():
            if executor.get_build_url() == build_url:
                match = executor
        return match

    def get_progress(self) -> int | None:
        executor = self.get_executor()
        if executor is None:
            return None
        return executor.get_progress()

    def get_estimated_duration(self) -> float | None:
        """Estimated total duration in seconds.

        Uses the server's ``estimatedDuration`` when present, otherwise
        extrapolates from the executor's progress percentage.
        """
        estimated = self.get("estimatedDuration")
        if estimated and estimated > 0:
            return estimated / 1000

        progress = self.get_progress()
        if progress is not None and progress > 0:
            elapsed = time.time() - self.get_timestamp()
            return math.ceil(elapsed / (progress / 100))
        return None

    def get_remaining_execution_time(self) -> float | None:
        """Seconds left, based on the server clock being close to ours."""
        estimated = self.get_estimated_duration()
        if estimated is None:
            return None
        return max(0, estimated - (time.time() - self.get_timestamp()))

    # ------------------------------------------------------------------
    # Artifacts, console and actions
    # ------------------------------------------------------------------
    def get_artifacts(self) -> list[dict[str, str]]:
        build_url = (self.get_build_url() or "").rstrip("/")
        return [
            {
                "file_name": artifact.get("fileName", ""),
                "relative_path": artifact.get("relativePath", ""),
                "download_url": f"{build_url}/artifact/{artifact.get('relativePath', '')}",
            }
            for artifact in self.get("artifacts") or []
        ]

    def get_console_text(self) -> str:
        return self._jenkins.get_text(self.get_base_url() + "/consoleText")

    def set_description(self, text: str) -> None:
        self._jenkins.post(
            self.get_base_url() + "/submitDescription", data={"description": text}
        )

    def stop(self) -> bool | None:
        """Abort the build. Returns None when it is not running."""
        if not self.is_building():
            return None
        self._jenkins.post(self.get_base_url() + "/stop")
        return True
