"""Error conditions raised by the Jenkins object model."""

from __future__ import annotations

import jenkins


class JenkinsApiException(jenkins.JenkinsException):
    """Generic failure talking to the Jenkins API."""


class JobNotFoundException(JenkinsApiException):
    """The requested job does not exist (or is not visible)."""

    def __init__(self, job_name: str) -> None:
        super().__init__(f"Job '{job_name}' not found")
        self.job_name = job_name


class BuildNotFoundException(JenkinsApiException):
    """The requested build number does not exist for the job."""

    def __init__(self, build_number: int, job_name: str) -> None:
        super().__init__(f"Build #{build_number} of job '{job_name}' not found")
        self.build_number = build_number
        self.job_name = job_name


class ActionFailedException(JenkinsApiException, RuntimeError):
    """A mutating request (POST) was rejected by the server."""
