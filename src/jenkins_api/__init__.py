"""Object-oriented client for the Jenkins JSON API."""

from jenkins_api.build import Build, BuildResult
from jenkins_api.exceptions import (
    ActionFailedException,
    BuildNotFoundException,
    JenkinsApiException,
    JobNotFoundException,
)
from jenkins_api.executor import Executor
from jenkins_api.jenkins_client import Jenkins, get_client
from jenkins_api.job import Job
from jenkins_api.node import Node
from jenkins_api.queue import Queue, QueueItem
from jenkins_api.view import View

__all__ = [
    "ActionFailedException",
    "Build",
    "BuildNotFoundException",
    "BuildResult",
    "Executor",
    "Jenkins",
    "JenkinsApiException",
    "Job",
    "JobNotFoundException",
    "Node",
    "Queue",
    "QueueItem",
    "View",
    "get_client",
]
