"""Nodes (agents and the built-in node)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from jenkins_api.exceptions import ActionFailedException, JenkinsApiException
from jenkins_api.executor import Executor, computer_path
from jenkins_api.item import JenkinsItem

if TYPE_CHECKING:
    from jenkins_api.jenkins_client import Jenkins


class Node(JenkinsItem):
    def __init__(self, name: str, jenkins: Jenkins, data: dict[str, Any] | None = None) -> None:
        self._name = name
        super().__init__(jenkins, data)

    def __str__(self) -> str:
        return self._name

    @property
    def name(self) -> str:
        return self._name

    def get_base_url(self) -> str:
        return computer_path(self._name)

    def get_name(self) -> str:
        return self._name

    def is_online(self) -> bool:
        return not self.get("offline", False)

    def is_temporarily_offline(self) -> bool:
        return bool(self.get("temporarilyOffline"))

    def get_offline_reason(self) -> str | None:
        return self.get("offlineCauseReason") or None

    def get_num_executors(self) -> int:
        return int(self.get("numExecutors") or 0)

    def get_labels(self) -> list[str]:
        return [label["name"] for label in self.get("assignedLabels") or []]

    def get_executors(self) -> list[Executor]:
        return [
            Executor(self._name, number, self._jenkins)
            for number in range(self.get_num_executors())
        ]

    def _toggle_offline(self, message: str = "") -> None:
        try:
            self._jenkins.post(
                self.get_base_url() + "/toggleOffline",
                params={"offlineMessage": message},
            )
        except JenkinsApiException as e:
            raise ActionFailedException(f"Error toggling node {self._name} offline") from e
        self.refresh()

    def set_offline(self, message: str = "") -> None:
        if self.is_temporarily_offline():
            return
        logger.info(f"Taking node {self._name} offline: {message}")
        self._toggle_offline(message)

    def set_online(self) -> None:
        if not self.is_temporarily_offline():
            return
        logger.info(f"Bringing node {self._name} back online")
        self._toggle_offline()

    def delete(self) -> None:
        try:
            self._jenkins.post(self.get_base_url() + "/doDelete")
        except JenkinsApiException as e:
            raise ActionFailedException(f"Error deleting node {self._name}") from e
