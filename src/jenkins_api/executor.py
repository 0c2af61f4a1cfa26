"""Executor slots on a node."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from jenkins_api.item import JenkinsItem

if TYPE_CHECKING:
    from jenkins_api.jenkins_client import Jenkins

# the built-in node is listed under a display name but addressed as "(...)"
BUILT_IN_NODE_PATHS = {
    "master": "(master)",
    "Built-In Node": "(built-in)",
}


def computer_path(node_name: str) -> str:
    name = BUILT_IN_NODE_PATHS.get(node_name, node_name)
    return "/computer/" + quote(name, safe="()")


class Executor(JenkinsItem):
    def __init__(
        self,
        node_name: str,
        number: int,
        jenkins: Jenkins,
        data: dict[str, Any] | None = None,
    ) -> None:
        self._node_name = node_name
        self._number = int(number)
        super().__init__(jenkins, data)

    def __repr__(self) -> str:
        return f"<Executor {self._node_name}#{self._number}>"

    def get_base_url(self) -> str:
        return f"{computer_path(self._node_name)}/executors/{self._number}"

    def get_number(self) -> int:
        return self._number

    def get_node_name(self) -> str:
        return self._node_name

    def is_idle(self) -> bool:
        return bool(self.get("idle", True))

    def is_likely_stuck(self) -> bool:
        return bool(self.get("likelyStuck"))

    def get_progress(self) -> int | None:
        progress = self.get("progress")
        if progress is None or progress < 0:
            return None
        return progress

    def _executable(self) -> dict[str, Any]:
        return self.get("currentExecutable") or {}

    def get_build_number(self) -> int | None:
        return self._executable().get("number")

    def get_build_url(self) -> str | None:
        return self._executable().get("url")

    def stop(self) -> None:
        self._jenkins.post(self.get_base_url() + "/stop")
