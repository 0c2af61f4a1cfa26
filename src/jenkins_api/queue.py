"""The build queue and the items waiting in it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import unquote, urlsplit

from jenkins_api.build import Build
from jenkins_api.item import JenkinsItem

if TYPE_CHECKING:
    from jenkins_api.jenkins_client import Jenkins


class Queue(JenkinsItem):
    def get_base_url(self) -> str:
        return "/queue"

    def get_items(self) -> list[QueueItem]:
        return [
            QueueItem(item["id"], self._jenkins, data=item)
            for item in self.get("items", [])
        ]


class QueueItem(JenkinsItem):
    """An entry of the build queue.

    Jenkins forgets queue items a few minutes after they leave the queue, so
    resolve :meth:`get_build` soon after launching.
    """

    def __init__(self, item_id: int, jenkins: Jenkins, data: dict[str, Any] | None = None) -> None:
        self._id = int(item_id)
        super().__init__(jenkins, data)

    def __repr__(self) -> str:
        return f"<QueueItem {self._id} {self.get_job_name()}>"

    @property
    def id(self) -> int:
        return self._id

    @property
    def why(self) -> str | None:
        return self.get("why")

    def get_base_url(self) -> str:
        return f"/queue/item/{self._id}"

    def get_job_name(self) -> str | None:
        """Full name of the queued job, folders included."""
        task = self.get("task") or {}
        return _job_name_from_url(task.get("url"), self._jenkins.base_url) or task.get("name")

    def is_blocked(self) -> bool:
        return bool(self.get("blocked"))

    def is_buildable(self) -> bool:
        return bool(self.get("buildable"))

    def is_stuck(self) -> bool:
        return bool(self.get("stuck"))

    def is_cancelled(self) -> bool:
        return bool(self.get("cancelled"))

    def get_build(self) -> Build | None:
        executable = self.get("executable")
        if not executable:
            return None
        job_name = _job_name_from_url(executable.get("url"), self._jenkins.base_url)
        if job_name is None:
            job_name = self.get_job_name()
        return Build(executable["number"], job_name, self._jenkins)

    def cancel(self) -> None:
        self._jenkins.post("/queue/cancelItem", params={"id": self._id})


def _job_name_from_url(url: str | None, server_url: str) -> str | None:
    """Turn ``<server>/job/a/job/b/12/`` into ``a/b``.

    Only the URL path is read: Jenkins builds these URLs from its own root URL
    setting, which may name another host than the one the client talks to.
    """
    if not url:
        return None
    path = urlsplit(url).path
    context = urlsplit(server_url).path.rstrip("/")
    if context and path.startswith(context + "/"):
        path = path[len(context):]
    parts = path.strip("/").split("/")
    names = []
    i = 0
    while i < len(parts) - 1:
        if parts[i] == "job":
            names.append(unquote(parts[i + 1]))
            i += 2
        else:
            i += 1
    return "/".join(names) or None
