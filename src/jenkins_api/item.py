"""Base class for objects backed by a Jenkins ``api/json`` resource."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jenkins_api.jenkins_client import Jenkins


class JenkinsItem:
    """A JSON snapshot of one server resource.

    Subclasses provide :meth:`get_base_url`; the snapshot is fetched from
    ``<base>/api/json`` and kept until :meth:`refresh` is called again.
    """

    def __init__(self, jenkins: Jenkins, data: dict[str, Any] | None = None) -> None:
        self._jenkins = jenkins
        self._data: dict[str, Any] = {}
        if data is None:
            self.refresh()
        else:
            self._data = data

    @property
    def jenkins(self) -> Jenkins:
        return self._jenkins

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def get_base_url(self) -> str:
        raise NotImplementedError

    def get_url(self) -> str:
        return self.get_base_url() + "/api/json"

    def refresh(self) -> JenkinsItem:
        self._data = self._jenkins.get_json(self.get_url())
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)
