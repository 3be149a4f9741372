from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import HTTPError, MissingAttributeError
from .resource import Resource, has_many

logger = logging.getLogger(__name__)


class CommentModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    body: str = ""
    author: dict[str, Any] | None = None


class WatcherModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    display_name: str | None = Field(default=None, alias="displayName")
    active: bool = True


class Comment(Resource):
    belongs_to = ("issue",)
    model = CommentModel


class Watcher(Resource):
    """A user watching an issue.

    Watchers have no URL of their own: adding one POSTs the user name to the
    issue's watcher list and removing one passes it as a query parameter.
    """

    belongs_to = ("issue",)
    endpoint_name = "watchers"
    collection_key = "watchers"
    key_attribute = "name"
    model = WatcherModel

    @property
    def url(self) -> str:
        return f"{self.client.options.rest_base_path}/issue/{self.issue_id}/{self.endpoint_name}"

    def save(self, payload: Mapping[str, Any]) -> bool:
        name = payload.get("name")
        if not name:
            raise MissingAttributeError("Field 'name' is mandatory")
        self.client.post(self.url, name)
        self.set_attrs({"name": name})
        self.fetch(reload=True)
        self.expanded = False
        return True

    def delete(self) -> bool:
        name = self.attrs.get("name", "")
        try:
            self.client.delete(f"{self.url}?username={quote(name)}")
        except HTTPError as exc:
            logger.warning("Failed to remove watcher %r: %s", name, exc.body)
            return False
        self.deleted = True
        return True

    def set_attrs_from_response(self, response: Any) -> None:
        payload = self.client.parse_json(response.text)
        if not isinstance(payload, Mapping):
            return
        for watcher in payload.get(self.collection_key, []):
            if watcher.get("name") == self.attrs.get("name"):
                self.set_attrs(watcher)
                break


class Issue(Resource):
    comments = has_many(Comment, nested_under=("fields", "comment"))
    watchers = has_many(Watcher, nested_under=("fields", "watches"))
