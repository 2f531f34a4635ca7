"""In-memory drive that answers GraphClient calls the way the Graph API does."""

from __future__ import annotations

import itertools
import re
from typing import Any
from unittest.mock import MagicMock
from urllib.parse import unquote

DRIVE_ID = "drive-1"
PREFIX = f"/drives/{DRIVE_ID}/items/"
ROOT_ID = "root-id"

_ID_TARGET = re.compile(r"^([^/:]+)(.*)$")


def _error(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}}


class FakeDrive:
    """A drive tree that records every request sent to it.

    ``graph`` is a MagicMock standing in for GraphClient whose ``request`` and
    ``get`` are routed here, so tests can assert on both the resulting tree
    and the exact requests issued.
    """

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {
            ROOT_ID: {"id": ROOT_ID, "name": "root", "webUrl": "https://x/root", "folder": {}}
        }
        self.calls: list[tuple[str, str, Any]] = []
        self._ids = itertools.count(1)
        self.graph = MagicMock()
        self.graph.request.side_effect = self._dispatch
        self.graph.get.side_effect = lambda path, query=None: self._dispatch("GET", path)

    # -- tree helpers -------------------------------------------------------

    def _new_item(self, parent_id: str, name: str, **facets: Any) -> dict[str, Any]:
        item_id = f"id-{next(self._ids)}"
        item = {
            "id": item_id,
            "name": name,
            "webUrl": f"https://x/{item_id}",
            "parentReference": {"id": parent_id, "driveId": DRIVE_ID},
            **facets,
        }
        self.items[item_id] = item
        return item

    def children_of(self, parent_id: str) -> list[dict[str, Any]]:
        return [
            item
            for item in self.items.values()
            if item.get("parentReference", {}).get("id") == parent_id
        ]

    def _child_named(self, parent_id: str, name: str) -> dict[str, Any] | None:
        for item in self.children_of(parent_id):
            if item["name"] == name:
                return item
        return None

    def by_path(self, path: str) -> dict[str, Any] | None:
        current: dict[str, Any] | None = self.items[ROOT_ID]
        for segment in (part for part in path.split("/") if part):
            if current is None:
                return None
            current = self._child_named(current["id"], segment)
        return current

    def add_folder(self, path: str) -> dict[str, Any]:
        parent = self.items[ROOT_ID]
        for segment in (part for part in path.split("/") if part):
            child = self._child_named(parent["id"], segment)
            parent = child or self._new_item(parent["id"], segment, folder={"childCount": 0})
        return parent

    def add_file(
        self, path: str, content: bytes = b"", mime_type: str = "text/plain"
    ) -> dict[str, Any]:
        parent_path, _, name = path.rpartition("/")
        parent = self.add_folder(parent_path)
        return self._new_item(
            parent["id"],
            name,
            file={"mimeType": mime_type},
            size=len(content),
            lastModifiedDateTime="2024-01-02T03:04:05Z",
        )

    # -- request log helpers -----------------------------------------------

    def requests(self, method: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] == method]

    def folder_creations(self) -> list[tuple[str, str]]:
        """(target, folder name) for every folder creation request, in order."""
        return [
            (path, body["name"])
            for method, path, body in self.calls
            if method == "POST" and path.endswith("/children")
        ]

    # -- routing ------------------------------------------------------------

    def _dispatch(self, method: str, path: str, **kwargs: Any) -> Any:
        body = kwargs.get("json_body")
        if body is None and kwargs.get("data") is not None:
            body = kwargs["data"]
        self.calls.append((method, path, body))
        assert path.startswith(PREFIX), path
        rest = path[len(PREFIX) :]

        if rest.startswith("root:/"):
            quoted, _, suffix = rest[len("root:/") :].partition(":")
            item = self.by_path(unquote(quoted))
        elif rest == "root" or rest.startswith("root/"):
            item, suffix = self.items[ROOT_ID], rest[len("root") :]
        else:
            match = _ID_TARGET.match(rest)
            assert match is not None, rest
            item, suffix = self.items.get(match.group(1)), match.group(2)

        if item is None:
            return _error("itemNotFound", "The resource could not be found.")
        return self._handle(method, item, suffix, kwargs)

    def _handle(self, method: str, item: dict[str, Any], suffix: str, kwargs: Any) -> Any:
        if method == "GET" and suffix == "":
            return dict(item)
        if method == "GET" and suffix == "/children":
            return {"value": [dict(child) for child in self.children_of(item["id"])]}
        if method == "POST" and suffix == "/children":
            name = kwargs["json_body"]["name"]
            if self._child_named(item["id"], name) is not None:
                return _error("nameAlreadyExists", "An item with the same name already exists.")
            return dict(self._new_item(item["id"], name, folder={"childCount": 0}))
        if method == "POST" and suffix == "/copy":
            body = kwargs["json_body"]
            parent_id = body["parentReference"]["id"]
            name = body.get("name", item["name"])
            if self._child_named(parent_id, name) is not None:
                return _error("nameAlreadyExists", "An item with the same name already exists.")
            facets = {k: v for k, v in item.items() if k in ("file", "folder", "size")}
            self._new_item(parent_id, name, **facets)
            return None
        if method == "PATCH" and suffix == "":
            body = kwargs["json_body"]
            item["parentReference"] = {"id": body["parentReference"]["id"], "driveId": DRIVE_ID}
            if "name" in body:
                item["name"] = body["name"]
            return dict(item)
        if method == "DELETE" and suffix == "":
            del self.items[item["id"]]
            return None
        if method == "PUT" and suffix.startswith(":/") and suffix.endswith(":/content"):
            name = unquote(suffix[len(":/") : -len(":/content")])
            data = kwargs["data"]
            existing = self._child_named(item["id"], name)
            if existing is not None:
                existing["size"] = len(data)
                return dict(existing)
            mime_type = kwargs["headers"]["Content-Type"]
            created = self._new_item(item["id"], name, file={"mimeType": mime_type}, size=len(data))
            return dict(created)
        raise AssertionError(f"Unexpected request: {method} {suffix}")

