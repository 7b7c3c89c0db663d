from __future__ import annotations

import json
import urllib.parse

from sdlc_mcp.clients.base import RestClient


class ConfluenceClient(RestClient):
    service = "Confluence"

    def search_pages(self, cql: str, limit: int = 25) -> str:
        return self.get("/rest/api/content/search", cql=cql, limit=limit)

    def get_page(self, page_id: str, expand: str | None = None) -> str:
        return self.get(f"/rest/api/content/{urllib.parse.quote(page_id, safe='')}", expand=expand or None)

    def get_page_by_title(self, space_key: str, title: str) -> str:
        return self.get("/rest/api/content", spaceKey=space_key, title=title, expand="body.storage,version")

    def create_page(self, space_key: str, title: str, content: str, parent_id: str | None = None) -> str:
        body: dict = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": {"storage": {"value": content, "representation": "storage"}},
        }
        if parent_id:
            body["ancestors"] = [{"id": parent_id}]
        return self.post("/rest/api/content", body)

    def update_page(self, page_id: str, title: str, content: str) -> str:
        current = json.loads(self.get_page(page_id, "version"))
        version = int(current.get("version", {}).get("number", 0)) + 1
        body = {
            "id": page_id,
            "type": "page",
            "title": title,
            "body": {"storage": {"value": content, "representation": "storage"}},
            "version": {"number": version},
        }
        return self.put(f"/rest/api/content/{urllib.parse.quote(page_id, safe='')}", body)

    def get_child_pages(self, page_id: str) -> str:
        return self.get(f"/rest/api/content/{urllib.parse.quote(page_id, safe='')}/child/page")
