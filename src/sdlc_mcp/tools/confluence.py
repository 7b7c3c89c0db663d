from __future__ import annotations

import logging

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.clients.confluence import ConfluenceClient
from sdlc_mcp.config import Settings

logger = logging.getLogger(__name__)

_CREDENTIAL_PROPERTIES = {
    "confluenceUrl": {"type": "string", "description": "Confluence base URL (optional if configured)"},
    "email": {"type": "string", "description": "Confluence account email (optional if configured)"},
    "apiToken": {"type": "string", "description": "Confluence API token (optional if configured)"},
}


class ConfluenceTool(Tool):
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def client(self, arguments: dict) -> ConfluenceClient:
        creds = self._settings.confluence_credentials(
            arguments.get("confluenceUrl"), arguments.get("email"), arguments.get("apiToken"),
        )
        return ConfluenceClient(creds)


class SearchConfluencePagesTool(ConfluenceTool):
    name = "confluence-search-pages"
    description = "Search Confluence pages using CQL (Confluence Query Language)."
    input_schema = {
        "type": "object",
        "properties": {
            "cql": {"type": "string", "description": "CQL query, e.g. 'space = DEV AND type = page'"},
            "limit": {"type": "integer", "minimum": 1, "description": "Maximum results (default: 25)"},
            **_CREDENTIAL_PROPERTIES,
        },
        "required": ["cql"],
    }

    def execute(self, arguments: dict) -> dict:
        cql = arguments["cql"]
        limit = arguments.get("limit", 25)
        logger.info("Searching Confluence pages: %s", cql)
        body = self.client(arguments).search_pages(cql, limit)
        return {"success": True, "cql": cql, "limit": limit, "response": body}


class GetConfluencePageTool(ConfluenceTool):
    name = "confluence-get-page"
    description = "Get a Confluence page by ID."
    input_schema = {
        "type": "object",
        "properties": {
            "pageId": {"type": "string", "description": "Page ID"},
            "expand": {
                "type": "string",
                "description": "Fields to expand (default: 'body.storage,version')",
            },
            **_CREDENTIAL_PROPERTIES,
        },
        "required": ["pageId"],
    }

    def execute(self, arguments: dict) -> dict:
        page_id = arguments["pageId"]
        expand = arguments.get("expand", "body.storage,version")
        logger.info("Fetching Confluence page %s", page_id)
        body = self.client(arguments).get_page(page_id, expand)
        return {"success": True, "pageId": page_id, "response": body}


class CreateConfluencePageTool(ConfluenceTool):
    name = "confluence-create-page"
    description = "Create a new Confluence page in storage format."
    input_schema = {
        "type": "object",
        "properties": {
            "spaceKey": {"type": "string", "description": "Space key, e.g. 'DEV'"},
            "title": {"type": "string", "description": "Page title"},
            "content": {"type": "string", "description": "Page content in Confluence storage format (XHTML)"},
            "parentId": {"type": "string", "description": "Parent page ID (optional)"},
            **_CREDENTIAL_PROPERTIES,
        },
        "required": ["spaceKey", "title", "content"],
    }

    def execute(self, arguments: dict) -> dict:
        logger.info("Creating Confluence page %r in %s", arguments["title"], arguments["spaceKey"])
        body = self.client(arguments).create_page(
            arguments["spaceKey"],
            arguments["title"],
            arguments["content"],
            arguments.get("parentId"),
        )
        return {
            "success": True,
            "spaceKey": arguments["spaceKey"],
            "title": arguments["title"],
            "response": body,
        }
