from __future__ import annotations

import base64
import json

import pytest

from sdlc_mcp.clients.base import ApiError
from sdlc_mcp.clients.confluence import ConfluenceClient
from sdlc_mcp.clients.jira import JiraClient
from sdlc_mcp.config import Credentials


def _creds(url: str) -> Credentials:
    return Credentials(url=url + "/", email="dev@example.com", api_token="s3cret")


class TestJiraClient:
    def test_search_sends_auth_and_query(self, api_server):
        url, requests = api_server
        body = JiraClient(_creds(url)).search_issues("project = PROJ AND status = Open", 10)
        assert json.loads(body)["ok"] is True
        req = requests[-1]
        assert req["path"] == "/rest/api/3/search"
        assert req["query"] == {"jql": "project = PROJ AND status = Open", "maxResults": "10"}
        expected = base64.b64encode(b"dev@example.com:s3cret").decode()
        assert req["headers"]["Authorization"] == f"Basic {expected}"
        assert req["headers"]["Accept"] == "application/json"

    def test_trailing_slash_is_stripped(self, api_server):
        url, _ = api_server
        client = JiraClient(_creds(url))
        assert client.base_url == url

    def test_get_issue(self, api_server):
        url, requests = api_server
        JiraClient(_creds(url)).get_issue("PROJ-123")
        assert requests[-1]["path"] == "/rest/api/3/issue/PROJ-123"

    def test_create_issue_payload(self, api_server):
        url, requests = api_server
        body = JiraClient(_creds(url)).create_issue("PROJ", "Bug", "It broke", "Steps...")
        assert json.loads(body) == {"id": "10001"}
        assert requests[-1]["method"] == "POST"
        assert requests[-1]["body"] == {
            "fields": {
                "project": {"key": "PROJ"},
                "issuetype": {"name": "Bug"},
                "summary": "It broke",
                "description": "Steps...",
            }
        }

    def test_create_issue_without_description(self, api_server):
        url, requests = api_server
        JiraClient(_creds(url)).create_issue("PROJ", "Task", "Do it")
        assert "description" not in requests[-1]["body"]["fields"]

    def test_comment_and_transitions(self, api_server):
        url, requests = api_server
        client = JiraClient(_creds(url))
        client.add_comment("PROJ-1", "looks good")
        assert requests[-1]["path"] == "/rest/api/3/issue/PROJ-1/comment"
        assert requests[-1]["body"] == {"body": "looks good"}
        client.get_transitions("PROJ-1")
        assert requests[-1]["path"] == "/rest/api/3/issue/PROJ-1/transitions"

    def test_http_error_raises_api_error(self, api_server):
        url, _ = api_server
        with pytest.raises(ApiError) as exc_info:
            JiraClient(_creds(url)).get_issue("missing")
        assert exc_info.value.status == 404
        assert "JIRA API request failed: 404" in str(exc_info.value)
        assert "Issue does not exist" in str(exc_info.value)

    def test_connection_refused(self):
        client = JiraClient(Credentials("http://127.0.0.1:9", "a", "b"), timeout=2)
        with pytest.raises(ConnectionError, match="JIRA connection failed"):
            client.get_issue("X-1")


class TestConfluenceClient:
    def test_search(self, api_server):
        url, requests = api_server
        ConfluenceClient(_creds(url)).search_pages("space = DEV", 5)
        assert requests[-1]["path"] == "/rest/api/content/search"
        assert requests[-1]["query"] == {"cql": "space = DEV", "limit": "5"}

    def test_get_page_with_expand(self, api_server):
        url, requests = api_server
        ConfluenceClient(_creds(url)).get_page("123", "body.storage,version")
        assert requests[-1]["path"] == "/rest/api/content/123"
        assert requests[-1]["query"] == {"expand": "body.storage,version"}

    def test_get_page_without_expand(self, api_server):
        url, requests = api_server
        ConfluenceClient(_creds(url)).get_page("123")
        assert requests[-1]["query"] == {}

    def test_create_page_with_parent(self, api_server):
        url, requests = api_server
        ConfluenceClient(_creds(url)).create_page("DEV", "Design", "<p>hi</p>", "42")
        assert requests[-1]["body"] == {
            "type": "page",
            "title": "Design",
            "space": {"key": "DEV"},
            "body": {"storage": {"value": "<p>hi</p>", "representation": "storage"}},
            "ancestors": [{"id": "42"}],
        }

    def test_update_page_bumps_version(self, api_server):
        url, requests = api_server
        ConfluenceClient(_creds(url)).update_page("77", "Design v2", "<p>new</p>")
        put = requests[-1]
        assert put["method"] == "PUT"
        assert put["path"] == "/rest/api/content/77"
        assert put["body"]["version"] == {"number": 5}

    def test_child_pages(self, api_server):
        url, requests = api_server
        ConfluenceClient(_creds(url)).get_child_pages("77")
        assert requests[-1]["path"] == "/rest/api/content/77/child/page"

    def test_error_mentions_service(self, api_server):
        url, _ = api_server
        with pytest.raises(ApiError, match="Confluence API request failed: 404"):
            ConfluenceClient(_creds(url)).get_page("missing")
