from __future__ import annotations

import logging

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.clients.jira import JiraClient
from sdlc_mcp.config import Settings

logger = logging.getLogger(__name__)

_CREDENTIAL_PROPERTIES = {
    "jiraUrl": {"type": "string", "description": "JIRA base URL (optional if configured)"},
    "email": {"type": "string", "description": "JIRA account email (optional if configured)"},
    "apiToken": {"type": "string", "description": "JIRA API token (optional if configured)"},
}


class JiraTool(Tool):
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def client(self, arguments: dict) -> JiraClient:
        creds = self._settings.jira_credentials(
            arguments.get("jiraUrl"), arguments.get("email"), arguments.get("apiToken"),
        )
        return JiraClient(creds)


class SearchJiraIssuesTool(JiraTool):
    name = "jira-search-issues"
    description = "Search JIRA issues using JQL (JIRA Query Language)."
    input_schema = {
        "type": "object",
        "properties": {
            "jql": {"type": "string", "description": "JQL query, e.g. 'project = PROJ AND status = Open'"},
            "maxResults": {"type": "integer", "minimum": 1, "description": "Maximum results (default: 50)"},
            **_CREDENTIAL_PROPERTIES,
        },
        "required": ["jql"],
    }

    def execute(self, arguments: dict) -> dict:
        jql = arguments["jql"]
        max_results = arguments.get("maxResults", 50)
        logger.info("Searching JIRA issues: %s", jql)
        body = self.client(arguments).search_issues(jql, max_results)
        return {"success": True, "jql": jql, "maxResults": max_results, "response": body}


class GetJiraIssueTool(JiraTool):
    name = "jira-get-issue"
    description = "Get details of a specific JIRA issue by key."
    input_schema = {
        "type": "object",
        "properties": {
            "issueKey": {"type": "string", "description": "Issue key, e.g. 'PROJ-123'"},
            **_CREDENTIAL_PROPERTIES,
        },
        "required": ["issueKey"],
    }

    def execute(self, arguments: dict) -> dict:
        key = arguments["issueKey"]
        logger.info("Fetching JIRA issue %s", key)
        return {"success": True, "issueKey": key, "response": self.client(arguments).get_issue(key)}


class CreateJiraIssueTool(JiraTool):
    name = "jira-create-issue"
    description = "Create a new JIRA issue."
    input_schema = {
        "type": "object",
        "properties": {
            "projectKey": {"type": "string", "description": "Project key, e.g. 'PROJ'"},
            "issueType": {"type": "string", "description": "Issue type, e.g. 'Bug', 'Story', 'Task'"},
            "summary": {"type": "string", "description": "Issue summary"},
            "description": {"type": "string", "description": "Issue description (optional)"},
            **_CREDENTIAL_PROPERTIES,
        },
        "required": ["projectKey", "issueType", "summary"],
    }

    def execute(self, arguments: dict) -> dict:
        logger.info("Creating JIRA %s in %s", arguments["issueType"], arguments["projectKey"])
        body = self.client(arguments).create_issue(
            arguments["projectKey"],
            arguments["issueType"],
            arguments["summary"],
            arguments.get("description"),
        )
        return {
            "success": True,
            "projectKey": arguments["projectKey"],
            "issueType": arguments["issueType"],
            "summary": arguments["summary"],
            "response": body,
        }
