from __future__ import annotations

import urllib.parse

from sdlc_mcp.clients.base import RestClient


def _key(issue_key: str) -> str:
    return urllib.parse.quote(issue_key, safe="")


class JiraClient(RestClient):
    service = "JIRA"

    def search_issues(self, jql: str, max_results: int = 50) -> str:
        return self.get("/rest/api/3/search", jql=jql, maxResults=max_results)

    def get_issue(self, issue_key: str) -> str:
        return self.get(f"/rest/api/3/issue/{_key(issue_key)}")

    def create_issue(self, project_key: str, issue_type: str, summary: str, description: str | None = None) -> str:
        fields: dict = {
            "project": {"key": project_key},
            "issuetype": {"name": issue_type},
            "summary": summary,
        }
        if description:
            fields["description"] = description
        return self.post("/rest/api/3/issue", {"fields": fields})

    def update_issue(self, issue_key: str, fields: dict) -> str:
        return self.put(f"/rest/api/3/issue/{_key(issue_key)}", {"fields": fields})

    def add_comment(self, issue_key: str, comment: str) -> str:
        return self.post(f"/rest/api/3/issue/{_key(issue_key)}/comment", {"body": comment})

    def get_transitions(self, issue_key: str) -> str:
        return self.get(f"/rest/api/3/issue/{_key(issue_key)}/transitions")
