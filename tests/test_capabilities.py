from __future__ import annotations

import json
import re

import pytest

from sdlc_mcp.cache import AnalysisCache
from sdlc_mcp.capabilities import ToolRegistry
from sdlc_mcp.config import ConfigurationError, Settings
from sdlc_mcp.prompts import SdlcWorkflowPrompt
from sdlc_mcp.resources import AnalysisCacheResource
from sdlc_mcp.tools import build_tools
from sdlc_mcp.tools.confluence import CreateConfluencePageTool, GetConfluencePageTool, SearchConfluencePagesTool
from sdlc_mcp.tools.jira import CreateJiraIssueTool, GetJiraIssueTool, SearchJiraIssuesTool
from sdlc_mcp.types import Failure, Success
from tests.conftest import BoomTool, EchoTool, GreetingPrompt

EXPECTED_TOOLS = [
    "analyze-maven-project",
    "analyze-dependencies",
    "run-maven-command",
    "code-quality-check",
    "security-scan",
    "generate-documentation",
    "suggest-implementation",
    "implement-feature",
    "fix-bug",
    "generate-tests",
    "jira-search-issues",
    "jira-get-issue",
    "jira-create-issue",
    "confluence-search-pages",
    "confluence-get-page",
    "confluence-create-page",
]


class TestOutcomes:
    def test_tool_success(self):
        assert EchoTool().call({"text": "a"}) == Success({"echo": "a"})

    def test_tool_failure_is_returned_not_raised(self):
        outcome = BoomTool().call({})
        assert isinstance(outcome, Failure)
        assert outcome.message == "kaboom"
        assert isinstance(outcome.exception, RuntimeError)

    def test_failure_without_message_uses_type_name(self):
        class Silent(EchoTool):
            def execute(self, arguments):
                raise KeyError

        assert Silent().call({}).message == "KeyError"

    def test_prompt_failure(self):
        outcome = GreetingPrompt().get({})
        assert isinstance(outcome, Failure)
        assert outcome.message == "who is required"


class TestCatalog:
    def test_all_tools_register(self):
        registry = ToolRegistry()
        for tool in build_tools(Settings(), AnalysisCache()):
            registry.register(tool)
        assert registry.names() == EXPECTED_TOOLS

    def test_every_schema_has_wire_shape(self):
        for tool in build_tools(Settings(), AnalysisCache()):
            schema = tool.schema()
            assert schema["name"] == tool.name
            assert schema["description"]
            assert schema["inputSchema"]["type"] == "object"


class TestAnalysisCacheResource:
    def test_descriptor(self):
        assert AnalysisCacheResource(AnalysisCache()).descriptor() == {
            "uri": "cache://analysis/{projectPath}",
            "name": "analysis-cache",
            "description": "Cached Maven project analysis results to avoid re-running expensive operations",
            "mimeType": "application/json",
        }

    def test_template_extracts_absolute_path(self):
        resource = AnalysisCacheResource(AnalysisCache())
        assert resource.template.match("cache://analysis//tmp/proj") == {"projectPath": "/tmp/proj"}

    def test_read_hit_and_miss(self):
        cache = AnalysisCache()
        resource = AnalysisCacheResource(cache)
        assert resource.read({"projectPath": "/tmp/proj"})["cached"] is False
        cache.store("/tmp/proj", {"artifactId": "demo"})
        hit = resource.read({"projectPath": "/tmp/proj"})
        assert hit["cached"] is True
        assert hit["data"] == {"artifactId": "demo"}
        json.dumps(hit)

    def test_read_requires_path(self):
        with pytest.raises(ValueError):
            AnalysisCacheResource(AnalysisCache()).read({})


class TestWorkflowPrompt:
    def test_descriptor(self):
        desc = SdlcWorkflowPrompt().descriptor()
        assert desc["name"] == "sdlc-full-workflow"
        assert [(a["name"], a["required"]) for a in desc["arguments"]] == [
            ("projectPath", True), ("task", True), ("type", False),
        ]

    def test_feature_workflow(self):
        text = SdlcWorkflowPrompt().render({"projectPath": "/src/app", "task": "Add SSO"})
        assert text.startswith("# SDLC Workflow: Feature Implementation")
        assert "Project: /src/app" in text
        assert 'relevant to: "Add SSO"' in text
        for phase in range(1, 7):
            assert f"## Phase {phase}:" in text
        assert "## Final Checklist" in text

    def test_bugfix_title(self):
        text = SdlcWorkflowPrompt().render({"projectPath": "/p", "task": "NPE", "type": "bugfix"})
        assert text.startswith("# SDLC Workflow: Bug Fix")

    @pytest.mark.parametrize("missing", ["projectPath", "task"])
    def test_required_arguments(self, missing):
        args = {"projectPath": "/p", "task": "t"}
        del args[missing]
        with pytest.raises(ValueError, match=missing):
            SdlcWorkflowPrompt().render(args)

    def test_mentions_only_registered_tools(self):
        text = SdlcWorkflowPrompt().render({"projectPath": "/p", "task": "t"})
        names = {tool.name for tool in build_tools(Settings(), AnalysisCache())}
        mentioned = set(re.findall(r"`([a-z]+(?:-[a-z]+)+)`", text))
        assert mentioned <= names


class TestJiraTools:
    def test_search_uses_configured_credentials(self, api_server):
        url, requests = api_server
        settings = Settings(environ={"JIRA_URL": url, "JIRA_EMAIL": "a@b.c", "JIRA_API_TOKEN": "t"})
        result = SearchJiraIssuesTool(settings).execute({"jql": "project = X"})
        assert result["success"] is True
        assert json.loads(result["response"])["path"] == "/rest/api/3/search"
        assert requests[-1]["query"]["maxResults"] == "50"

    def test_arguments_supply_credentials(self, api_server):
        url, requests = api_server
        result = GetJiraIssueTool(Settings()).execute(
            {"issueKey": "X-1", "jiraUrl": url, "email": "a@b.c", "apiToken": "t"}
        )
        assert result["issueKey"] == "X-1"
        assert requests[-1]["path"] == "/rest/api/3/issue/X-1"

    def test_create(self, api_server):
        url, requests = api_server
        tool = CreateJiraIssueTool(Settings(environ={"JIRA_URL": url, "JIRA_EMAIL": "e", "JIRA_API_TOKEN": "t"}))
        result = tool.execute({"projectKey": "X", "issueType": "Bug", "summary": "Broken"})
        assert json.loads(result["response"]) == {"id": "10001"}
        assert requests[-1]["body"]["fields"]["summary"] == "Broken"

    def test_unconfigured(self):
        with pytest.raises(ConfigurationError, match="JIRA URL not configured"):
            SearchJiraIssuesTool(Settings()).execute({"jql": "x"})

    def test_unconfigured_becomes_failure_outcome(self):
        outcome = SearchJiraIssuesTool(Settings()).call({"jql": "x"})
        assert isinstance(outcome, Failure)
        assert "JIRA_URL" in outcome.message


class TestConfluenceTools:
    @pytest.fixture
    def settings(self, api_server):
        url, _ = api_server
        return Settings(environ={"CONFLUENCE_URL": url, "CONFLUENCE_EMAIL": "e", "CONFLUENCE_API_TOKEN": "t"})

    def test_search_default_limit(self, settings, api_server):
        _, requests = api_server
        SearchConfluencePagesTool(settings).execute({"cql": "space = DEV"})
        assert requests[-1]["query"] == {"cql": "space = DEV", "limit": "25"}

    def test_get_default_expand(self, settings, api_server):
        _, requests = api_server
        GetConfluencePageTool(settings).execute({"pageId": "12"})
        assert requests[-1]["query"] == {"expand": "body.storage,version"}

    def test_create(self, settings, api_server):
        _, requests = api_server
        result = CreateConfluencePageTool(settings).execute({"spaceKey": "DEV", "title": "T", "content": "<p/>"})
        assert result["title"] == "T"
        assert "ancestors" not in requests[-1]["body"]
