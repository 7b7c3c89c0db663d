from __future__ import annotations

from sdlc_mcp.cache import AnalysisCache
from sdlc_mcp.capabilities import Tool
from sdlc_mcp.config import Settings
from sdlc_mcp.tools.bugfix import FixBugTool
from sdlc_mcp.tools.confluence import CreateConfluencePageTool, GetConfluencePageTool, SearchConfluencePagesTool
from sdlc_mcp.tools.dependencies import AnalyzeDependenciesTool
from sdlc_mcp.tools.documentation import GenerateDocumentationTool
from sdlc_mcp.tools.feature import ImplementFeatureTool
from sdlc_mcp.tools.jira import CreateJiraIssueTool, GetJiraIssueTool, SearchJiraIssuesTool
from sdlc_mcp.tools.maven import MavenInvoker, RunMavenCommandTool
from sdlc_mcp.tools.project import AnalyzeMavenProjectTool
from sdlc_mcp.tools.quality import CodeQualityCheckTool
from sdlc_mcp.tools.security import SecurityScanTool
from sdlc_mcp.tools.suggest import SuggestImplementationTool
from sdlc_mcp.tools.testgen import GenerateTestsTool


def build_tools(settings: Settings, cache: AnalysisCache, maven: MavenInvoker | None = None) -> list[Tool]:
    maven = maven or MavenInvoker()
    return [
        AnalyzeMavenProjectTool(cache),
        AnalyzeDependenciesTool(maven),
        RunMavenCommandTool(maven),
        CodeQualityCheckTool(),
        SecurityScanTool(),
        GenerateDocumentationTool(),
        SuggestImplementationTool(cache),
        ImplementFeatureTool(),
        FixBugTool(),
        GenerateTestsTool(),
        SearchJiraIssuesTool(settings),
        GetJiraIssueTool(settings),
        CreateJiraIssueTool(settings),
        SearchConfluencePagesTool(settings),
        GetConfluencePageTool(settings),
        CreateConfluencePageTool(settings),
    ]
