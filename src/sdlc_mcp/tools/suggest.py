from __future__ import annotations

import logging

from sdlc_mcp.cache import AnalysisCache
from sdlc_mcp.capabilities import Tool
from sdlc_mcp.tools.sources import project_dir

logger = logging.getLogger(__name__)


class SuggestImplementationTool(Tool):
    name = "suggest-implementation"
    description = (
        "Suggests implementation approaches for new features or bug fixes based on the project's "
        "structure and the SDLC personas. Useful for Architect and Developer personas."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the Maven project"},
            "feature": {"type": "string", "description": "Description of the feature or bug fix"},
            "analysisReport": {
                "type": "string",
                "description": "Optional: path to analysis report from Analyst persona",
            },
        },
        "required": ["path", "feature"],
    }

    def __init__(self, cache: AnalysisCache) -> None:
        self._cache = cache

    def execute(self, arguments: dict) -> dict:
        directory = project_dir(arguments.get("path"))
        feature = arguments["feature"]
        logger.info("Suggesting implementation for %r in %s", feature, directory)

        suggestions = [
            "Analyze existing similar features in the codebase",
            "Follow the architecture patterns found in the project",
            "Use the Architect persona (.github/mcp/personas/02-architect.md) for design guidance",
            "Use the Developer persona (.github/mcp/personas/03-developer.md) for implementation guidance",
        ]
        entry = self._cache.get(str(directory))
        if entry is not None:
            analysis = entry.data
            if analysis.get("projectType") == "multi-module":
                names = ", ".join(m.get("name", "?") for m in analysis.get("modules", []))
                suggestions.insert(0, f"Identify which of the modules ({names}) own the change")
        else:
            suggestions.insert(0, "Run analyze-maven-project first to ground suggestions in the project structure")

        result: dict = {
            "success": True,
            "feature": feature,
            "suggestions": suggestions,
            "nextSteps": [
                "Create Analysis Report using Analyst persona",
                "Design solution using Architect persona",
                "Implement using Developer persona",
                "Test using Tester persona",
            ],
        }
        if arguments.get("analysisReport"):
            result["analysisReport"] = arguments["analysisReport"]
        return result
