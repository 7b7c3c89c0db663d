from __future__ import annotations

import logging
import pathlib

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.docs.apidoc import generate_api_docs
from sdlc_mcp.docs.changelog import DEFAULT_MAX_COMMITS, generate_changelog
from sdlc_mcp.docs.javadoc import analyze_javadoc, javadoc_result
from sdlc_mcp.docs.readme import generate_readme

logger = logging.getLogger(__name__)

DOC_TYPES = ["javadoc-analysis", "readme", "api-docs", "changelog", "all"]


def _write(directory: pathlib.Path, filename: str, content: str) -> pathlib.Path:
    output = directory / filename
    output.write_text(content, encoding="utf-8")
    logger.info("Wrote %s", output)
    return output


class GenerateDocumentationTool(Tool):
    name = "generate-documentation"
    description = (
        "Generates project documentation: JavaDoc coverage analysis, README, API docs or a changelog "
        "from Git history. Useful for Developer and DevOps personas."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the Maven project"},
            "type": {"type": "string", "enum": DOC_TYPES, "description": "Documentation type to generate"},
            "packageFilter": {
                "type": "string",
                "description": "Optional: only document packages starting with this prefix (api-docs)",
            },
            "maxCommits": {
                "type": "integer",
                "minimum": 1,
                "default": DEFAULT_MAX_COMMITS,
                "description": "Maximum number of commits to include (changelog)",
            },
            "outputFile": {
                "type": "boolean",
                "default": False,
                "description": "Write README.md, API.md or CHANGELOG.md into the project",
            },
        },
        "required": ["path", "type"],
    }

    def execute(self, arguments: dict) -> dict:
        path = arguments.get("path") or ""
        directory = pathlib.Path(path).expanduser()
        if not directory.is_dir():
            raise ValueError(f"Invalid project path: {path}")
        doc_type = arguments["type"]
        package_filter = arguments.get("packageFilter")
        max_commits = int(arguments.get("maxCommits", DEFAULT_MAX_COMMITS))
        output_file = bool(arguments.get("outputFile", False))
        logger.info("Generating %s documentation for %s", doc_type, directory)

        result: dict = {"success": True, "path": path, "type": doc_type}
        if doc_type == "javadoc-analysis":
            result.update(self._javadoc(directory))
        elif doc_type == "readme":
            result.update(self._readme(directory, output_file))
        elif doc_type == "api-docs":
            result.update(self._api_docs(directory, package_filter, output_file))
        elif doc_type == "changelog":
            result.update(self._changelog(directory, max_commits, output_file))
        elif doc_type == "all":
            result.update(self._all(directory, package_filter, max_commits, output_file))
        else:
            raise ValueError(f"Unknown documentation type: {doc_type}")
        return result

    def _javadoc(self, directory: pathlib.Path) -> dict:
        return javadoc_result(analyze_javadoc(directory))

    def _readme(self, directory: pathlib.Path, output_file: bool) -> dict:
        content = generate_readme(directory)
        if output_file:
            output = _write(directory, "README.md", content)
            return {
                "content": content,
                "outputFile": str(output),
                "message": f"README.md generated successfully at: {output}",
            }
        return {"content": content, "message": "README generated successfully (not saved to file)"}

    def _api_docs(self, directory: pathlib.Path, package_filter: str | None, output_file: bool) -> dict:
        content = generate_api_docs(directory, package_filter)
        result = {"content": content, "packageFilter": package_filter or "all"}
        if output_file:
            output = _write(directory, "API.md", content)
            result["outputFile"] = str(output)
            result["message"] = f"API.md generated successfully at: {output}"
        else:
            result["message"] = "API documentation generated successfully (not saved to file)"
        return result

    def _changelog(self, directory: pathlib.Path, max_commits: int, output_file: bool) -> dict:
        content = generate_changelog(directory, max_commits)
        result: dict = {"content": content, "maxCommits": max_commits}
        if output_file:
            output = _write(directory, "CHANGELOG.md", content)
            result["outputFile"] = str(output)
            result["message"] = f"CHANGELOG.md generated successfully at: {output}"
        else:
            result["message"] = "Changelog generated successfully (not saved to file)"
        return result

    def _all(self, directory: pathlib.Path, package_filter: str | None, max_commits: int, output_file: bool) -> dict:
        parts = {
            "javadocAnalysis": lambda: self._javadoc(directory),
            "readme": lambda: self._readme(directory, output_file),
            "apiDocs": lambda: self._api_docs(directory, package_filter, output_file),
            "changelog": lambda: self._changelog(directory, max_commits, output_file),
        }
        result: dict = {}
        for key, generate in parts.items():
            try:
                result[key] = generate()
            except (OSError, ValueError) as exc:
                logger.warning("Failed to generate %s: %s", key, exc)
                result[key] = {"error": str(exc)}
        result["message"] = "All documentation generated successfully"
        return result
