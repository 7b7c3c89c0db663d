from __future__ import annotations

import logging
import pathlib
import re
from collections import Counter

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.tools.maven import MavenInvoker
from sdlc_mcp.tools.pom import Pom, read_pom
from sdlc_mcp.tools.sources import project_dir, require_pom

logger = logging.getLogger(__name__)

TREE_LIMIT = 100
SCOPES = ("all", "compile", "test", "runtime", "provided")

_TREE_LINE = re.compile(r"([+\\\-\s|]+)([\w.-]+):([\w.-]+):(\w+):([\w.-]+)")
_ARTIFACT = re.compile(r"([\w.-]+):([\w.-]+):(\w+):([\w.-]+)")
_OLD_VERSION = re.compile(r"^[12]\.")


def direct_dependencies(pom: Pom, scope: str = "all") -> dict:
    deps: list[dict] = []
    for dep in pom.dependencies:
        dep_scope = dep.scope or "compile"
        if scope != "all" and dep_scope != scope:
            continue
        info: dict = {
            "groupId": dep.group_id,
            "artifactId": dep.artifact_id,
            "version": dep.version or "managed",
            "scope": dep_scope,
            "optional": dep.optional,
        }
        if dep.exclusions:
            info["hasExclusions"] = True
            info["exclusionCount"] = dep.exclusions
        deps.append(info)
    return {
        "count": len(deps),
        "dependencies": deps,
        "byScope": dict(Counter(d["scope"] for d in deps)),
    }


def parse_tree(output: str, limit: int = TREE_LIMIT) -> list[str]:
    """Extract ``group:artifact:version`` entries from ``dependency:tree`` output."""
    found: list[str] = []
    for line in output.splitlines():
        m = _TREE_LINE.search(line)
        if m:
            found.append(f"{m.group(2)}:{m.group(3)}:{m.group(5)}")
            if len(found) >= limit:
                break
    return found


def find_conflicts(tree: list[str]) -> list[dict]:
    versions: dict[str, list[str]] = {}
    for entry in tree:
        parts = entry.split(":")
        if len(parts) < 3:
            continue
        seen = versions.setdefault(f"{parts[0]}:{parts[1]}", [])
        if parts[2] not in seen:
            seen.append(parts[2])
    return [
        {
            "artifact": artifact,
            "versions": vs,
            "severity": "medium",
            "recommendation": "Add dependency management to enforce a single version",
        }
        for artifact, vs in versions.items()
        if len(vs) > 1
    ]


def parse_unused(output: str) -> list[dict]:
    """Read the artifact lines following ``Unused declared dependencies found:``."""
    unused: list[dict] = []
    in_block = False
    for line in output.splitlines():
        if "Unused declared dependencies found:" in line:
            in_block = True
            continue
        if not in_block:
            continue
        m = _ARTIFACT.search(line)
        if m is None:
            break
        group_id, artifact_id, packaging, version = m.groups()
        unused.append({
            "groupId": group_id,
            "artifactId": artifact_id,
            "type": packaging,
            "version": version,
            "recommendation": "Consider removing if truly unused",
        })
    return unused


def update_candidates(pom: Pom) -> list[dict]:
    return [
        {
            "groupId": d.group_id,
            "artifactId": d.artifact_id,
            "currentVersion": d.version,
            "recommendation": "Check Maven Central for latest version",
        }
        for d in pom.dependencies
        if d.version and "${" not in d.version and _OLD_VERSION.match(d.version)
    ]


def recommendations(conflicts: list[dict], unused: list[dict]) -> list[str]:
    recs: list[str] = []
    if conflicts:
        recs.append(f"Resolve {len(conflicts)} version conflicts using <dependencyManagement>")
    if unused:
        recs.append(f"Remove {len(unused)} unused dependencies to reduce bloat")
    if not recs:
        return ["Dependency health is good! No major issues found."]
    recs.append("Run 'mvn dependency:tree' to visualize full dependency graph")
    recs.append("Use 'mvn versions:display-dependency-updates' to check for updates")
    return recs


def health_score(conflicts: list[dict], unused: list[dict]) -> int:
    return max(0, 100 - 5 * len(conflicts) - 2 * len(unused))


class AnalyzeDependenciesTool(Tool):
    name = "analyze-dependencies"
    description = (
        "Analyzes Maven dependencies: direct dependencies by scope, the resolved dependency tree, "
        "version conflicts, unused declared dependencies and outdated versions, with a health score."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the Maven project"},
            "module": {"type": "string", "description": "Optional: specific module to analyze"},
            "scope": {
                "type": "string",
                "description": "Dependency scope to report (default: all)",
                "enum": list(SCOPES),
            },
            "checkUpdates": {
                "type": "boolean",
                "description": "Whether to check for available updates (default: false)",
            },
        },
        "required": ["path"],
    }

    def __init__(self, maven: MavenInvoker) -> None:
        self._maven = maven

    def _run_goal(self, directory: pathlib.Path, goal: str) -> tuple[bool, str]:
        try:
            result = self._maven.run(directory, [goal])
        except (OSError, TimeoutError) as exc:
            logger.warning("Could not execute %s: %s", goal, exc)
            return False, f"Maven {goal} execution failed: {exc}"
        if not result.ok:
            return False, f"Failed to execute {goal}"
        return True, result.output

    def execute(self, arguments: dict) -> dict:
        directory = project_dir(arguments.get("path"))
        module = arguments.get("module") or None
        scope = arguments.get("scope", "all")
        workdir = directory / module if module else directory
        pom = read_pom(require_pom(workdir))
        logger.info("Analyzing dependencies for %s (module: %s, scope: %s)", directory, module, scope)

        results: dict = {
            "projectPath": str(directory),
            "module": module,
            "projectInfo": {
                "groupId": pom.effective_group_id or "unknown",
                "artifactId": pom.artifact_id,
                "version": pom.effective_version or "unknown",
            },
        }
        direct = direct_dependencies(pom, scope)
        results["directDependencies"] = direct

        ok, output = self._run_goal(workdir, "dependency:tree")
        if ok:
            tree = parse_tree(output)
            results["dependencyTree"] = {"success": True, "treeOutput": tree}
        else:
            tree = []
            results["dependencyTree"] = {"success": False, "message": output}

        conflicts = find_conflicts(tree)
        results["versionConflicts"] = conflicts

        ok, output = self._run_goal(workdir, "dependency:analyze")
        unused = parse_unused(output) if ok else []
        results["unusedDependencies"] = unused

        if arguments.get("checkUpdates", False):
            results["availableUpdates"] = update_candidates(pom)

        results["recommendations"] = recommendations(conflicts, unused)
        results["summary"] = {
            "totalDirectDependencies": direct["count"],
            "versionConflicts": len(conflicts),
            "unusedDependencies": len(unused),
            "healthScore": health_score(conflicts, unused),
        }
        return {"success": True, "results": results}
