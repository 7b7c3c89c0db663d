from __future__ import annotations

import logging
import pathlib

from sdlc_mcp.cache import AnalysisCache
from sdlc_mcp.capabilities import Tool
from sdlc_mcp.tools.pom import Pom, read_pom
from sdlc_mcp.tools.sources import count_java_files, project_dir, require_pom

logger = logging.getLogger(__name__)


def _source_structure(directory: pathlib.Path) -> dict:
    main_java = directory / "src" / "main" / "java"
    test_java = directory / "src" / "test" / "java"
    structure: dict = {
        "hasMainJava": main_java.is_dir(),
        "hasMainResources": (directory / "src" / "main" / "resources").is_dir(),
        "hasTestJava": test_java.is_dir(),
        "hasTestResources": (directory / "src" / "test" / "resources").is_dir(),
    }
    if main_java.is_dir():
        structure["mainJavaFiles"] = count_java_files(main_java)
    if test_java.is_dir():
        structure["testJavaFiles"] = count_java_files(test_java)
    return structure


def _module_info(directory: pathlib.Path, name: str) -> dict | None:
    module_dir = directory / name
    pom_path = module_dir / "pom.xml"
    if not pom_path.is_file():
        logger.warning("Module pom.xml not found: %s", pom_path)
        return None
    try:
        pom = read_pom(pom_path)
    except ValueError as exc:
        logger.warning("Skipping module %s: %s", name, exc)
        return {"name": name, "error": str(exc)}

    group_id = pom.effective_group_id
    return {
        "name": name,
        "artifactId": pom.artifact_id,
        "packaging": pom.packaging,
        "dependencyCount": len(pom.dependencies),
        "internalDependencies": [d.artifact_id for d in pom.dependencies if d.group_id == group_id],
        "hasMainSources": (module_dir / "src" / "main" / "java").is_dir(),
        "hasTestSources": (module_dir / "src" / "test" / "java").is_dir(),
    }


def analyze_project(directory: pathlib.Path, pom: Pom) -> dict:
    modules = [m for m in (_module_info(directory, name) for name in pom.modules) if m is not None]
    return {
        "projectPath": str(directory),
        "projectType": "multi-module" if pom.modules else "single-module",
        "groupId": pom.group_id,
        "artifactId": pom.artifact_id,
        "version": pom.version,
        "packaging": pom.packaging,
        "moduleCount": len(pom.modules),
        "modules": modules,
        "dependencyCount": len(pom.dependencies),
        "dependencies": [
            {
                "groupId": d.group_id,
                "artifactId": d.artifact_id,
                "version": d.version or "inherited",
                "scope": d.scope or "compile",
            }
            for d in pom.dependencies
        ],
        "pluginCount": len(pom.plugins),
        "plugins": pom.plugins,
        "sourceStructure": _source_structure(directory),
    }


class AnalyzeMavenProjectTool(Tool):
    name = "analyze-maven-project"
    description = (
        "Analyzes a Maven multi-module project structure, including modules, dependencies, "
        "and configuration. Useful for understanding project organization before making changes."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "Absolute path to the Maven project root directory (containing pom.xml)",
            },
        },
        "required": ["path"],
    }

    def __init__(self, cache: AnalysisCache) -> None:
        self._cache = cache

    def execute(self, arguments: dict) -> dict:
        path = arguments.get("path")
        directory = project_dir(path)
        pom = read_pom(require_pom(directory))
        logger.info("Analyzing Maven project at %s", directory)

        analysis = analyze_project(directory, pom)
        self._cache.store(str(directory), analysis)
        return {"success": True, "analysis": analysis}
