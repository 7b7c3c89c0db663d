from __future__ import annotations

import logging
import pathlib
import re

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.tools.sources import find_java_files, project_dir

logger = logging.getLogger(__name__)

COMPLEXITY_THRESHOLD = 10
LARGE_CLASS_LINES = 500
LONG_METHOD_LINES = 50
GOD_CLASS_MEMBERS = 30

SEVERITY_LEVELS = {"low": 1, "medium": 2, "high": 3}

_BRANCH_KEYWORDS = ("if ", "for ", "while ", "switch ", "catch ")
_MAGIC_NUMBER = re.compile(r"[^\w](\d{2,})[^\w.]")


def _count(text: str, needles: tuple[str, ...]) -> int:
    return sum(text.count(n) for n in needles)


def estimate_complexity(source: str) -> int:
    return _count(source, _BRANCH_KEYWORDS)


def _smell(kind: str, severity: str, path: pathlib.Path, message: str, recommendation: str, **extra: object) -> dict:
    smell = {"type": kind, "severity": severity, "file": str(path)}
    smell.update(extra)
    smell["message"] = message
    smell["recommendation"] = recommendation
    return smell


def detect_smells(path: pathlib.Path, source: str) -> list[dict]:
    smells: list[dict] = []
    lines = source.splitlines()

    if len(lines) > LARGE_CLASS_LINES:
        smells.append(_smell(
            "LargeClass", "medium", path,
            f"Class has {len(lines)} lines. Consider splitting into smaller classes.",
            "Extract related methods into new classes following Single Responsibility Principle",
            lines=len(lines),
        ))

    for block in source.split("{"):
        block_lines = len(block.splitlines())
        if block_lines > LONG_METHOD_LINES:
            smells.append(_smell(
                "LongMethod", "low", path,
                f"Method has {block_lines} lines",
                "Extract method or decompose into smaller methods",
                lines=block_lines,
            ))
            break

    members = _count(source, ("public ", "private "))
    if members > GOD_CLASS_MEMBERS:
        smells.append(_smell(
            "GodClass", "high", path,
            f"Class has {members} methods, likely violating Single Responsibility",
            "Decompose into multiple focused classes",
            methodCount=members,
        ))

    if "static final" not in source and any(_MAGIC_NUMBER.search(line) for line in lines):
        smells.append(_smell(
            "MagicNumbers", "low", path,
            "Potential magic numbers found",
            "Extract magic numbers to named constants",
        ))
    return smells


def quality_grade(total_issues: int) -> str:
    if total_issues == 0:
        return "A"
    if total_issues < 10:
        return "B"
    if total_issues < 25:
        return "C"
    if total_issues < 50:
        return "D"
    return "F"


class CodeQualityCheckTool(Tool):
    name = "code-quality-check"
    description = (
        "Runs heuristic static analysis over Java sources: complexity estimates and code smells "
        "(large classes, long methods, god classes, magic numbers) with actionable recommendations."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the Maven project or module"},
            "severity": {
                "type": "string",
                "description": "Minimum severity level: low, medium, high (default: medium)",
                "enum": ["low", "medium", "high"],
            },
            "includeTests": {
                "type": "boolean",
                "description": "Whether to include test code in analysis (default: false)",
            },
        },
        "required": ["path"],
    }

    def execute(self, arguments: dict) -> dict:
        directory = project_dir(arguments.get("path"))
        severity = arguments.get("severity", "medium")
        include_tests = arguments.get("includeTests", False)
        logger.info("Running code quality checks for %s (severity: %s, includeTests: %s)",
                    directory, severity, include_tests)

        files = find_java_files(directory, include_tests=include_tests)
        min_level = SEVERITY_LEVELS.get(severity, 2)

        complex_files: list[dict] = []
        smells: list[dict] = []
        total_members = 0
        max_complexity = 0
        total_complexity = 0
        for path in files:
            try:
                source = path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.warning("Error reading %s: %s", path, exc)
                continue
            members = _count(source, ("public ", "private ", "protected "))
            total_members += members
            complexity = estimate_complexity(source)
            total_complexity += complexity
            max_complexity = max(max_complexity, complexity)
            if complexity > COMPLEXITY_THRESHOLD and members > 0:
                complex_files.append({
                    "file": str(path),
                    "estimatedComplexity": complexity,
                    "recommendation": "Consider refactoring to reduce complexity",
                })
            smells.extend(s for s in detect_smells(path, source) if SEVERITY_LEVELS[s["severity"]] >= min_level)

        complexity = {
            "filesAnalyzed": len(files),
            "totalMethods": total_members,
            "complexMethodCount": len(complex_files),
            "maxComplexity": max_complexity,
            "averageComplexity": total_complexity // len(files) if files else 0,
            "complexMethods": complex_files,
        }

        total = len(complex_files) + len(smells)
        recs: list[str] = []
        if complex_files:
            recs.append(f"Refactor {len(complex_files)} complex methods to improve maintainability")
        if smells:
            recs.append(f"Address {len(smells)} code smells identified")
        if not recs:
            recs.append("Code quality is excellent! No major issues found.")

        results: dict = {
            "projectPath": str(directory),
            "complexityAnalysis": complexity,
            "codeSmells": smells,
            "summary": {
                "totalIssues": total,
                "complexMethods": len(complex_files),
                "codeSmells": len(smells),
                "qualityGrade": quality_grade(total),
                "recommendations": recs,
            },
        }
        if not files:
            results["message"] = "No Java files found for analysis"
        return {"success": True, "results": results}
