from __future__ import annotations

import logging
import os
import pathlib
import shutil
import subprocess
from dataclasses import dataclass

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.tools.sources import project_dir, require_pom

logger = logging.getLogger(__name__)

ALLOWED_GOALS = (
    "clean",
    "compile",
    "test",
    "package",
    "verify",
    "install",
    "dependency:tree",
    "dependency:analyze",
    "versions:display-dependency-updates",
    "jacoco:report",
    "pmd:pmd",
    "pmd:cpd",
)

OUTPUT_TAIL_LINES = 50


@dataclass
class MavenResult:
    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def tail(self, lines: int = OUTPUT_TAIL_LINES) -> str:
        return "\n".join(self.output.splitlines()[-lines:])


class MavenInvoker:
    """Runs ``mvn`` in batch mode against a project directory."""

    def __init__(self, executable: str | None = None, timeout: float | None = None) -> None:
        self.executable = executable or os.environ.get("MAVEN_CMD") or "mvn"
        self.timeout = timeout

    def run(self, directory: pathlib.Path, goals: list[str], module: str | None = None) -> MavenResult:
        exe = shutil.which(self.executable)
        if exe is None:
            raise FileNotFoundError(f"Maven executable not found: {self.executable}")
        args = [exe, "-B", "-f", str(directory / "pom.xml"), *goals]
        if module:
            args += ["-pl", module, "-am"]
        logger.info("Running %s", " ".join(args))
        try:
            proc = subprocess.run(
                args,
                cwd=directory,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise TimeoutError(f"Maven did not finish within {self.timeout}s: {' '.join(goals)}") from exc
        return MavenResult(proc.returncode, proc.stdout + proc.stderr)


def parse_goals(command: str) -> list[str]:
    goals = command.split()
    if not goals:
        raise ValueError("command parameter is required")
    rejected = [g for g in goals if g not in ALLOWED_GOALS]
    if rejected:
        raise PermissionError(
            f"Command not allowed: {command}. Allowed commands: {', '.join(ALLOWED_GOALS)}"
        )
    return goals


class RunMavenCommandTool(Tool):
    name = "run-maven-command"
    description = (
        "Executes an allow-listed Maven command (clean, compile, test, package, etc.) "
        "on the project or on a specific module."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the Maven project"},
            "command": {
                "type": "string",
                "description": "Maven goals to execute, e.g. 'clean test'. Allowed: " + ", ".join(ALLOWED_GOALS),
            },
            "module": {"type": "string", "description": "Optional: specific module to build"},
        },
        "required": ["path", "command"],
    }

    def __init__(self, maven: MavenInvoker) -> None:
        self._maven = maven

    def execute(self, arguments: dict) -> dict:
        directory = project_dir(arguments.get("path"))
        require_pom(directory)
        command = arguments.get("command", "")
        goals = parse_goals(command)
        module = arguments.get("module") or None

        result = self._maven.run(directory, goals, module)
        if result.ok:
            return {
                "success": True,
                "exitCode": 0,
                "message": "Command executed successfully",
                "output": result.tail(),
            }
        return {
            "success": False,
            "exitCode": result.exit_code,
            "message": f"Command failed with exit code: {result.exit_code}",
            "output": result.tail(),
        }
