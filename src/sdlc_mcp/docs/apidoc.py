from __future__ import annotations

import logging
import pathlib
from dataclasses import dataclass

from sdlc_mcp.docs import main_sources
from sdlc_mcp.tools.javasource import JavaClass, JavaMethod, javadoc_description, read_java

logger = logging.getLogger(__name__)


@dataclass
class ApiClass:
    package: str
    cls: JavaClass


def collect_api(directory: pathlib.Path, package_filter: str | None = None) -> list[ApiClass]:
    """Public top-level types under ``src/main/java``, sorted by package then name."""
    found: list[ApiClass] = []
    for path in main_sources(directory):
        try:
            source = read_java(path)
        except OSError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            continue
        if package_filter and not source.package.startswith(package_filter):
            continue
        if not source.classes or not source.classes[0].is_public:
            continue
        found.append(ApiClass(source.package, source.classes[0]))
    found.sort(key=lambda api: (api.package, api.cls.name))
    return found


def _method_section(method: JavaMethod) -> list[str]:
    params = ", ".join(f"{p.type} {p.name}" for p in method.parameters)
    declaration = f"{method.return_type} {method.name}({params})"
    if method.throws:
        declaration += " throws " + ", ".join(method.throws)
    lines = [f"##### `{method.name}`", "", "```java", declaration, "```", ""]

    description = javadoc_description(method.javadoc)
    if description:
        lines += [description, ""]
    if method.parameters:
        lines += ["**Parameters:**", ""]
        lines += [f"- `{p.name}` ({p.type}): TODO: describe parameter" for p in method.parameters]
        lines.append("")
    if method.return_type != "void":
        lines += [f"**Returns:** `{method.return_type}` - TODO: describe return value", ""]
    if method.throws:
        lines += ["**Throws:**", ""]
        lines += [f"- `{exc}`: TODO: describe exception" for exc in method.throws]
        lines.append("")
    return lines


def generate_api_docs(directory: pathlib.Path, package_filter: str | None = None) -> str:
    classes = collect_api(directory, package_filter)
    lines = [
        "# API Documentation",
        "",
        "This document provides detailed API documentation for all public classes and methods.",
        "",
        "## Table of Contents",
        "",
    ]
    current = None
    for api in classes:
        if api.package != current:
            current = api.package
            lines += [f"### {current}", ""]
        lines.append(f"- [{api.cls.name}](#{api.cls.name.lower()})")
    lines.append("")

    current = None
    for api in classes:
        if api.package != current:
            current = api.package
            lines += [f"## Package: `{current}`", ""]
        cls = api.cls
        lines += [f"### {cls.name}", "", f"**Type:** {'Interface' if cls.is_interface else 'Class'}", ""]
        description = javadoc_description(cls.javadoc)
        if description:
            lines += [description, ""]
        methods = [m for m in cls.methods if m.is_public]
        if methods:
            lines += ["#### Methods", ""]
            for method in methods:
                lines += _method_section(method)
        lines += ["---", ""]
    return "\n".join(lines)
