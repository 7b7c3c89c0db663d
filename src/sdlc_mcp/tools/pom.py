"""Minimal reader for Maven ``pom.xml`` files."""
from __future__ import annotations

import pathlib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field


@dataclass
class Dependency:
    group_id: str
    artifact_id: str
    version: str | None = None
    scope: str | None = None
    optional: bool = False
    exclusions: int = 0

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version or '?'}"


@dataclass
class Pom:
    path: pathlib.Path
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    packaging: str = "jar"
    parent_group_id: str | None = None
    parent_version: str | None = None
    modules: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    plugins: list[str] = field(default_factory=list)
    name: str | None = None
    description: str | None = None
    properties: dict[str, str] = field(default_factory=dict)
    licenses: list[str] = field(default_factory=list)

    @property
    def effective_group_id(self) -> str | None:
        return self.group_id or self.parent_group_id

    @property
    def effective_version(self) -> str | None:
        return self.version or self.parent_version


def _strip_namespaces(root: ET.Element) -> None:
    for elem in root.iter():
        if isinstance(elem.tag, str) and "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]


def _text(elem: ET.Element | None, tag: str) -> str | None:
    if elem is None:
        return None
    child = elem.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def _dependency(elem: ET.Element) -> Dependency:
    exclusions = elem.find("exclusions")
    return Dependency(
        group_id=_text(elem, "groupId") or "",
        artifact_id=_text(elem, "artifactId") or "",
        version=_text(elem, "version"),
        scope=_text(elem, "scope"),
        optional=(_text(elem, "optional") or "").lower() == "true",
        exclusions=len(exclusions.findall("exclusion")) if exclusions is not None else 0,
    )


def read_pom(path: str | pathlib.Path) -> Pom:
    """Parse ``path``; raises ValueError if the file is not well-formed XML."""
    path = pathlib.Path(path)
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Invalid pom.xml at {path}: {exc}") from exc
    _strip_namespaces(root)

    parent = root.find("parent")
    modules = root.find("modules")
    deps = root.find("dependencies")
    plugins = root.find("build/plugins")
    props = root.find("properties")
    licenses = root.find("licenses")

    return Pom(
        path=path,
        group_id=_text(root, "groupId"),
        artifact_id=_text(root, "artifactId"),
        version=_text(root, "version"),
        packaging=_text(root, "packaging") or "jar",
        parent_group_id=_text(parent, "groupId"),
        parent_version=_text(parent, "version"),
        modules=[m.text.strip() for m in modules.findall("module") if m.text] if modules is not None else [],
        dependencies=[_dependency(d) for d in deps.findall("dependency")] if deps is not None else [],
        plugins=[_text(p, "artifactId") or "" for p in plugins.findall("plugin")] if plugins is not None else [],
        name=_text(root, "name"),
        description=_text(root, "description"),
        properties={p.tag: (p.text or "").strip() for p in props} if props is not None else {},
        licenses=[_text(lic, "name") or "" for lic in licenses.findall("license")] if licenses is not None else [],
    )
