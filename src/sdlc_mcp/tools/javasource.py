"""Structural model of Java sources, parsed with tree-sitter.

Only what the generators need is extracted: the package, every class and
interface declaration (nested ones included, in document order), and for
each of those its direct methods, fields and constructor count.
"""
from __future__ import annotations

import pathlib
from dataclasses import dataclass, field

import tree_sitter_java
from tree_sitter import Language, Node, Parser

JAVA = Language(tree_sitter_java.language())

_TYPE_KINDS = {"class_declaration": "class", "interface_declaration": "interface"}
_COMMENTS = ("block_comment", "comment")
_ANNOTATIONS = ("marker_annotation", "annotation")
_FIELD_NODES = ("field_declaration", "constant_declaration")


@dataclass
class JavaParameter:
    type: str
    name: str


@dataclass
class JavaMethod:
    name: str
    return_type: str
    parameters: list[JavaParameter] = field(default_factory=list)
    throws: list[str] = field(default_factory=list)
    modifiers: set[str] = field(default_factory=set)
    javadoc: str | None = None
    line: int = 0

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def signature(self) -> str:
        return f"{self.name}({', '.join(p.type for p in self.parameters)})"


@dataclass
class JavaField:
    type: str
    names: list[str]
    modifiers: set[str] = field(default_factory=set)
    javadoc: str | None = None

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers


@dataclass
class JavaClass:
    name: str
    kind: str
    modifiers: set[str] = field(default_factory=set)
    annotations: list[str] = field(default_factory=list)
    javadoc: str | None = None
    methods: list[JavaMethod] = field(default_factory=list)
    fields: list[JavaField] = field(default_factory=list)
    constructors: int = 0
    line: int = 0

    @property
    def is_interface(self) -> bool:
        return self.kind == "interface"

    @property
    def is_public(self) -> bool:
        return "public" in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers


@dataclass
class JavaSource:
    package: str
    classes: list[JavaClass]
    has_errors: bool = False
    path: pathlib.Path | None = None

    @property
    def main_class(self) -> JavaClass | None:
        return next((c for c in self.classes if not c.is_interface), None)


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _javadoc(node: Node) -> str | None:
    prev = node.prev_named_sibling
    if prev is not None and prev.type in _COMMENTS:
        comment = _text(prev)
        if comment.startswith("/**"):
            return comment
    return None


def _modifiers(node: Node) -> tuple[set[str], list[str]]:
    for child in node.children:
        if child.type == "modifiers":
            keywords = {c.type for c in child.children if not c.is_named}
            annotations = [
                _text(c.child_by_field_name("name")) for c in child.named_children if c.type in _ANNOTATIONS
            ]
            return keywords, annotations
    return set(), []


def _parameters(node: Node) -> list[JavaParameter]:
    params = node.child_by_field_name("parameters")
    if params is None:
        return []
    result: list[JavaParameter] = []
    for param in params.named_children:
        if param.type == "formal_parameter":
            result.append(JavaParameter(
                _text(param.child_by_field_name("type")),
                _text(param.child_by_field_name("name")),
            ))
        elif param.type == "spread_parameter":
            type_node = next(
                (c for c in param.named_children if c.type not in ("modifiers", "variable_declarator")), None,
            )
            declarator = next((c for c in param.named_children if c.type == "variable_declarator"), None)
            name_node = declarator.child_by_field_name("name") if declarator is not None else None
            result.append(JavaParameter(f"{_text(type_node)}...", _text(name_node)))
    return result


def _throws(node: Node) -> list[str]:
    for child in node.named_children:
        if child.type == "throws":
            return [_text(t) for t in child.named_children]
    return []


def _method(node: Node, in_interface: bool) -> JavaMethod:
    modifiers, _ = _modifiers(node)
    if in_interface and "private" not in modifiers:
        modifiers.add("public")
    return JavaMethod(
        name=_text(node.child_by_field_name("name")),
        return_type=_text(node.child_by_field_name("type")),
        parameters=_parameters(node),
        throws=_throws(node),
        modifiers=modifiers,
        javadoc=_javadoc(node),
        line=_line(node),
    )


def _field(node: Node) -> JavaField:
    modifiers, _ = _modifiers(node)
    names = [_text(d.child_by_field_name("name")) for d in node.children_by_field_name("declarator")]
    return JavaField(
        type=_text(node.child_by_field_name("type")),
        names=names,
        modifiers=modifiers,
        javadoc=_javadoc(node),
    )


def _class(node: Node) -> JavaClass:
    kind = _TYPE_KINDS[node.type]
    modifiers, annotations = _modifiers(node)
    cls = JavaClass(
        name=_text(node.child_by_field_name("name")),
        kind=kind,
        modifiers=modifiers,
        annotations=annotations,
        javadoc=_javadoc(node),
        line=_line(node),
    )
    body = node.child_by_field_name("body")
    members = body.named_children if body is not None else []
    for member in members:
        if member.type == "method_declaration":
            cls.methods.append(_method(member, cls.is_interface))
        elif member.type in _FIELD_NODES:
            cls.fields.append(_field(member))
        elif member.type == "constructor_declaration":
            cls.constructors += 1
    return cls


def _package(root: Node) -> str:
    for child in root.named_children:
        if child.type == "package_declaration":
            for part in child.named_children:
                if part.type in ("scoped_identifier", "identifier"):
                    return _text(part)
    return ""


def parse_java(source: str | bytes, path: pathlib.Path | None = None) -> JavaSource:
    data = source.encode("utf-8") if isinstance(source, str) else source
    tree = Parser(JAVA).parse(data)
    root = tree.root_node

    found: list[JavaClass] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _TYPE_KINDS:
            found.append(_class(node))
        stack.extend(reversed(node.named_children))

    return JavaSource(package=_package(root), classes=found, has_errors=root.has_error, path=path)


def read_java(path: str | pathlib.Path) -> JavaSource:
    path = pathlib.Path(path)
    return parse_java(path.read_bytes(), path)


def javadoc_description(comment: str | None) -> str:
    """Text of a ``/** ... */`` comment up to its first block tag."""
    if not comment:
        return ""
    body = comment[3:-2] if comment.endswith("*/") else comment[3:]
    lines: list[str] = []
    for raw in body.splitlines():
        line = raw.strip()
        if line.startswith("*"):
            line = line[1:].strip()
        if line.startswith("@"):
            break
        lines.append(line)
    return "\n".join(lines).strip()


def capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]
