from __future__ import annotations

import logging

import pytest

from sdlc_mcp.capabilities import ResourceRegistry, Tool, ToolRegistry
from sdlc_mcp.registry import Registry
from tests.conftest import EchoTool, FileResource


class Named:
    def __init__(self, name: str, tag: str = "") -> None:
        self.name = name
        self.tag = tag


def test_lookup_and_order():
    reg = Registry("thing")
    for n in ("c", "a", "b"):
        reg.register(Named(n))
    assert reg.names() == ["c", "a", "b"]
    assert reg.get("a").name == "a"
    assert reg.get("missing") is None
    assert "b" in reg
    assert len(reg) == 3


def test_iteration_is_stable():
    reg = Registry("thing")
    for n in ("x", "y", "z"):
        reg.register(Named(n))
    assert [i.name for i in reg] == [i.name for i in reg]


def test_last_registration_wins_and_warns(caplog):
    reg = Registry("thing")
    reg.register(Named("a", "first"))
    reg.register(Named("b"))
    with caplog.at_level(logging.WARNING, logger="sdlc_mcp.registry"):
        reg.register(Named("a", "second"))
    assert reg.get("a").tag == "second"
    assert reg.names() == ["a", "b"]
    assert "Replacing thing" in caplog.text


def test_tool_registry_rejects_invalid_schema():
    class BadSchema(Tool):
        name = "bad"
        input_schema = {"type": "not-a-type"}

        def execute(self, arguments):
            return None

    reg = ToolRegistry()
    with pytest.raises(ValueError, match="invalid inputSchema"):
        reg.register(BadSchema())
    assert "bad" not in reg


def test_tool_registry_accepts_valid_schema():
    reg = ToolRegistry()
    reg.register(EchoTool())
    assert reg.names() == ["echo"]


def test_resource_resolution_first_registered_wins():
    class Specific(FileResource):
        name = "specific"
        uri = "file://{anything}"

    reg = ResourceRegistry()
    reg.register(FileResource())
    reg.register(Specific())
    resource, params = reg.resolve("file://etc/hosts")
    assert resource.name == "file"
    assert params == {"path": "etc/hosts"}


def test_resource_resolution_no_match():
    reg = ResourceRegistry()
    reg.register(FileResource())
    assert reg.resolve("http://example.com") is None
