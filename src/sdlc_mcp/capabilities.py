"""Contracts for the three capability kinds served by the dispatcher.

Concrete tools, resources and prompts implement ``execute``, ``read`` and
``render`` respectively and are free to raise. The public entry points
``call``, ``fetch`` and ``get`` never raise; they return a ``Success`` or
``Failure`` so the dispatcher can branch on the outcome.
"""
from __future__ import annotations

import abc
import functools
import logging
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, best_match

from sdlc_mcp.registry import Registry
from sdlc_mcp.types import Failure, Outcome, Success
from sdlc_mcp.uri import UriTemplate

logger = logging.getLogger(__name__)


def _failure(kind: str, name: str, exc: Exception) -> Failure:
    logger.error("%s %s failed: %s", kind, name, exc, exc_info=True)
    return Failure(str(exc) or type(exc).__name__, exc)


class Tool(abc.ABC):
    name: str = ""
    description: str = ""
    input_schema: dict = {"type": "object", "properties": {}}

    def schema(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    @functools.cached_property
    def _validator(self) -> Draft202012Validator:
        return Draft202012Validator(self.input_schema)

    def check_arguments(self, arguments: dict) -> str | None:
        """Return the first schema violation in ``arguments``, or None."""
        err = best_match(self._validator.iter_errors(arguments))
        if err is None:
            return None
        if err.path:
            return f"{'.'.join(str(p) for p in err.path)}: {err.message}"
        return err.message

    @abc.abstractmethod
    def execute(self, arguments: dict) -> Any: ...

    def call(self, arguments: dict) -> Outcome:
        try:
            return Success(self.execute(arguments))
        except Exception as exc:
            return _failure("Tool", self.name, exc)


class Resource(abc.ABC):
    uri: str = ""
    name: str = ""
    description: str = ""
    mime_type: str = "application/json"

    @functools.cached_property
    def template(self) -> UriTemplate:
        return UriTemplate(self.uri)

    def descriptor(self) -> dict:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }

    @abc.abstractmethod
    def read(self, params: dict[str, str]) -> Any: ...

    def fetch(self, params: dict[str, str]) -> Outcome:
        try:
            return Success(self.read(params))
        except Exception as exc:
            return _failure("Resource", self.name, exc)


@dataclass(frozen=True)
class PromptArgument:
    name: str
    description: str
    required: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }


class Prompt(abc.ABC):
    name: str = ""
    description: str = ""
    arguments: tuple[PromptArgument, ...] = ()

    def descriptor(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [a.to_dict() for a in self.arguments],
        }

    def require(self, arguments: dict, name: str) -> str:
        value = arguments.get(name)
        if value is None or value == "":
            raise ValueError(f"{name} is required")
        return str(value)

    @abc.abstractmethod
    def render(self, arguments: dict) -> str: ...

    def get(self, arguments: dict) -> Outcome:
        try:
            return Success(self.render(arguments))
        except Exception as exc:
            return _failure("Prompt", self.name, exc)


class ToolRegistry(Registry[Tool]):
    def __init__(self) -> None:
        super().__init__("tool")

    def register(self, item: Tool) -> None:
        try:
            Draft202012Validator.check_schema(item.input_schema)
        except SchemaError as exc:
            raise ValueError(f"Tool {item.name!r} has an invalid inputSchema: {exc.message}") from exc
        super().register(item)


class ResourceRegistry(Registry[Resource]):
    def __init__(self) -> None:
        super().__init__("resource")

    def resolve(self, uri: str) -> tuple[Resource, dict[str, str]] | None:
        """Find the first registered resource whose template matches ``uri``."""
        for resource in self:
            params = resource.template.match(uri)
            if params is not None:
                return resource, params
        return None


class PromptRegistry(Registry[Prompt]):
    def __init__(self) -> None:
        super().__init__("prompt")
