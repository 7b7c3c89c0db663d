"""JSON-RPC request dispatcher and the read-dispatch-write loop."""
from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from sdlc_mcp import __version__, envelope
from sdlc_mcp.capabilities import PromptRegistry, ResourceRegistry, ToolRegistry
from sdlc_mcp.transport.base import BaseTransport
from sdlc_mcp.types import PROTOCOL_VERSION, SERVER_NAME, ErrorCode, Failure, RpcError

logger = logging.getLogger(__name__)

_METHOD_ATTR = "_rpc_method"

Handler = Callable[[dict], Any]


def rpc_method(name: str) -> Callable:
    def decorator(fn: Callable) -> Callable:
        setattr(fn, _METHOD_ATTR, name)
        return fn
    return decorator


def _require_str(params: dict, key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise RpcError(ErrorCode.INVALID_PARAMS, f"Missing required parameter: {key}")
    return value


def _optional_object(params: dict, key: str) -> dict:
    value = params.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RpcError(ErrorCode.INVALID_PARAMS, f"Parameter {key} must be an object")
    return value


class Dispatcher:
    """Routes decoded requests to the tool, resource and prompt registries.

    Every method except ``initialize`` is refused until ``initialize`` has
    been handled once. The method table is built from the ``rpc_method``
    decorated handlers on this class.
    """

    def __init__(
        self,
        tools: ToolRegistry,
        resources: ResourceRegistry,
        prompts: PromptRegistry,
        server_name: str = SERVER_NAME,
        server_version: str = __version__,
        server_info: dict | None = None,
    ) -> None:
        self._tools = tools
        self._resources = resources
        self._prompts = prompts
        self.server_name = server_name
        self.server_version = server_version
        self.server_info = server_info or {}
        self.initialized = False
        self._handlers = self._collect_handlers()

    def _collect_handlers(self) -> dict[str, Handler]:
        handlers: dict[str, Handler] = {}
        cls = type(self)
        for attr_name in dir(cls):
            attr = getattr(cls, attr_name, None)
            if callable(attr) and hasattr(attr, _METHOD_ATTR):
                handlers[getattr(attr, _METHOD_ATTR)] = getattr(self, attr_name)
        return handlers

    @property
    def methods(self) -> list[str]:
        return sorted(self._handlers)

    # -- message level ------------------------------------------------------

    def handle_line(self, line: str) -> dict:
        try:
            message = json.loads(line)
        except (ValueError, RecursionError) as exc:
            logger.warning("Unparseable message: %s", line[:200])
            return envelope.error(None, ErrorCode.INTERNAL_ERROR, f"Internal error: {exc}")
        return self.handle_message(message)

    def handle_message(self, message: Any) -> dict:
        if not isinstance(message, dict):
            return envelope.error(None, ErrorCode.INTERNAL_ERROR, "Internal error: message is not a JSON object")

        msg_id = message.get("id")
        method = message.get("method")
        if not isinstance(method, str):
            return envelope.error(msg_id, ErrorCode.INTERNAL_ERROR, "Internal error: message has no method")

        if method != "initialize" and not self.initialized:
            return envelope.error(msg_id, ErrorCode.NOT_INITIALIZED, "Server not initialized")

        handler = self._handlers.get(method)
        if handler is None:
            return envelope.error(msg_id, ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")

        params = message.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            return envelope.error(msg_id, ErrorCode.INVALID_PARAMS, "params must be an object")

        logger.info("Handling %s", method)
        start = time.perf_counter()
        try:
            result = handler(params)
        except RpcError as exc:
            logger.info("%s failed (%d): %s", method, exc.code, exc.message)
            return envelope.error(msg_id, exc.code, exc.message)
        except Exception as exc:
            logger.error("Unexpected error handling %s", method, exc_info=True)
            return envelope.error(msg_id, ErrorCode.INTERNAL_ERROR, f"Internal error: {exc}")
        finally:
            logger.debug("%s took %.1f ms", method, (time.perf_counter() - start) * 1000)
        return envelope.success(msg_id, result)

    def respond(self, line: str) -> str:
        """Handle one inbound line and return the serialized response."""
        response = self.handle_line(line)
        try:
            return json.dumps(response)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.error("Response for id %r is not serializable: %s", response.get("id"), exc)
            fallback = envelope.error(
                response.get("id"),
                ErrorCode.INTERNAL_ERROR,
                f"Internal error: result is not JSON serializable: {exc}",
            )
            return json.dumps(fallback)

    def serve(self, transport: BaseTransport) -> int:
        """Process lines until the transport reports end of stream.

        Returns the number of requests handled. TransportError propagates.
        """
        handled = 0
        while True:
            line = transport.read_line()
            if line is None:
                break
            logger.debug("<- %s", line[:500])
            try:
                reply = self.respond(line)
            except Exception as exc:
                logger.error("Unhandled error processing message", exc_info=True)
                reply = json.dumps(envelope.error(None, ErrorCode.INTERNAL_ERROR, f"Internal error: {exc}"))
            transport.write_line(reply)
            handled += 1
        logger.info("Input closed after %d request(s)", handled)
        return handled

    # -- methods ------------------------------------------------------------

    @rpc_method("initialize")
    def _initialize(self, params: dict) -> dict:
        client = params.get("clientInfo")
        if isinstance(client, dict):
            logger.info("Client: %s %s", client.get("name", "?"), client.get("version", ""))
        if self.initialized:
            logger.debug("initialize received again")
        self.initialized = True
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverName": self.server_name,
            "serverVersion": self.server_version,
            "serverInfo": self.server_info,
        }

    @rpc_method("tools/list")
    def _list_tools(self, params: dict) -> dict:
        return {"tools": [tool.schema() for tool in self._tools]}

    @rpc_method("tools/call")
    def _call_tool(self, params: dict) -> dict:
        name = _require_str(params, "name")
        arguments = _optional_object(params, "arguments")
        tool = self._tools.get(name)
        if tool is None:
            raise RpcError(ErrorCode.CAPABILITY_NOT_FOUND, f"Tool not found: {name}")

        problem = tool.check_arguments(arguments)
        if problem is not None:
            raise RpcError(ErrorCode.INVALID_PARAMS, f"Invalid arguments for tool {name}: {problem}")

        outcome = tool.call(arguments)
        if isinstance(outcome, Failure):
            raise RpcError(ErrorCode.EXECUTION_FAILED, f"Tool execution failed: {name}: {outcome.message}")
        return {"content": outcome.value}

    @rpc_method("resources/list")
    def _list_resources(self, params: dict) -> dict:
        return {"resources": [r.descriptor() for r in self._resources]}

    @rpc_method("resources/read")
    def _read_resource(self, params: dict) -> dict:
        uri = _require_str(params, "uri")
        resolved = self._resources.resolve(uri)
        if resolved is None:
            raise RpcError(ErrorCode.CAPABILITY_NOT_FOUND, f"Resource not found: {uri}")
        resource, values = resolved

        outcome = resource.fetch(values)
        if isinstance(outcome, Failure):
            raise RpcError(
                ErrorCode.EXECUTION_FAILED,
                f"Resource read failed: {resource.name}: {outcome.message}",
            )
        try:
            text = json.dumps(outcome.value)
        except (TypeError, ValueError, RecursionError) as exc:
            raise RpcError(
                ErrorCode.INTERNAL_ERROR,
                f"Internal error: resource {resource.name} returned unserializable data: {exc}",
            ) from exc
        return {"contents": [{"uri": uri, "mimeType": resource.mime_type, "text": text}]}

    @rpc_method("prompts/list")
    def _list_prompts(self, params: dict) -> dict:
        return {"prompts": [p.descriptor() for p in self._prompts]}

    @rpc_method("prompts/get")
    def _get_prompt(self, params: dict) -> dict:
        name = _require_str(params, "name")
        arguments = _optional_object(params, "arguments")
        prompt = self._prompts.get(name)
        if prompt is None:
            raise RpcError(ErrorCode.CAPABILITY_NOT_FOUND, f"Prompt not found: {name}")

        outcome = prompt.get(arguments)
        if isinstance(outcome, Failure):
            raise RpcError(ErrorCode.EXECUTION_FAILED, f"Prompt rendering failed: {name}: {outcome.message}")
        return {
            "description": prompt.description,
            "messages": [
                {"role": "user", "content": {"type": "text", "text": outcome.value}},
            ],
        }
