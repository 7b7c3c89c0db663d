from __future__ import annotations

import io
import json
import pathlib
import threading
import urllib.parse
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from sdlc_mcp.capabilities import (
    Prompt,
    PromptArgument,
    PromptRegistry,
    Resource,
    ResourceRegistry,
    Tool,
    ToolRegistry,
)
from sdlc_mcp.dispatcher import Dispatcher
from sdlc_mcp.tools.maven import MavenResult
from sdlc_mcp.transport.base import BaseTransport

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"
SAMPLE_PROJECT = FIXTURES_DIR / "sample-project"

ORDER_SERVICE = """\
package org.acme.orders;

import java.util.List;

/**
 * Places and tracks orders.
 *
 * @since 1.0
 */
@Service
public class OrderService {

    private static final int LIMIT = 10;

    private final OrderRepository repository;
    private Clock clock, backupClock;

    public OrderService(OrderRepository repository) {
        this.repository = repository;
    }

    /**
     * Places an order.
     *
     * @param id order id
     * @return the order
     */
    public Order place(String id, int quantity) throws IllegalStateException {
        return repository.get(id);
    }

    public void cancel(String id) {
    }

    public static OrderService create() {
        return null;
    }

    private void audit(String... entries) {
    }

    interface Listener {
        void onPlaced(Order order);
    }
}
"""


class EchoTool(Tool):
    name = "echo"
    description = "Returns its arguments"
    input_schema = {
        "type": "object",
        "properties": {"text": {"type": "string"}},
        "required": ["text"],
    }

    def __init__(self) -> None:
        self.calls: list[dict] = []

    def execute(self, arguments: dict) -> dict:
        self.calls.append(arguments)
        return {"echo": arguments["text"]}


class BoomTool(Tool):
    name = "boom"
    description = "Always fails"

    def __init__(self) -> None:
        self.calls = 0

    def execute(self, arguments: dict) -> dict:
        self.calls += 1
        raise RuntimeError("kaboom")


class SetTool(Tool):
    name = "set"
    description = "Returns something json cannot encode"

    def execute(self, arguments: dict) -> object:
        return {1, 2, 3}


class FileResource(Resource):
    uri = "file://{path}"
    name = "file"
    description = "Echoes the requested path"
    mime_type = "text/plain"

    def read(self, params: dict[str, str]) -> dict:
        return {"path": params["path"]}


class BrokenResource(Resource):
    uri = "broken://{id}"
    name = "broken"
    description = "Always fails"

    def read(self, params: dict[str, str]) -> dict:
        raise LookupError(f"nothing at {params['id']}")


class GreetingPrompt(Prompt):
    name = "greet"
    description = "Greets someone"
    arguments = (PromptArgument("who", "Who to greet", required=True),)

    def render(self, arguments: dict) -> str:
        return f"Hello, {self.require(arguments, 'who')}!"


class MemoryTransport(BaseTransport):
    def __init__(self, lines: list[str]) -> None:
        self._lines = list(lines)
        self.written: list[str] = []

    def read_line(self) -> str | None:
        if not self._lines:
            return None
        return self._lines.pop(0)

    def write_line(self, line: str) -> None:
        self.written.append(line)

    @property
    def responses(self) -> list[dict]:
        return [json.loads(line) for line in self.written]


class FakeMaven:
    """Stands in for MavenInvoker; returns canned output per goal."""

    def __init__(self, outputs: dict[str, MavenResult] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[tuple[pathlib.Path, list[str], str | None]] = []

    def run(self, directory: pathlib.Path, goals: list[str], module: str | None = None) -> MavenResult:
        self.calls.append((directory, goals, module))
        return self.outputs.get(" ".join(goals), MavenResult(0, "[INFO] BUILD SUCCESS"))


def rpc(msg_id, method: str, params: dict | None = None) -> dict:
    msg = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params is not None:
        msg["params"] = params
    return msg


@pytest.fixture
def echo_tool():
    return EchoTool()


@pytest.fixture
def boom_tool():
    return BoomTool()


@pytest.fixture
def dispatcher(echo_tool, boom_tool):
    tools = ToolRegistry()
    for tool in (echo_tool, boom_tool, SetTool()):
        tools.register(tool)
    resources = ResourceRegistry()
    resources.register(FileResource())
    resources.register(BrokenResource())
    prompts = PromptRegistry()
    prompts.register(GreetingPrompt())
    return Dispatcher(tools, resources, prompts, server_name="test-server", server_version="9.9.9",
                      server_info={"description": "test"})


@pytest.fixture
def ready(dispatcher):
    dispatcher.handle_message(rpc(0, "initialize", {}))
    return dispatcher


@pytest.fixture
def fake_maven():
    return FakeMaven()


@pytest.fixture
def stdin_factory():
    def make(text: str) -> io.StringIO:
        return io.StringIO(text)
    return make


@pytest.fixture
def maven_project(tmp_path):
    """Write a single-module Maven project with the given POM body and sources."""

    def make(dependencies: str = "", sources: dict[str, str] | None = None) -> pathlib.Path:
        (tmp_path / "pom.xml").write_text(
            '<project xmlns="http://maven.apache.org/POM/4.0.0">\n'
            "  <modelVersion>4.0.0</modelVersion>\n"
            "  <groupId>org.acme</groupId>\n"
            "  <artifactId>demo</artifactId>\n"
            "  <version>0.1.0</version>\n"
            f"  <dependencies>{dependencies}</dependencies>\n"
            "</project>\n"
        )
        for rel, body in (sources or {}).items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(body)
        return tmp_path

    return make


class RecordingHandler(BaseHTTPRequestHandler):
    requests: list[dict] = []

    def _record(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        parsed = urllib.parse.urlsplit(self.path)
        entry = {
            "method": self.command,
            "path": parsed.path,
            "query": dict(urllib.parse.parse_qsl(parsed.query)),
            "headers": dict(self.headers),
            "body": json.loads(body) if body else None,
        }
        self.requests.append(entry)
        return entry

    def _reply(self, status: int, payload: dict):
        data = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def do_GET(self):
        entry = self._record()
        if entry["path"].endswith("/missing"):
            self._reply(404, {"errorMessages": ["Issue does not exist"]})
        elif entry["path"] == "/rest/api/content/77":
            self._reply(200, {"id": "77", "version": {"number": 4}})
        else:
            self._reply(200, {"ok": True, "path": entry["path"]})

    def do_POST(self):
        self._record()
        self._reply(201, {"id": "10001"})

    def do_PUT(self):
        self._record()
        self._reply(200, {"updated": True})

    def log_message(self, format, *args):
        pass


@pytest.fixture
def api_server():
    RecordingHandler.requests = []
    server = HTTPServer(("127.0.0.1", 0), RecordingHandler)
    port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{port}", RecordingHandler.requests
    server.shutdown()
