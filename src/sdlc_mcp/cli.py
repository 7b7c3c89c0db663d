from __future__ import annotations

import argparse
import logging
import sys

from sdlc_mcp import __version__
from sdlc_mcp.cache import AnalysisCache
from sdlc_mcp.capabilities import PromptRegistry, ResourceRegistry, ToolRegistry
from sdlc_mcp.config import Settings
from sdlc_mcp.dispatcher import Dispatcher
from sdlc_mcp.prompts import SdlcWorkflowPrompt
from sdlc_mcp.resources import AnalysisCacheResource
from sdlc_mcp.tools import build_tools
from sdlc_mcp.transport.base import TransportError
from sdlc_mcp.transport.stdio import StdioTransport
from sdlc_mcp.types import SERVER_NAME

logger = logging.getLogger("sdlc_mcp")

SDLC_PERSONAS = {
    "analyst": ".github/mcp/personas/01-analyst.md",
    "architect": ".github/mcp/personas/02-architect.md",
    "developer": ".github/mcp/personas/03-developer.md",
    "tester": ".github/mcp/personas/04-tester.md",
    "reviewer": ".github/mcp/personas/05-reviewer.md",
    "documentor": ".github/mcp/personas/06-documentor.md",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdlc-mcp-server",
        description="MCP server exposing Maven analysis, JIRA and Confluence tools over stdio",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"sdlc-mcp-server {__version__}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an application.properties file (default: ./application.properties, "
             "then ~/.sdlc-tools/application.properties)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Log debug output to stderr",
    )
    return parser


def server_info(settings: Settings) -> dict:
    return {
        "name": SERVER_NAME,
        "version": __version__,
        "description": "SDLC Tools MCP Server for Maven analysis, JIRA issue tracking, and Confluence documentation",
        "capabilities": {"tools": True, "resources": True, "prompts": True},
        "integrations": {
            "maven": True,
            "jira": settings.has_jira(),
            "confluence": settings.has_confluence(),
        },
        "sdlcPersonas": SDLC_PERSONAS,
    }


def build_dispatcher(settings: Settings, cache: AnalysisCache | None = None) -> Dispatcher:
    cache = cache or AnalysisCache()

    tools = ToolRegistry()
    for tool in build_tools(settings, cache):
        tools.register(tool)
    resources = ResourceRegistry()
    resources.register(AnalysisCacheResource(cache))
    prompts = PromptRegistry()
    prompts.register(SdlcWorkflowPrompt())

    logger.info(
        "Registered %d tools, %d resources, %d prompts",
        len(tools), len(resources), len(prompts),
    )
    return Dispatcher(
        tools,
        resources,
        prompts,
        server_name=SERVER_NAME,
        server_version=__version__,
        server_info=server_info(settings),
    )


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = Settings.load(args.config)
        settings.log_status()
        dispatcher = build_dispatcher(settings)
    except Exception as exc:
        logger.debug("Startup failed", exc_info=True)
        logger.error("Fatal error starting server: %s", exc)
        sys.exit(1)

    logger.info("Starting %s %s on stdio", SERVER_NAME, __version__)
    try:
        with StdioTransport() as transport:
            dispatcher.serve(transport)
    except TransportError as exc:
        logger.error("Transport failure: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)

    sys.exit(0)
