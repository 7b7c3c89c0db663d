"""SDLC tools MCP server: Maven analysis, Jira and Confluence over JSON-RPC stdio."""

__version__ = "2.0.0"
