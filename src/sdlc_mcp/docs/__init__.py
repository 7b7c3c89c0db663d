"""Project documentation generators used by the generate-documentation tool."""
from __future__ import annotations

import pathlib

from sdlc_mcp.tools.sources import find_java_files


def main_sources(directory: pathlib.Path) -> list[pathlib.Path]:
    """Java files under any ``src/main/java`` tree of ``directory``."""
    return [p for p in find_java_files(directory) if "/src/main/java/" in p.as_posix()]
