from __future__ import annotations

from sdlc_mcp.cache import AnalysisCache
from sdlc_mcp.capabilities import Resource


class AnalysisCacheResource(Resource):
    uri = "cache://analysis/{projectPath}"
    name = "analysis-cache"
    description = "Cached Maven project analysis results to avoid re-running expensive operations"
    mime_type = "application/json"

    def __init__(self, cache: AnalysisCache) -> None:
        self._cache = cache

    def read(self, params: dict[str, str]) -> dict:
        path = params.get("projectPath", "")
        if not path:
            raise ValueError("projectPath parameter is required")
        return self._cache.describe(path)
