from __future__ import annotations

import base64
import json
import logging
import urllib.error
import urllib.parse
import urllib.request

from sdlc_mcp.config import Credentials
from sdlc_mcp.types import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, service: str, status: int, body: str) -> None:
        super().__init__(f"{service} API request failed: {status} - {body}")
        self.status = status
        self.body = body


class RestClient:
    """Blocking JSON REST client with HTTP Basic authentication."""

    service = "REST"

    def __init__(self, credentials: Credentials, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = credentials.url.rstrip("/")
        self._timeout = timeout
        token = base64.b64encode(f"{credentials.email}:{credentials.api_token}".encode()).decode()
        self._auth = f"Basic {token}"

    def _url(self, path: str, query: dict[str, object] | None = None) -> str:
        url = self.base_url + path
        if query:
            url += "?" + urllib.parse.urlencode({k: v for k, v in query.items() if v is not None})
        return url

    def request(self, method: str, path: str, query: dict[str, object] | None = None, body: dict | None = None) -> str:
        url = self._url(path, query)
        headers = {"Authorization": self._auth, "Accept": "application/json"}
        data = None
        if body is not None:
            data = json.dumps(body).encode()
            headers["Content-Type"] = "application/json"
        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        logger.debug("%s %s", method, url)

        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as response:
                return response.read().decode()
        except urllib.error.HTTPError as exc:
            raise ApiError(self.service, exc.code, exc.read().decode(errors="replace")) from exc
        except urllib.error.URLError as exc:
            raise ConnectionError(f"{self.service} connection failed: {exc.reason}") from exc

    def get(self, path: str, **query: object) -> str:
        return self.request("GET", path, query=query)

    def post(self, path: str, body: dict) -> str:
        return self.request("POST", path, body=body)

    def put(self, path: str, body: dict) -> str:
        return self.request("PUT", path, body=body)
