from __future__ import annotations

import logging
import os
import pathlib
from collections.abc import Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

PROPERTIES_FILE = "application.properties"


def default_search_path() -> list[pathlib.Path]:
    return [
        pathlib.Path(PROPERTIES_FILE),
        pathlib.Path.home() / ".sdlc-tools" / PROPERTIES_FILE,
    ]


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class Credentials:
    url: str
    email: str
    api_token: str


# (label, env var, property, tool argument)
_JIRA_KEYS = {
    "url": ("JIRA URL", "JIRA_URL", "jira.url", "jiraUrl"),
    "email": ("JIRA email", "JIRA_EMAIL", "jira.email", "email"),
    "api_token": ("JIRA API token", "JIRA_API_TOKEN", "jira.api.token", "apiToken"),
}
_CONFLUENCE_KEYS = {
    "url": ("Confluence URL", "CONFLUENCE_URL", "confluence.url", "confluenceUrl"),
    "email": ("Confluence email", "CONFLUENCE_EMAIL", "confluence.email", "email"),
    "api_token": ("Confluence API token", "CONFLUENCE_API_TOKEN", "confluence.api.token", "apiToken"),
}


def parse_properties(text: str) -> dict[str, str]:
    """Parse Java-style ``key=value`` / ``key: value`` lines."""
    props: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        seps = [i for i in (line.find("="), line.find(":")) if i != -1]
        if not seps:
            props[line] = ""
            continue
        idx = min(seps)
        props[line[:idx].strip()] = line[idx + 1:].strip()
    return props


@dataclass
class Settings:
    """Integration settings. Environment variables win over the properties file."""

    properties: dict[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=dict)
    source: pathlib.Path | None = None

    @classmethod
    def load(
        cls,
        path: str | os.PathLike | None = None,
        environ: Mapping[str, str] | None = None,
        search_path: list[pathlib.Path] | None = None,
    ) -> Settings:
        env = os.environ if environ is None else environ
        if path is not None:
            candidates = [pathlib.Path(path)]
        else:
            candidates = default_search_path() if search_path is None else search_path

        for candidate in candidates:
            if candidate.is_file():
                logger.info("Loading configuration from %s", candidate)
                props = parse_properties(candidate.read_text(encoding="utf-8"))
                return cls(properties=props, environ=env, source=candidate)

        if path is not None:
            raise ConfigurationError(f"Configuration file not found: {path}")
        logger.debug("No %s found, using environment only", PROPERTIES_FILE)
        return cls(environ=env)

    def get(self, env_var: str, prop: str) -> str | None:
        value = self.environ.get(env_var)
        if value:
            return value
        value = self.properties.get(prop)
        return value or None

    def _resolve(self, keys: dict[str, tuple[str, str, str, str]], overrides: dict[str, str | None]) -> Credentials:
        resolved: dict[str, str] = {}
        for attr, (label, env_var, prop, argument) in keys.items():
            value = overrides.get(attr) or self.get(env_var, prop)
            if not value:
                raise ConfigurationError(
                    f"{label} not configured. Please set {env_var} environment variable, "
                    f"add {prop} to {PROPERTIES_FILE}, or provide {argument} parameter."
                )
            resolved[attr] = value
        return Credentials(**resolved)

    def jira_credentials(
        self, url: str | None = None, email: str | None = None, api_token: str | None = None
    ) -> Credentials:
        return self._resolve(_JIRA_KEYS, {"url": url, "email": email, "api_token": api_token})

    def confluence_credentials(
        self, url: str | None = None, email: str | None = None, api_token: str | None = None
    ) -> Credentials:
        return self._resolve(_CONFLUENCE_KEYS, {"url": url, "email": email, "api_token": api_token})

    def _complete(self, keys: dict[str, tuple[str, str, str, str]]) -> bool:
        return all(self.get(env_var, prop) for _, env_var, prop, _ in keys.values())

    def has_jira(self) -> bool:
        return self._complete(_JIRA_KEYS)

    def has_confluence(self) -> bool:
        return self._complete(_CONFLUENCE_KEYS)

    def log_status(self) -> None:
        if self.has_jira():
            logger.info("JIRA configured: %s", self.get("JIRA_URL", "jira.url"))
        else:
            logger.info("JIRA not configured (credentials must be passed as tool arguments)")
        if self.has_confluence():
            logger.info("Confluence configured: %s", self.get("CONFLUENCE_URL", "confluence.url"))
        else:
            logger.info("Confluence not configured (credentials must be passed as tool arguments)")
        if not self.has_jira() and not self.has_confluence():
            logger.warning(
                "No integrations configured. Set JIRA_* / CONFLUENCE_* environment variables "
                "or create %s", PROPERTIES_FILE,
            )
