from __future__ import annotations

import re

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


class UriTemplate:
    """A resource URI template such as ``cache://analysis/{projectPath}``.

    Each ``{name}`` placeholder matches one or more of any character,
    slashes included. Literal text must match verbatim and the whole
    candidate URI must be consumed.
    """

    def __init__(self, template: str) -> None:
        self.template = template
        self.names: list[str] = _PLACEHOLDER.findall(template)
        self._pattern = re.compile(self._compile(template))

    @staticmethod
    def _compile(template: str) -> str:
        parts: list[str] = []
        pos = 0
        for m in _PLACEHOLDER.finditer(template):
            parts.append(re.escape(template[pos:m.start()]))
            parts.append("(.+)")
            pos = m.end()
        parts.append(re.escape(template[pos:]))
        return "".join(parts)

    def match(self, uri: str) -> dict[str, str] | None:
        """Return placeholder values for ``uri``, or None if it does not conform.

        A template without placeholders that matches returns an empty dict.
        When a name repeats, the last occurrence's value is kept.
        """
        m = self._pattern.fullmatch(uri)
        if m is None:
            return None
        return dict(zip(self.names, m.groups()))

    def __repr__(self) -> str:
        return f"UriTemplate({self.template!r})"
