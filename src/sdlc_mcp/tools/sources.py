from __future__ import annotations

import fnmatch
import pathlib
from collections.abc import Iterable


def project_dir(path: str | None) -> pathlib.Path:
    if not path:
        raise ValueError("path parameter is required")
    directory = pathlib.Path(path).expanduser()
    if not directory.exists():
        raise FileNotFoundError(f"Project path does not exist: {path}")
    return directory


def require_pom(directory: pathlib.Path) -> pathlib.Path:
    pom = directory / "pom.xml"
    if not pom.is_file():
        raise FileNotFoundError(f"No pom.xml found in: {directory}")
    return pom


def find_java_files(
    root: pathlib.Path,
    include_tests: bool = True,
    exclude: Iterable[str] = (),
) -> list[pathlib.Path]:
    """Java sources under ``root`` outside ``target/`` directories.

    ``exclude`` holds glob patterns matched against the full path.
    """
    patterns = [p for p in exclude if p]
    found: list[pathlib.Path] = []
    for path in sorted(root.rglob("*.java")):
        if not path.is_file():
            continue
        parts = path.relative_to(root).parts[:-1]
        if "target" in parts:
            continue
        if not include_tests and "test" in parts:
            continue
        if any(fnmatch.fnmatch(str(path), pat) for pat in patterns):
            continue
        found.append(path)
    return found


def count_java_files(directory: pathlib.Path) -> int:
    return sum(1 for p in directory.rglob("*.java") if p.is_file())
