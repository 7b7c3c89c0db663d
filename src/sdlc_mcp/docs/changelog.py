from __future__ import annotations

import logging
import pathlib
import re

import git
import git.exc

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMMITS = 100

CATEGORIES = (
    "Features",
    "Bug Fixes",
    "Performance",
    "Documentation",
    "Refactoring",
    "Testing",
    "Build",
    "Other",
)

# First match wins: (category, message prefixes, substrings)
_RULES = (
    ("Features", ("feat:", "feature:"), ("add ",)),
    ("Bug Fixes", ("fix:",), ("bug", "issue")),
    ("Performance", ("perf:",), ("performance", "optimize")),
    ("Documentation", ("docs:",), ("documentation", "readme")),
    ("Refactoring", ("refactor:",), ("refactor",)),
    ("Testing", ("test:",), ("test",)),
    ("Build", ("build:", "chore:"), ("dependency",)),
)

_CONVENTIONAL_PREFIX = re.compile(r"^(feat|fix|docs|style|refactor|perf|test|build|ci|chore)(\([^)]+\))?:\s*")


def categorize(message: str) -> str:
    lower = message.lower()
    for category, prefixes, needles in _RULES:
        if lower.startswith(prefixes) or any(n in lower for n in needles):
            return category
    return "Other"


def clean_message(message: str) -> str:
    message = _CONVENTIONAL_PREFIX.sub("", message, count=1)
    return message[:1].upper() + message[1:]


def recent_commits(directory: pathlib.Path, max_commits: int = DEFAULT_MAX_COMMITS) -> list[git.Commit]:
    if not (directory / ".git").exists():
        raise ValueError(f"No Git repository found at: {directory}")
    try:
        repo = git.Repo(directory)
    except git.exc.InvalidGitRepositoryError as exc:
        raise ValueError(f"No Git repository found at: {directory}") from exc
    try:
        return list(repo.iter_commits(max_count=max_commits))
    except ValueError:
        # No HEAD yet
        logger.debug("Repository at %s has no commits", directory)
        return []
    except git.exc.GitCommandError as exc:
        raise ValueError(f"Could not read Git history: {exc}") from exc
    finally:
        repo.close()


def group_commits(commits: list[git.Commit]) -> dict[str, list[git.Commit]]:
    grouped: dict[str, list[git.Commit]] = {c: [] for c in CATEGORIES}
    for commit in commits:
        grouped[categorize(str(commit.summary))].append(commit)
    return {category: items for category, items in grouped.items() if items}


def generate_changelog(directory: pathlib.Path, max_commits: int = DEFAULT_MAX_COMMITS) -> str:
    grouped = group_commits(recent_commits(directory, max_commits))
    lines = [
        "# Changelog",
        "",
        "All notable changes to this project will be documented in this file.",
        "",
        "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),",
        "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).",
        "",
        "## [Unreleased]",
        "",
    ]
    for category, commits in grouped.items():
        lines += [f"### {category}", ""]
        lines += [f"- {clean_message(str(c.summary))} ([{c.hexsha[:7]}])" for c in commits]
        lines.append("")

    lines += ["## [Version] - YYYY-MM-DD", ""]
    for heading, placeholder in (
        ("Added", "New features"),
        ("Changed", "Changes in existing functionality"),
        ("Deprecated", "Soon-to-be removed features"),
        ("Removed", "Removed features"),
        ("Fixed", "Bug fixes"),
        ("Security", "Security fixes"),
    ):
        lines += [f"### {heading}", f"- {placeholder}", ""]
    return "\n".join(lines)
