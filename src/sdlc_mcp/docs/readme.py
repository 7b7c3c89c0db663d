from __future__ import annotations

import pathlib

from sdlc_mcp.tools.pom import Pom, read_pom
from sdlc_mcp.tools.sources import require_pom

DEFAULT_JAVA_VERSION = "17"


def java_version(pom: Pom) -> str:
    return (
        pom.properties.get("maven.compiler.source")
        or pom.properties.get("maven.compiler.target")
        or pom.properties.get("maven.compiler.release")
        or DEFAULT_JAVA_VERSION
    )


def generate_readme(directory: pathlib.Path) -> str:
    """Render a README.md skeleton from the project's root pom."""
    pom = read_pom(require_pom(directory))
    name = pom.name or pom.artifact_id or directory.name
    version = java_version(pom)
    has_tests = (directory / "src" / "test" / "java").is_dir()
    has_docker = (directory / "Dockerfile").is_file()

    lines = [f"# {name}", ""]
    lines += [pom.description or "TODO: Add project description", ""]
    lines += [
        "[![Build Status](https://img.shields.io/badge/build-passing-brightgreen)](#) "
        "[![License](https://img.shields.io/badge/license-MIT-blue.svg)](LICENSE)",
        "",
    ]

    lines += ["## Table of Contents", ""]
    toc = ["Overview", "Features", "Getting Started", "Usage", "Building"]
    if has_tests:
        toc.append("Testing")
    if has_docker:
        toc.append("Docker")
    toc += ["Contributing", "License"]
    lines += [f"- [{title}](#{title.lower().replace(' ', '-')})" for title in toc]
    lines.append("")

    lines += [
        "## Overview",
        "",
        f"This project is built with Maven and uses Java {version}.",
        "",
        "**Project Coordinates:**",
        "```xml",
        "<dependency>",
        f"    <groupId>{pom.effective_group_id}</groupId>",
        f"    <artifactId>{pom.artifact_id}</artifactId>",
        f"    <version>{pom.effective_version}</version>",
        "</dependency>",
        "```",
        "",
        "## Features",
        "",
        "- Feature 1: TODO",
        "- Feature 2: TODO",
        "- Feature 3: TODO",
        "",
        "## Getting Started",
        "",
        "### Prerequisites",
        "",
        f"- Java {version} or higher",
        "- Maven 3.6+",
        "",
        "### Installation",
        "",
        "```bash",
        "git clone <repository-url>",
        f"cd {directory.resolve().name}",
        "mvn clean install",
        "```",
        "",
        "## Usage",
        "",
        "```java",
        "// TODO: Add usage examples",
        "```",
        "",
        "## Building",
        "",
        "```bash",
        "# Compile",
        "mvn clean compile",
        "",
        "# Package",
        "mvn clean package",
        "",
        "# Install to local repository",
        "mvn clean install",
        "```",
        "",
    ]

    if has_tests:
        lines += [
            "## Testing",
            "",
            "```bash",
            "# Run all tests",
            "mvn test",
            "",
            "# Run with coverage",
            "mvn clean verify",
            "",
            "# View coverage report",
            "open target/site/jacoco/index.html",
            "```",
            "",
        ]

    if has_docker:
        lines += [
            "## Docker",
            "",
            "```bash",
            "# Build image",
            f"docker build -t {pom.artifact_id} .",
            "",
            "# Run container",
            f"docker run -p 8080:8080 {pom.artifact_id}",
            "```",
            "",
        ]

    lines += [
        "## Contributing",
        "",
        "1. Fork the repository",
        "2. Create your feature branch (`git checkout -b feature/amazing-feature`)",
        "3. Commit your changes (`git commit -m 'Add some amazing feature'`)",
        "4. Push to the branch (`git push origin feature/amazing-feature`)",
        "5. Open a Pull Request",
        "",
        "## License",
        "",
    ]
    if pom.licenses and pom.licenses[0]:
        lines.append(f"This project is licensed under the {pom.licenses[0]} - see the LICENSE file for details.")
    else:
        lines.append("TODO: Add license information")
    return "\n".join(lines) + "\n"
