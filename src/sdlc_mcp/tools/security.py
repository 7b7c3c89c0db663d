"""Regex-driven security scan over Java sources and declared dependencies."""
from __future__ import annotations

import logging
import pathlib
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sdlc_mcp.capabilities import Tool
from sdlc_mcp.tools.pom import read_pom
from sdlc_mcp.tools.sources import find_java_files, project_dir

logger = logging.getLogger(__name__)

SEVERITY_LEVELS = {"CRITICAL": 4, "HIGH": 3, "MEDIUM": 2, "LOW": 1}
SCAN_TYPES = ("full", "dependencies-only", "code-only")

_SQL = re.compile(
    r"Statement|PreparedStatement|ResultSet|executeQuery|executeUpdate|execute\("
    r"|\"\s*\+\s*[a-zA-Z_]|String\.format.*SELECT|String\.format.*UPDATE"
)
_XSS = re.compile(r"innerHTML|document\.write|eval\(|response\.getWriter|out\.print|getParameter|getElementById")
_SECRET = re.compile(
    r"(password|apikey|api_key|secret|token|pwd|passwd|credential)\s*=\s*[\"']([^\"']+)[\"']",
    re.IGNORECASE,
)
_WEAK_CRYPTO = re.compile(r"MD5|MD2|SHA1|DES|RC4|Random\(\)|Math\.random\(\)|SecureRandom\(\s*\)", re.IGNORECASE)
_DESERIALIZATION = re.compile(r"readObject|readObjectNoData|readResolve|ObjectInputStream|readField|newInstance")


@dataclass(frozen=True)
class Rule:
    severity: str
    title: str
    description: str
    remediation: str
    cwe: str
    applies: Callable[[str], re.Match | bool | None]


RULES = (
    Rule(
        "HIGH", "SQL Injection Risk",
        "Potential SQL injection vulnerability detected. String concatenation with user input in SQL query.",
        "Use parameterized queries or PreparedStatement with placeholders instead of string concatenation.",
        "CWE-89",
        lambda line: _SQL.search(line) and ("+" in line or "String.format" in line),
    ),
    Rule(
        "CRITICAL", "Hardcoded Secret Detected",
        "Found hardcoded secret in source code",
        "Move secrets to environment variables, configuration files, or secret management systems. "
        "Never commit secrets to source control.",
        "CWE-798",
        _SECRET.search,
    ),
    Rule(
        "HIGH", "Cross-Site Scripting (XSS) Risk",
        "Potential XSS vulnerability: user input is used without proper sanitization.",
        "Sanitize all user inputs using ESAPI.encoder() or similar libraries. "
        "Use Content Security Policy (CSP) headers.",
        "CWE-79",
        lambda line: _XSS.search(line) and "getParameter" in line,
    ),
    Rule(
        "HIGH", "Weak Cryptography Algorithm",
        "Use of weak or deprecated cryptographic algorithm detected.",
        "Use strong algorithms: SHA-256 or SHA-3 for hashing, AES-256 for encryption, "
        "SecureRandom for key generation.",
        "CWE-327",
        _WEAK_CRYPTO.search,
    ),
    Rule(
        "CRITICAL", "Insecure Deserialization",
        "ObjectInputStream is used to deserialize untrusted data, which can lead to RCE attacks.",
        "Avoid deserializing untrusted data. Use JSON deserialization with strict type validation "
        "or implement custom deserialization with whitelisting.",
        "CWE-502",
        lambda line: _DESERIALIZATION.search(line) and "ObjectInputStream" in line,
    ),
    Rule(
        "HIGH", "Command Injection Risk",
        "Direct execution of runtime commands detected.",
        "Avoid using Runtime.exec() or ProcessBuilder with user input. "
        "Use whitelisting and parameterized command execution.",
        "CWE-78",
        lambda line: "Runtime.getRuntime().exec" in line or "ProcessBuilder" in line,
    ),
    Rule(
        "HIGH", "LDAP Injection Risk",
        "Potential LDAP injection vulnerability detected.",
        "Use parameterized LDAP queries or escape special characters in LDAP filters.",
        "CWE-90",
        lambda line: "DirContext" in line and "search" in line and "+" in line,
    ),
    Rule(
        "CRITICAL", "XML External Entity (XXE) Attack Risk",
        "XML parsing with disabled security features or entity expansion enabled.",
        "Disable external entity processing and DTD processing in XML parsers.",
        "CWE-611",
        lambda line: "setValidating(false)" in line or "XXE" in line or "expandEntityReferences=true" in line,
    ),
)

_REFERENCES = {
    "SQL Injection": "https://cheatsheetseries.owasp.org/cheatsheets/SQL_Injection_Prevention_Cheat_Sheet.html",
    "XSS": "https://cheatsheetseries.owasp.org/cheatsheets/Cross_Site_Scripting_Prevention_Cheat_Sheet.html",
    "Cryptography": "https://cheatsheetseries.owasp.org/cheatsheets/Cryptographic_Storage_Cheat_Sheet.html",
}

_REMEDIATION_STEPS = {
    "SQL Injection": [
        "Use PreparedStatement with parameterized queries",
        "Implement input validation and whitelisting",
        "Use ORM frameworks like Hibernate",
        "Apply least privilege principle to database accounts",
        "Use Web Application Firewall (WAF) rules",
    ],
    "XSS": [
        "Sanitize all user inputs using ESAPI or a similar encoder",
        "Use Content Security Policy (CSP) headers",
        "Encode output data to prevent script injection",
        "Use template engines with automatic escaping",
        "Validate and filter user input on server-side",
    ],
    "Hardcoded Secret": [
        "Remove the secret from source code immediately",
        "Rotate the exposed credential",
        "Use environment variables for configuration",
        "Implement secrets management (HashiCorp Vault, AWS Secrets Manager)",
        "Scan git history and remove from all commits",
    ],
    "Weak Cryptography": [
        "Replace with SHA-256 or SHA-3 for hashing",
        "Use AES-256 for symmetric encryption",
        "Use RSA-2048 or ECDSA for asymmetric encryption",
        "Use SecureRandom for key generation",
        "Review and update all cryptographic implementations",
    ],
    "Deserialization": [
        "Avoid deserializing untrusted data",
        "Use JSON deserialization with strict type validation",
        "Implement whitelist of allowed classes",
        "Follow the OWASP Deserialization cheat sheet",
        "Add deserialization filters",
    ],
}
_GENERIC_STEPS = [
    "Review the OWASP Top 10 guidelines",
    "Implement secure coding practices",
    "Add unit and integration tests",
    "Perform security code review",
    "Run automated security scanning tools regularly",
]


def references(title: str) -> list[str]:
    refs = ["https://owasp.org/Top10/"]
    refs += [url for key, url in _REFERENCES.items() if key in title]
    return refs


def remediation_steps(title: str) -> list[str]:
    steps = next((s for key, s in _REMEDIATION_STEPS.items() if key in title), _GENERIC_STEPS)
    return [f"{i}. {step}" for i, step in enumerate(steps, 1)]


def finding(severity: str, title: str, description: str, remediation: str, location: str, cwe: str) -> dict:
    return {
        "severity": severity,
        "title": title,
        "description": description,
        "remediation": remediation,
        "location": location,
        "cwe": cwe,
        "references": references(title),
    }


def scan_source(path: pathlib.Path, source: str) -> list[dict]:
    findings: list[dict] = []
    for lineno, line in enumerate(source.splitlines(), 1):
        for rule in RULES:
            match = rule.applies(line)
            if not match:
                continue
            description = rule.description
            if rule.cwe == "CWE-798" and isinstance(match, re.Match):
                description = f"{description}: {match.group(1)}"
            findings.append(finding(rule.severity, rule.title, description, rule.remediation,
                                    f"{path}:{lineno}", rule.cwe))
    return findings


def scan_dependencies(directory: pathlib.Path) -> list[dict]:
    pom_path = directory / "pom.xml"
    if not pom_path.is_file():
        return []
    try:
        pom = read_pom(pom_path)
    except ValueError as exc:
        logger.warning("Could not scan dependencies: %s", exc)
        return []

    findings: list[dict] = []
    for dep in pom.dependencies:
        if (dep.group_id == "org.apache.logging.log4j" and dep.artifact_id == "log4j-core"
                and dep.version and dep.version.startswith("2.1")):
            f = finding(
                "CRITICAL",
                "CVE-2021-44228 - Log4Shell Vulnerability",
                "Apache Log4j versions 2.0-beta9 through 2.15.0 contain a critical vulnerability",
                "Upgrade Log4j to version 2.16.0 or later",
                dep.coordinates,
                "CWE-917",
            )
            f["type"] = "DEPENDENCY_VULNERABILITY"
            f["file"] = str(pom_path)
            findings.append(f)
    return findings


def _counts(findings: list[dict]) -> dict[str, int]:
    counts = dict.fromkeys(SEVERITY_LEVELS, 0)
    for f in findings:
        counts[f["severity"]] = counts.get(f["severity"], 0) + 1
    return counts


def risk_assessment(findings: list[dict]) -> dict:
    c = _counts(findings)
    if c["CRITICAL"]:
        level = "CRITICAL"
    elif c["HIGH"] > 2:
        level = "HIGH"
    elif c["HIGH"] or c["MEDIUM"] > 5:
        level = "MEDIUM"
    else:
        level = "LOW"
    return {
        "criticalFindings": c["CRITICAL"],
        "highFindings": c["HIGH"],
        "mediumFindings": c["MEDIUM"],
        "lowFindings": c["LOW"],
        "totalFindings": len(findings),
        "overallRiskLevel": level,
        "requiresImmediateAction": c["CRITICAL"] > 0,
    }


def remediation_plan(findings: list[dict]) -> list[dict]:
    grouped: dict[str, list[dict]] = {}
    for f in sorted(findings, key=lambda f: -SEVERITY_LEVELS[f["severity"]]):
        grouped.setdefault(f["title"], []).append(f)
    return [
        {
            "priority": priority,
            "vulnerability": title,
            "occurrences": len(items),
            "locations": [f["location"] for f in items],
        }
        for priority, (title, items) in enumerate(grouped.items(), 1)
    ]


def security_score(findings: list[dict]) -> int:
    c = _counts(findings)
    return max(0, 100 - 25 * c["CRITICAL"] - 10 * c["HIGH"] - 5 * c["MEDIUM"])


def score_grade(score: int) -> str:
    for threshold, grade in ((90, "A"), (80, "B"), (70, "C"), (60, "D")):
        if score >= threshold:
            return grade
    return "F"


def summary(findings: list[dict], score: int) -> dict:
    if not findings:
        recs = ["Great! No security vulnerabilities found. Maintain security practices."]
    elif score >= 80:
        recs = [
            "Address the identified findings to improve security posture",
            "Implement security testing in your CI/CD pipeline",
        ]
    elif score >= 60:
        recs = [
            "Significant security issues detected. Prioritize remediation",
            "Schedule security review and training for the team",
        ]
    else:
        recs = [
            "CRITICAL SECURITY ISSUES DETECTED. Immediate action required",
            "Pause deployment until critical issues are resolved",
            "Perform comprehensive security audit",
        ]
    return {
        "totalFindings": len(findings),
        "securityScore": score,
        "scoreGrade": score_grade(score),
        "recommendations": recs,
    }


class SecurityScanTool(Tool):
    name = "security-scan"
    description = (
        "Performs security vulnerability scanning: known-vulnerable dependencies, SQL injection, XSS, "
        "hardcoded secrets, insecure deserialization, weak cryptography, command/LDAP injection and XXE. "
        "Returns findings with CWE references, remediation steps and a security score."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the Maven project or module"},
            "scanType": {
                "type": "string",
                "description": "Type of scan: full, dependencies-only, code-only (default: full)",
                "enum": list(SCAN_TYPES),
            },
            "severity": {
                "type": "string",
                "description": "Minimum severity to report: CRITICAL, HIGH, MEDIUM, LOW (default: MEDIUM)",
                "enum": list(SEVERITY_LEVELS),
            },
            "includeRemediations": {
                "type": "boolean",
                "description": "Include remediation recommendations (default: true)",
            },
            "excludePatterns": {
                "type": "string",
                "description": "Comma-separated glob patterns to exclude from scan (optional)",
            },
        },
        "required": ["path"],
    }

    def execute(self, arguments: dict) -> dict:
        directory = project_dir(arguments.get("path"))
        scan_type = arguments.get("scanType", "full")
        severity = arguments.get("severity", "MEDIUM")
        include_remediations = arguments.get("includeRemediations", True)
        exclude = [p.strip() for p in arguments.get("excludePatterns", "").split(",") if p.strip()]
        logger.info("Starting security scan for %s (type: %s, severity: %s)", directory, scan_type, severity)

        results: dict = {
            "projectPath": str(directory),
            "scanType": scan_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        findings: list[dict] = []
        if scan_type in ("full", "dependencies-only"):
            deps = scan_dependencies(directory)
            results["dependencyVulnerabilities"] = deps
            findings += deps
        if scan_type in ("full", "code-only"):
            code: list[dict] = []
            for path in find_java_files(directory, exclude=exclude):
                try:
                    code += scan_source(path, path.read_text(encoding="utf-8", errors="replace"))
                except OSError as exc:
                    logger.warning("Error reading %s: %s", path, exc)
            results["codeVulnerabilities"] = code
            findings += code

        min_level = SEVERITY_LEVELS[severity]
        reported = [f for f in findings if SEVERITY_LEVELS[f["severity"]] >= min_level]
        if include_remediations:
            for f in reported:
                f["remediationSteps"] = remediation_steps(f["title"])

        score = security_score(reported)
        results["allFindings"] = reported
        results["riskAssessment"] = risk_assessment(reported)
        results["remediationPlan"] = remediation_plan(reported)
        results["securityScore"] = score
        results["summary"] = summary(reported, score)
        return {"success": True, "results": results}
