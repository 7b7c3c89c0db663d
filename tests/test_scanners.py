from __future__ import annotations

import pathlib

from sdlc_mcp.tools.quality import CodeQualityCheckTool, detect_smells, estimate_complexity, quality_grade
from sdlc_mcp.tools.security import (
    SecurityScanTool,
    remediation_steps,
    risk_assessment,
    scan_source,
    score_grade,
    security_score,
)
from tests.conftest import SAMPLE_PROJECT

BRANCHY = "public class Branchy {\n" + "    public void run() {\n" + "        if (a) { x(); }\n" * 12 + "    }\n}\n"


def _titles(findings: list[dict]) -> list[str]:
    return [f["title"] for f in findings]


class TestQualityHeuristics:
    def test_complexity_counts_branch_keywords(self):
        assert estimate_complexity("if (a) {} for (;;) {} while (b) {} switch (c) {} catch (E e) {}") == 5

    def test_large_class(self):
        source = "public class Big {\n" + "    int x;\n" * 600 + "}\n"
        smells = detect_smells(pathlib.Path("Big.java"), source)
        assert "LargeClass" in [s["type"] for s in smells]
        assert "LongMethod" in [s["type"] for s in smells]

    def test_god_class(self):
        source = "class G {\n" + "".join(f"    public void m{i}() {{}}\n" for i in range(31)) + "}\n"
        smells = detect_smells(pathlib.Path("G.java"), source)
        god = [s for s in smells if s["type"] == "GodClass"]
        assert god and god[0]["methodCount"] == 31

    def test_magic_numbers_unless_constants(self):
        assert [s["type"] for s in detect_smells(pathlib.Path("M.java"), "int x = 42;\n")] == ["MagicNumbers"]
        assert detect_smells(pathlib.Path("M.java"), "static final int X = 42;\n") == []

    def test_grades(self):
        assert [quality_grade(n) for n in (0, 9, 24, 49, 50)] == ["A", "B", "C", "D", "F"]


class TestCodeQualityTool:
    def test_flags_complex_file(self, maven_project):
        root = maven_project(sources={"src/main/java/Branchy.java": BRANCHY})
        results = CodeQualityCheckTool().execute({"path": str(root)})["results"]
        assert results["complexityAnalysis"]["complexMethodCount"] == 1
        assert results["complexityAnalysis"]["maxComplexity"] == 12
        assert results["summary"]["qualityGrade"] == "B"

    def test_excludes_tests_by_default(self, maven_project):
        root = maven_project(sources={"src/test/java/BranchyTest.java": BRANCHY})
        results = CodeQualityCheckTool().execute({"path": str(root)})["results"]
        assert results["complexityAnalysis"]["filesAnalyzed"] == 0
        assert results["message"] == "No Java files found for analysis"
        results = CodeQualityCheckTool().execute({"path": str(root), "includeTests": True})["results"]
        assert results["complexityAnalysis"]["filesAnalyzed"] == 1

    def test_ignores_target(self, maven_project):
        root = maven_project(sources={"target/generated-sources/Gen.java": BRANCHY})
        results = CodeQualityCheckTool().execute({"path": str(root)})["results"]
        assert results["complexityAnalysis"]["filesAnalyzed"] == 0

    def test_severity_filters_smells(self, maven_project):
        root = maven_project(sources={"src/main/java/M.java": "class M { int x = 42; }\n"})
        low = CodeQualityCheckTool().execute({"path": str(root), "severity": "low"})["results"]
        assert [s["type"] for s in low["codeSmells"]] == ["MagicNumbers"]
        medium = CodeQualityCheckTool().execute({"path": str(root)})["results"]
        assert medium["codeSmells"] == []

    def test_clean_sample(self):
        results = CodeQualityCheckTool().execute({"path": str(SAMPLE_PROJECT)})["results"]
        assert results["summary"]["qualityGrade"] == "A"
        assert results["summary"]["recommendations"] == ["Code quality is excellent! No major issues found."]


class TestSecurityRules:
    def test_sql_injection_needs_concatenation(self):
        path = pathlib.Path("Repo.java")
        assert _titles(scan_source(path, 'stmt.executeQuery("SELECT * FROM t WHERE id = " + id);')) == [
            "SQL Injection Risk"
        ]
        assert scan_source(path, "ResultSet rs = ps.executeQuery();") == []

    def test_hardcoded_secret(self):
        findings = scan_source(pathlib.Path("C.java"), 'String name = "abc123";\nString api_key = "zzz";')
        assert _titles(findings) == ["Hardcoded Secret Detected"]
        assert findings[0]["severity"] == "CRITICAL"
        assert findings[0]["cwe"] == "CWE-798"
        assert findings[0]["location"] == "C.java:2"
        assert findings[0]["description"].endswith("api_key")

    def test_other_rules(self):
        source = "\n".join([
            "new ObjectInputStream(in).readObject();",
            "Runtime.getRuntime().exec(cmd);",
            "ctx.search(\"uid=\" + user, filter, controls); // DirContext",
            "factory.setValidating(false);",
            "out.print(request.getParameter(\"q\"));",
        ])
        findings = scan_source(pathlib.Path("X.java"), source)
        assert {f["cwe"] for f in findings} >= {"CWE-502", "CWE-78", "CWE-90", "CWE-611", "CWE-79"}

    def test_references_and_steps(self):
        findings = scan_source(pathlib.Path("R.java"), 'q = "SELECT " + x; stmt.execute(q);')
        assert findings[0]["references"][0] == "https://owasp.org/Top10/"
        assert any("SQL_Injection" in r for r in findings[0]["references"])
        assert remediation_steps("SQL Injection Risk")[0] == "1. Use PreparedStatement with parameterized queries"
        assert remediation_steps("Something else")[0] == "1. Review the OWASP Top 10 guidelines"

    def test_scoring(self):
        findings = [{"severity": "CRITICAL"}, {"severity": "HIGH"}, {"severity": "MEDIUM"}, {"severity": "LOW"}]
        assert security_score(findings) == 60
        assert [score_grade(s) for s in (95, 85, 75, 65, 10)] == ["A", "B", "C", "D", "F"]
        assert risk_assessment(findings)["overallRiskLevel"] == "CRITICAL"
        assert risk_assessment([{"severity": "HIGH"}])["overallRiskLevel"] == "MEDIUM"
        assert risk_assessment([])["overallRiskLevel"] == "LOW"


class TestSecurityScanTool:
    def test_full_scan_of_sample(self):
        results = SecurityScanTool().execute({"path": str(SAMPLE_PROJECT)})["results"]
        deps = results["dependencyVulnerabilities"]
        assert _titles(deps) == ["CVE-2021-44228 - Log4Shell Vulnerability"]
        assert deps[0]["location"] == "org.apache.logging.log4j:log4j-core:2.14.1"
        titles = _titles(results["allFindings"])
        assert "Hardcoded Secret Detected" in titles
        assert "SQL Injection Risk" in titles
        assert results["riskAssessment"]["requiresImmediateAction"] is True
        assert all("remediationSteps" in f for f in results["allFindings"])
        assert results["summary"]["scoreGrade"] == "F"

    def test_dependencies_only(self):
        results = SecurityScanTool().execute({"path": str(SAMPLE_PROJECT), "scanType": "dependencies-only"})["results"]
        assert "codeVulnerabilities" not in results
        assert len(results["allFindings"]) == 1

    def test_severity_threshold(self):
        results = SecurityScanTool().execute({
            "path": str(SAMPLE_PROJECT), "scanType": "code-only", "severity": "CRITICAL",
        })["results"]
        assert {f["severity"] for f in results["allFindings"]} == {"CRITICAL"}

    def test_exclude_patterns(self):
        results = SecurityScanTool().execute({
            "path": str(SAMPLE_PROJECT), "scanType": "code-only", "excludePatterns": "*/core/*, *Greeting.java",
        })["results"]
        assert results["codeVulnerabilities"] == []
        assert results["summary"]["recommendations"][0].startswith("Great!")

    def test_without_remediations(self):
        results = SecurityScanTool().execute({
            "path": str(SAMPLE_PROJECT), "includeRemediations": False,
        })["results"]
        assert all("remediationSteps" not in f for f in results["allFindings"])

    def test_remediation_plan_orders_by_severity(self):
        results = SecurityScanTool().execute({"path": str(SAMPLE_PROJECT)})["results"]
        plan = results["remediationPlan"]
        assert [p["priority"] for p in plan] == list(range(1, len(plan) + 1))
        assert plan[-1]["vulnerability"] == "SQL Injection Risk"
