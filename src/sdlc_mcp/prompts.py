from __future__ import annotations

from sdlc_mcp.capabilities import Prompt, PromptArgument

_WORKFLOW = """\
# SDLC Workflow: {title}

Project: {project}
Task: {task}

## Phase 1: Analysis (Analyst Persona)

**Objective:** Understand the codebase and assess impact

**Steps:**
1. Run `analyze-maven-project` on {project}
2. Run `analyze-dependencies` to understand dependency structure
3. Run `code-quality-check` to assess current code quality
4. Analyze the codebase structure relevant to: "{task}"

**Deliverable:** Analysis report covering:
- Current state of relevant modules
- Dependencies and potential conflicts
- Impact assessment (files affected, complexity)
- Risks and considerations

---

## Phase 2: Architecture (Architect Persona)

**Objective:** Design the solution

**Steps:**
1. Review the analysis report from Phase 1
2. Run `suggest-implementation` for architectural guidance
3. Design the solution following existing patterns
4. Identify which modules/packages will be modified

**Deliverable:** Architecture document covering:
- Solution design and approach
- Module/class structure changes
- Integration points
- Trade-offs and alternatives considered

---

## Phase 3: Implementation (Developer Persona)

**Objective:** {implementation_objective}

**Steps:**
1. Run `implement-feature` (for features) or `fix-bug` (for bugs)
2. Follow the architecture design from Phase 2
3. Write clean, maintainable code following project conventions
4. Add proper error handling and logging
5. Run `run-maven-command` with `compile` to verify the build

**Deliverable:** Implementation including:
- Source code changes
- Proper JavaDoc documentation
- Inline comments for complex logic
- Error handling

---

## Phase 4: Testing (Tester Persona)

**Objective:** Ensure comprehensive test coverage

**Steps:**
1. Run `generate-tests` for new/modified classes
2. Write integration tests
3. Test edge cases and error conditions
4. Run `run-maven-command` with `test` and then `jacoco:report`

**Deliverable:** Test suite including:
- Unit tests (target: 80%+ coverage)
- Integration tests
- Edge case tests
- Test documentation

---

## Phase 5: Review (Reviewer Persona)

**Objective:** Ensure code quality and best practices

**Steps:**
1. Run `code-quality-check` for static analysis
2. Run `security-scan` for vulnerability detection
3. Review code for:
   - Adherence to SOLID principles
   - Proper error handling
   - Performance considerations
   - Security best practices

**Deliverable:** Review report covering:
- Code quality assessment
- Security findings
- Performance concerns
- Recommendations for improvement

---

## Phase 6: Documentation (Documentor Persona)

**Objective:** Create comprehensive documentation

**Steps:**
1. Run `generate-documentation` for JavaDoc coverage and API docs
2. Update README and CHANGELOG with `generate-documentation` if needed
3. Publish design notes with `confluence-create-page`
4. Record the change on the tracking issue (`jira-get-issue`)

**Deliverable:** Documentation including:
- Updated JavaDoc
- README updates
- API documentation
- Changelog entry

---

## Final Checklist

Before considering the task complete, verify:

- [ ] All phases completed
- [ ] Code quality check passes
- [ ] Security scan shows no critical issues
- [ ] Tests pass with 80%+ coverage
- [ ] Documentation is complete and accurate
- [ ] Code follows project conventions
- [ ] No breaking changes (or documented if unavoidable)

**Estimated Timeline:**
- Analysis: 30-60 minutes
- Architecture: 30-60 minutes
- Implementation: 2-4 hours
- Testing: 1-2 hours
- Review: 30 minutes
- Documentation: 30 minutes

**Total: 5-9 hours** for a complete, production-ready implementation
"""


class SdlcWorkflowPrompt(Prompt):
    name = "sdlc-full-workflow"
    description = (
        "Complete SDLC workflow from analysis through documentation "
        "for implementing a feature or fixing a bug"
    )
    arguments = (
        PromptArgument("projectPath", "Path to the Maven project", required=True),
        PromptArgument("task", "Feature to implement or bug to fix", required=True),
        PromptArgument("type", "Task type: 'feature' or 'bugfix'"),
    )

    def render(self, arguments: dict) -> str:
        project = self.require(arguments, "projectPath")
        task = self.require(arguments, "task")
        bugfix = arguments.get("type", "feature") == "bugfix"
        return _WORKFLOW.format(
            title="Bug Fix" if bugfix else "Feature Implementation",
            project=project,
            task=task,
            implementation_objective=(
                "Fix the defect with a minimal, well-tested change" if bugfix
                else "Implement the solution with clean code"
            ),
        )
