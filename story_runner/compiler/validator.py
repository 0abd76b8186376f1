"""Static analysis for stories. Catches issues before running them."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from story_runner.types import Scenario, Story

_PARAMETER_REF = re.compile(r"<(\w+)>")


class ValidationError:
    def __init__(self, level: str, message: str, scenario: str | None = None):
        self.level = level  # "error" | "warning"
        self.message = message
        self.scenario = scenario

    def __str__(self):
        prefix = f"[{self.scenario}] " if self.scenario else ""
        return f"{self.level.upper()}: {prefix}{self.message}"


def validate_story(story: Story) -> list[ValidationError]:
    """Run all static checks on a story."""
    errors: list[ValidationError] = []

    if not story.scenarios:
        errors.append(ValidationError("warning", "Story has no scenarios"))
        return errors

    errors.extend(_check_titles(story))
    for scenario in story.scenarios:
        errors.extend(_check_steps(scenario))
        errors.extend(_check_parameters(story, scenario))
        errors.extend(_check_anchors(scenario))

    return errors


def format_errors(errors: list[ValidationError]) -> str:
    if not errors:
        return ""
    lines = []
    errs = [e for e in errors if e.level == "error"]
    warns = [e for e in errors if e.level == "warning"]
    if errs:
        lines.append(f"  {len(errs)} error(s):")
        for e in errs:
            lines.append(f"    ✗ {e}")
    if warns:
        lines.append(f"  {len(warns)} warning(s):")
        for e in warns:
            lines.append(f"    ⚠ {e}")
    return "\n".join(lines)


# ─── Checks ───

def _check_titles(story: Story) -> list[ValidationError]:
    errors: list[ValidationError] = []
    seen: set[str] = set()
    for scenario in story.scenarios:
        if scenario.title and scenario.title in seen:
            errors.append(ValidationError("warning", "Duplicate scenario title", scenario.title))
        seen.add(scenario.title)
    return errors


def _check_steps(scenario: Scenario) -> list[ValidationError]:
    if scenario.steps or scenario.given_stories.paths:
        return []
    return [ValidationError("warning", "Scenario has no steps", scenario.title or None)]


def _check_parameters(story: Story, scenario: Scenario) -> list[ValidationError]:
    """Every <name> in a step should be supplied by the examples table or by meta."""
    known = set(scenario.examples.headers)
    known |= set(scenario.meta.inherit_from(story.meta).property_names())
    errors: list[ValidationError] = []
    for step in scenario.steps:
        for name in _PARAMETER_REF.findall(step):
            if name not in known:
                errors.append(ValidationError(
                    "warning", f"Parameter <{name}> has no value in examples or meta", scenario.title or None
                ))
    return errors


def _check_anchors(scenario: Scenario) -> list[ValidationError]:
    errors: list[ValidationError] = []
    rows = scenario.examples.row_count
    for given in scenario.given_stories.stories:
        if given.has_anchor and int(given.anchor) >= rows:
            errors.append(ValidationError(
                "error",
                f"Given story {given.path} refers to examples row {given.anchor}, but there are {rows} row(s)",
                scenario.title or None,
            ))
    return errors
