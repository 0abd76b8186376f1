"""Turns story text and hooks into executable steps."""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import TYPE_CHECKING

from story_runner.engine.candidates import KEYWORDS
from story_runner.engine.steps import HookStep, IgnorableStep, MatchedStep, PendingStep, Step

if TYPE_CHECKING:
    from story_runner.config import StoryControls
    from story_runner.engine.candidates import Hook, StepLibrary
    from story_runner.types import Meta, Scenario, Story

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "!--"

_PARAMETER_REF = re.compile(r"<(\w+)>")


class Stage(Enum):
    BEFORE = "before"
    AFTER = "after"


def substitute_parameters(text: str, parameters: dict[str, str]) -> str:
    """Replace <name> references with parameter values; unknown names are left as-is."""
    def replacer(m: re.Match) -> str:
        return parameters.get(m.group(1), m.group(0))
    return _PARAMETER_REF.sub(replacer, text)


def split_keyword(text: str) -> tuple[str, str]:
    stripped = text.strip()
    for keyword in KEYWORDS:
        if stripped == keyword or stripped.startswith(keyword + " "):
            return keyword, stripped[len(keyword):].strip()
    return "", stripped


class MarkingStepCollector:
    """Matches step text against candidates; unmatched text becomes a pending step."""

    def __init__(self, controls: StoryControls | None = None):
        self.controls = controls

    @property
    def dry_run(self) -> bool:
        return bool(self.controls and self.controls.dry_run)

    def _hook_steps(self, hooks: list[Hook], label: str) -> list[Step]:
        return [HookStep(f"@{label} {h.name}", h.fn, h.outcome, self.dry_run) for h in hooks]

    def collect_before_or_after_stories_steps(
        self, candidates: list[StepLibrary], stage: Stage
    ) -> list[Step]:
        key = f"{stage.value}_stories"
        return self._hook_steps([h for lib in candidates for h in lib.hooks[key]], key)

    def collect_before_or_after_story_steps(
        self, candidates: list[StepLibrary], story: Story, stage: Stage, given_story: bool
    ) -> list[Step]:
        key = f"{stage.value}_story"
        hooks = [
            h for lib in candidates for h in lib.hooks[key]
            if h.upon_given_story == given_story
        ]
        return self._hook_steps(hooks, key)

    def collect_before_or_after_scenario_steps(
        self, candidates: list[StepLibrary], meta: Meta, stage: Stage
    ) -> list[Step]:
        key = f"{stage.value}_scenario"
        return self._hook_steps([h for lib in candidates for h in lib.hooks[key]], key)

    def collect_scenario_steps(
        self, candidates: list[StepLibrary], scenario: Scenario, parameters: dict[str, str]
    ) -> list[Step]:
        steps: list[Step] = []
        previous = ""
        for raw in scenario.steps:
            if raw.strip().startswith(COMMENT_PREFIX):
                steps.append(IgnorableStep(raw.strip()))
                continue
            text = substitute_parameters(raw.strip(), parameters)
            keyword, body = split_keyword(text)
            effective = previous if keyword in ("And", "But") and previous else keyword
            if keyword not in ("And", "But"):
                previous = keyword
            steps.append(self._create_step(candidates, text, keyword, effective, body))
        return steps

    def _create_step(
        self, candidates: list[StepLibrary], text: str, keyword: str, effective: str, body: str
    ) -> Step:
        for lib in candidates:
            for candidate in lib.candidates:
                raw = candidate.match(effective, body)
                if raw is None:
                    continue
                if candidate.pending:
                    return PendingStep(text, keyword, annotated=True)
                return MatchedStep(text, candidate.fn, raw, self.dry_run)
        logger.debug("No step matches %r", text)
        return PendingStep(text, keyword)
