"""Run a collection of stories, wrapped in before/after-stories hooks."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from story_runner.engine.collector import Stage
from story_runner.engine.meta_filter import MetaFilter
from story_runner.engine.runner import StoryRunner
from story_runner.engine.state import HEALTHY, Failed, State

if TYPE_CHECKING:
    from story_runner.config import Configuration
    from story_runner.engine.candidates import StepLibrary

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    failures: dict[str, BaseException] = field(default_factory=dict)
    stories_run: list[str] = field(default_factory=list)
    before_stories: State = HEALTHY
    after_stories: State = HEALTHY

    @property
    def failed(self) -> bool:
        return bool(self.failures) or isinstance(self.after_stories, Failed)

    def summary(self) -> str:
        lines = [f"{len(self.stories_run)} stories run, {len(self.failures)} failed"]
        for path, error in self.failures.items():
            lines.append(f"  ✗ {path}: {type(error).__name__}: {error}")
        if isinstance(self.after_stories, Failed):
            lines.append(f"  ✗ collection hooks: {self.after_stories.cause}")
        return "\n".join(lines)


class Embedder:
    def __init__(
        self,
        configuration: Configuration,
        candidate_steps: list[StepLibrary],
        meta_filter: MetaFilter | None = None,
        runner: StoryRunner | None = None,
    ):
        self.configuration = configuration
        self.candidate_steps = candidate_steps
        self.meta_filter = meta_filter or MetaFilter.EMPTY
        self.runner = runner or StoryRunner()

    def run_stories_as_paths(self, paths: list[str]) -> BatchResult:
        """Run every story even when earlier ones fail; failures are collected per path."""
        result = BatchResult()
        result.before_stories = self.runner.run_before_or_after_stories(
            self.configuration, self.candidate_steps, Stage.BEFORE
        )
        for path in paths:
            result.stories_run.append(path)
            try:
                story = self.runner.story_of_path(self.configuration, path)
                self.runner.run(
                    self.configuration, self.candidate_steps, story, self.meta_filter, result.before_stories
                )
            except Exception as e:
                logger.warning("Story %s failed: %s", path, e)
                result.failures[path] = e
        result.after_stories = self.runner.run_before_or_after_stories(
            self.configuration, self.candidate_steps, Stage.AFTER, result.before_stories
        )
        return result
