"""Shared fixtures for story-runner tests."""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from story_runner.config import Configuration, StoryControls
from story_runner.engine import RestartScenario, StepLibrary, StoryRunner
from story_runner.engine.meta_filter import MetaFilter
from story_runner.loading import LoadFromMemory
from story_runner.reporters import RecordingStoryReporter

if TYPE_CHECKING:
    from story_runner.types import Story


class StoryHarness:
    """Test harness for running YAML stories through the StoryRunner.

    Stories live in memory, keyed by path. Every story (given stories
    included) reports to one RecordingStoryReporter, and the standard steps
    record what actually ran in `calls`:

        step <name> passes     -> appends <name>
        step <name> fails      -> appends <name>, raises AssertionError
        step <name> restarts   -> first call raises RestartScenario, then passes
    """

    def __init__(self, **controls):
        self.loader = LoadFromMemory()
        self.reporter = RecordingStoryReporter()
        self.configuration = Configuration(
            story_controls=StoryControls(**controls),
            story_loader=self.loader,
            reporter_factory=lambda _path: self.reporter,
        )
        self.runner = StoryRunner()
        self.steps = StepLibrary("harness")
        self.calls: list[str] = []
        self.restarted: set[str] = set()
        self._install_standard_steps()

    def _install_standard_steps(self) -> None:
        @self.steps.step("step $name passes")
        def passes(name):
            self.calls.append(name)

        @self.steps.step("step $name fails")
        def fails(name):
            self.calls.append(name)
            raise AssertionError(f"{name} failed")

        @self.steps.step("step $name restarts")
        def restarts(name):
            self.calls.append(name)
            if name not in self.restarted:
                self.restarted.add(name)
                raise RestartScenario(f"restart at {name}")

    def add_story(self, path: str, content: str) -> None:
        self.loader.stories[path] = content

    def story(self, path: str) -> Story:
        return self.runner.story_of_path(self.configuration, path)

    def run(self, path: str, meta_filter: str = "", before_stories=None) -> None:
        self.runner.run(
            self.configuration, [self.steps], self.story(path), MetaFilter.parse(meta_filter), before_stories
        )

    def run_expecting_failure(self, path: str, **kwargs) -> BaseException:
        with pytest.raises(BaseException) as info:
            self.run(path, **kwargs)
        return info.value

    @property
    def outcomes(self) -> list[tuple[str, str]]:
        return self.reporter.steps()

    @property
    def events(self) -> list[str]:
        return self.reporter.names()


@pytest.fixture
def harness_factory():
    """Factory fixture: harness_factory(reset_state_before_scenario=False, ...)."""
    def _make(**controls) -> StoryHarness:
        return StoryHarness(**controls)
    return _make


@pytest.fixture
def harness() -> StoryHarness:
    return StoryHarness()
