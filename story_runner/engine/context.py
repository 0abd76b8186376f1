"""Per-run state: one StoryRun per call chain, one RunContext per story being run."""
from __future__ import annotations

from typing import TYPE_CHECKING

from story_runner.engine.failures import (
    FailureStrategy,
    PendingStepStrategy,
    SilentlyAbsorbingFailure,
    StepFailure,
    most_important_of,
    strategy_for,
)
from story_runner.engine.meta_filter import MetaFilter
from story_runner.engine.state import HEALTHY, Failed, State

if TYPE_CHECKING:
    from story_runner.config import Configuration
    from story_runner.engine.candidates import StepLibrary
    from story_runner.engine.collector import Stage
    from story_runner.engine.steps import Step
    from story_runner.reporters import StoryReporter
    from story_runner.types import GivenStory, Meta, Scenario, Story


class StoryRun:
    """What a whole call chain shares: the reporter and the failure bookkeeping.

    Given stories reuse their parent's StoryRun, so a failure inside a given
    story is the parent's failure too.
    """

    def __init__(
        self,
        reporter: StoryReporter,
        pending_step_strategy: PendingStepStrategy,
        failure_strategy: FailureStrategy,
    ):
        self.reporter = reporter
        self.pending_step_strategy = pending_step_strategy
        self.failure_strategy = failure_strategy
        self.failure: StepFailure | None = None
        self.current_strategy: FailureStrategy = SilentlyAbsorbingFailure()

    def reset_failure(self) -> None:
        self.failure = None
        self.current_strategy = SilentlyAbsorbingFailure()

    def record_failure(self, failure: StepFailure) -> None:
        self.failure = most_important_of(self.failure, failure)
        self.current_strategy = strategy_for(
            self.failure, self.pending_step_strategy, self.failure_strategy
        )

    def handle_failure(self) -> None:
        """Apply the resolved strategy to the most important failure; may raise."""
        self.current_strategy.handle_failure(self.failure)


class RunContext:
    def __init__(
        self,
        configuration: Configuration,
        candidate_steps: list[StepLibrary],
        path: str,
        meta_filter: MetaFilter,
        run: StoryRun,
        given_story: bool = False,
    ):
        self.configuration = configuration
        self.candidate_steps = candidate_steps
        self.path = path
        self.meta_filter = meta_filter or MetaFilter.EMPTY
        self.run = run
        self.given_story = given_story
        self.state: State = HEALTHY

    @property
    def reporter(self) -> StoryReporter:
        return self.run.reporter

    @property
    def dry_run(self) -> bool:
        return self.configuration.story_controls.dry_run

    def meta_not_allowed(self, meta: Meta) -> bool:
        return not self.meta_filter.allow(meta)

    def meta_filter_as_string(self) -> str:
        return self.meta_filter.as_string()

    def collect_before_or_after_story_steps(self, story: Story, stage: Stage) -> list[Step]:
        return self.configuration.step_collector.collect_before_or_after_story_steps(
            self.candidate_steps, story, stage, self.given_story
        )

    def collect_before_or_after_scenario_steps(self, meta: Meta, stage: Stage) -> list[Step]:
        return self.configuration.step_collector.collect_before_or_after_scenario_steps(
            self.candidate_steps, meta, stage
        )

    def collect_scenario_steps(self, scenario: Scenario, parameters: dict[str, str]) -> list[Step]:
        return self.configuration.step_collector.collect_scenario_steps(
            self.candidate_steps, scenario, parameters
        )

    def child_context_for(self, given_story: GivenStory) -> RunContext:
        path = self.configuration.path_calculator.calculate(self.path, given_story.path)
        child = RunContext(
            self.configuration, self.candidate_steps, path, self.meta_filter, self.run, given_story=True
        )
        child.state = self.state
        return child

    def failure_occurred(self) -> bool:
        return isinstance(self.state, Failed)

    def reset_state(self) -> None:
        self.state = HEALTHY
