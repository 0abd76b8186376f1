"""Walks a story's scenarios and steps through the execution state.

Step failures never escape a step: they move the context into Failed and the
remaining steps are reported as not performed. Only when the outermost story
completes is the most important failure handed to the failure strategy, which
may raise it to the caller.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from story_runner.engine.collector import Stage
from story_runner.engine.context import RunContext, StoryRun
from story_runner.engine.failures import StoryCancelled
from story_runner.engine.meta_filter import MetaFilter
from story_runner.engine.pending import generate_methods
from story_runner.engine.results import RestartRequested
from story_runner.engine.state import Failed, State, advance, failure_of
from story_runner.engine.steps import PendingStep
from story_runner.reporters import ConcurrentStoryReporter
from story_runner.types import Story

if TYPE_CHECKING:
    from collections.abc import Callable

    from story_runner.config import Configuration
    from story_runner.engine.candidates import StepLibrary
    from story_runner.engine.steps import Step
    from story_runner.reporters import StoryReporter
    from story_runner.types import Meta, Scenario

logger = logging.getLogger(__name__)


class StoryRunner:
    """Runs stories. Holds no per-run state, so one instance can serve many threads."""

    # ─── Public API ───

    def run_before_or_after_stories(
        self,
        configuration: Configuration,
        candidate_steps: list[StepLibrary],
        stage: Stage,
        stories_state: State | None = None,
    ) -> State:
        """Run the hooks that wrap a whole collection of stories, once.

        The collection keeps its own failure bookkeeping, separate from any
        story's. AFTER continues from `stories_state` (what BEFORE returned).
        A failure the strategy would raise comes back as a Failed state.
        """
        path = f"{stage.value.capitalize()}Stories"
        run = self._new_run(configuration, path)
        context = RunContext(configuration, candidate_steps, path, MetaFilter.EMPTY, run)
        if stage is Stage.AFTER and stories_state is not None:
            context.state = stories_state
            if isinstance(stories_state, Failed):
                run.record_failure(stories_state.cause)

        try:
            run.reporter.before_story(Story(path=path), False)
            self._run_steps(context, configuration.step_collector.collect_before_or_after_stories_steps(
                candidate_steps, stage
            ))
            run.reporter.after_story(False)
            if stage is Stage.AFTER:
                try:
                    run.handle_failure()
                except Exception as e:
                    logger.warning("%s failed: %s", path, e)
                    return Failed(run.failure)
        finally:
            self._flush(run.reporter)
        return context.state

    def run(
        self,
        configuration: Configuration,
        candidate_steps: list[StepLibrary],
        story: Story,
        meta_filter: MetaFilter | None = None,
        before_stories: State | None = None,
    ) -> None:
        """Run a story from the top. Raises whatever the failure strategy decides to surface."""
        run = self._new_run(configuration, story.path)
        context = RunContext(configuration, candidate_steps, story.path, meta_filter or MetaFilter.EMPTY, run)
        if before_stories is not None:
            context.state = before_stories
        self._run(context, story, {})

    def story_of_path(self, configuration: Configuration, path: str) -> Story:
        text = configuration.story_loader.load_text(path)
        return configuration.story_parser.parse(text, path)

    def failed(self, state: State) -> bool:
        return isinstance(state, Failed)

    def failure(self, state: State) -> BaseException | None:
        return failure_of(state)

    # ─── Story ───

    def _new_run(self, configuration: Configuration, path: str) -> StoryRun:
        return StoryRun(
            configuration.story_reporter(path),
            configuration.pending_step_strategy,
            configuration.failure_strategy,
        )

    def _run(self, context: RunContext, story: Story, story_parameters: dict[str, str]) -> None:
        try:
            self._run_story(context, story, story_parameters)
        except (StoryCancelled, KeyboardInterrupt):
            if not context.given_story:
                logger.warning("Story %s cancelled", story.path)
                context.reporter.cancelled()
                self._flush(context.reporter)
            raise

    def _run_story(self, context: RunContext, story: Story, story_parameters: dict[str, str]) -> None:
        run = context.run
        reporter = run.reporter
        controls = context.configuration.story_controls
        if not context.given_story:
            run.reset_failure()
        logger.info("Running %s%s", "given story " if context.given_story else "story ", story.path)

        try:
            if context.dry_run:
                reporter.dry_run()
            if controls.reset_state_before_story:
                context.reset_state()

            reporter.before_story(story, context.given_story)

            if context.meta_not_allowed(story.meta):
                reporter.story_not_allowed(story, context.meta_filter_as_string())
            else:
                reporter.narrative(story.narrative)
                self._run_before_or_after_story_steps(context, story, Stage.BEFORE)
                run_hooks = self._should_run_before_or_after_scenario_steps(context)
                for scenario in story.scenarios:
                    if context.failure_occurred() and controls.skip_scenarios_after_failure:
                        continue
                    reporter.before_scenario(scenario.title)
                    reporter.scenario_meta(scenario.meta)

                    meta = scenario.meta.inherit_from(story.meta)
                    if context.meta_not_allowed(meta):
                        reporter.scenario_not_allowed(scenario, context.meta_filter_as_string())
                    elif self._is_parameterised_by_examples(scenario):
                        self._run_parametrised_scenario_by_examples(context, run_hooks, scenario, meta)
                    else:
                        parameters = {**story_parameters, **meta.as_parameters()}
                        body = partial(self._run_scenario_steps, context, scenario, parameters)
                        self._run_scenario(context, run_hooks, scenario, meta, body)

                    reporter.after_scenario()
                self._run_before_or_after_story_steps(context, story, Stage.AFTER)

            reporter.after_story(context.given_story)

            if not context.given_story:
                logger.info("Finished story %s (%s)", story.path, "failed" if run.failure else "ok")
                run.handle_failure()
        finally:
            if not context.given_story:
                self._flush(reporter)

    def _should_run_before_or_after_scenario_steps(self, context: RunContext) -> bool:
        if not context.configuration.story_controls.skip_before_and_after_scenario_steps_if_given_story:
            return True
        return not context.given_story

    def _run_before_or_after_story_steps(self, context: RunContext, story: Story, stage: Stage) -> None:
        self._run_steps(context, context.collect_before_or_after_story_steps(story, stage))

    # ─── Scenario ───

    def _run_scenario(
        self,
        context: RunContext,
        run_hooks: bool,
        scenario: Scenario,
        meta: Meta,
        body: Callable[[], None],
    ) -> None:
        controls = context.configuration.story_controls
        # a given story starts from its parent's state; only reset_state_before_story wipes it
        if controls.reset_state_before_scenario and not context.given_story:
            context.reset_state()
        if run_hooks:
            self._run_steps(context, context.collect_before_or_after_scenario_steps(meta, Stage.BEFORE))

        self._run_given_stories(context, scenario)
        body()

        if run_hooks:
            self._run_steps(context, context.collect_before_or_after_scenario_steps(meta, Stage.AFTER))

    def _run_given_stories(self, context: RunContext, scenario: Scenario) -> None:
        given_stories = scenario.given_stories
        if not given_stories.paths:
            return
        context.reporter.given_stories(given_stories)
        for given_story in given_stories.stories:
            child = context.child_context_for(given_story)
            story = self.story_of_path(context.configuration, child.path)
            self._run(child, story, dict(given_story.parameters))
            # never back from Failed to Healthy
            if isinstance(child.state, Failed):
                context.state = child.state

    def _is_parameterised_by_examples(self, scenario: Scenario) -> bool:
        return scenario.examples.row_count > 0 and not scenario.given_stories.requires_parameters()

    def _run_parametrised_scenario_by_examples(
        self, context: RunContext, run_hooks: bool, scenario: Scenario, meta: Meta
    ) -> None:
        table = scenario.examples
        context.reporter.before_examples(scenario.steps, table)
        for row in table.rows:
            context.reporter.example(row)
            parameters = {**meta.as_parameters(), **row}
            body = partial(self._run_scenario_steps, context, scenario, parameters)
            self._run_scenario(context, run_hooks, scenario, meta, body)
        context.reporter.after_examples()

    def _run_scenario_steps(self, context: RunContext, scenario: Scenario, parameters: dict[str, str]) -> None:
        """Run the scenario's steps; a restart request throws the pass away and starts over."""
        while True:
            steps = context.collect_scenario_steps(scenario, parameters)
            # outcomes of a pass are only reported once the pass is known to stand
            buffer = ConcurrentStoryReporter(context.reporter)
            outcome: RestartRequested | None = None
            try:
                outcome = self._run_steps(context, steps, buffer)
            finally:
                if not isinstance(outcome, RestartRequested):
                    buffer.invoke_delayed()
            if outcome is None:
                break
            logger.info("Restarting scenario %r at step %r: %s", scenario.title, outcome.step, outcome.cause)
            context.reporter.restarted(outcome.step, outcome.cause)
        self._generate_pending_step_methods(context, steps)

    def _generate_pending_step_methods(self, context: RunContext, steps: list[Step]) -> None:
        pending = [s for s in steps if isinstance(s, PendingStep)]
        if pending:
            context.reporter.pending_methods(generate_methods(pending))

    # ─── Steps ───

    def _run_steps(
        self, context: RunContext, steps: list[Step], reporter: StoryReporter | None = None
    ) -> RestartRequested | None:
        """Advance the context's state through `steps`; stops early only on a restart request."""
        if not steps:
            return None
        state = context.state
        for step in steps:
            next_state = advance(state, step, context.run, reporter)
            if isinstance(next_state, RestartRequested):
                return next_state
            state = next_state
        context.state = state
        return None

    def _flush(self, reporter: StoryReporter) -> None:
        if isinstance(reporter, ConcurrentStoryReporter):
            reporter.invoke_delayed()

    def __repr__(self) -> str:
        return type(self).__name__
