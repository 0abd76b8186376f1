"""Story reporters: receive lifecycle notifications from the runner."""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from story_runner.engine.failures import StepFailure
    from story_runner.types import ExamplesTable, GivenStories, Meta, Narrative, Scenario, Story


class StoryReporter:
    """Base reporter. Every notification is routed through `_record`, a no-op here.

    Subclasses either override `_record` to see all notifications in one
    place, or override the individual notifications they care about.
    """

    def _record(self, event: str, *args: Any) -> None:
        pass

    def dry_run(self) -> None:
        self._record("dry_run")

    def before_story(self, story: Story, given_story: bool) -> None:
        self._record("before_story", story, given_story)

    def story_not_allowed(self, story: Story, filter_expr: str) -> None:
        self._record("story_not_allowed", story, filter_expr)

    def narrative(self, narrative: Narrative) -> None:
        self._record("narrative", narrative)

    def before_scenario(self, title: str) -> None:
        self._record("before_scenario", title)

    def scenario_not_allowed(self, scenario: Scenario, filter_expr: str) -> None:
        self._record("scenario_not_allowed", scenario, filter_expr)

    def scenario_meta(self, meta: Meta) -> None:
        self._record("scenario_meta", meta)

    def given_stories(self, given_stories: GivenStories) -> None:
        self._record("given_stories", given_stories)

    def before_examples(self, steps: list[str], table: ExamplesTable) -> None:
        self._record("before_examples", steps, table)

    def example(self, row: dict[str, str]) -> None:
        self._record("example", row)

    def after_examples(self) -> None:
        self._record("after_examples")

    def successful(self, step: str) -> None:
        self._record("successful", step)

    def ignorable(self, step: str) -> None:
        self._record("ignorable", step)

    def pending(self, step: str) -> None:
        self._record("pending", step)

    def not_performed(self, step: str) -> None:
        self._record("not_performed", step)

    def failed(self, step: str, failure: StepFailure) -> None:
        self._record("failed", step, failure)

    def restarted(self, step: str, cause: BaseException) -> None:
        self._record("restarted", step, cause)

    def pending_methods(self, methods: list[str]) -> None:
        self._record("pending_methods", methods)

    def after_scenario(self) -> None:
        self._record("after_scenario")

    def after_story(self, given_story: bool) -> None:
        self._record("after_story", given_story)

    def cancelled(self) -> None:
        self._record("cancelled")


class RecordingStoryReporter(StoryReporter):
    """Keeps every notification as an `(event, *args)` tuple, in order."""

    def __init__(self):
        self.events: list[tuple[Any, ...]] = []

    def _record(self, event: str, *args: Any) -> None:
        self.events.append((event, *args))

    def names(self) -> list[str]:
        return [e[0] for e in self.events]

    def steps(self) -> list[tuple[str, str]]:
        """(outcome, step text) for every step outcome, in reporting order."""
        outcomes = {"successful", "pending", "not_performed", "failed", "ignorable"}
        return [(e[0], e[1]) for e in self.events if e[0] in outcomes]

    def count(self, event: str) -> int:
        return sum(1 for e in self.events if e[0] == event)


class ConcurrentStoryReporter(StoryReporter):
    """Queues notifications until `invoke_delayed()` replays them on the delegate."""

    def __init__(self, delegate: StoryReporter):
        self.delegate = delegate
        self.delayed: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, event: str, *args: Any) -> None:
        self.delayed.append((event, args))

    def invoke_delayed(self) -> None:
        delayed, self.delayed = self.delayed, []
        for event, args in delayed:
            getattr(self.delegate, event)(*args)


class ConsoleStoryReporter(StoryReporter):
    """Plain-text report, one line per notification that matters to a reader."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout
        self._depth = 0

    def _print(self, line: str) -> None:
        print("  " * self._depth + line, file=self.stream)

    def dry_run(self) -> None:
        self._print("DRY RUN")

    def before_story(self, story: Story, given_story: bool) -> None:
        label = "GivenStory" if given_story else "Story"
        self._print(f"{label}: {story.path}")
        if story.description:
            self._print(story.description)
        if given_story:
            self._depth += 1

    def story_not_allowed(self, story: Story, filter_expr: str) -> None:
        self._print(f"Story {story.path} excluded by filter: {filter_expr}")

    def narrative(self, narrative: Narrative) -> None:
        if narrative.is_empty():
            return
        self._print("Narrative:")
        self._print(f"In order to {narrative.in_order_to}")
        self._print(f"As a {narrative.as_a}")
        self._print(f"I want to {narrative.i_want_to}")

    def before_scenario(self, title: str) -> None:
        self._print(f"Scenario: {title}")

    def scenario_not_allowed(self, scenario: Scenario, filter_expr: str) -> None:
        self._print(f"Scenario {scenario.title} excluded by filter: {filter_expr}")

    def given_stories(self, given_stories: GivenStories) -> None:
        self._print(f"GivenStories: {', '.join(given_stories.paths)}")

    def before_examples(self, steps: list[str], table: ExamplesTable) -> None:
        self._print(f"Examples: {', '.join(table.headers)}")

    def example(self, row: dict[str, str]) -> None:
        self._print(f"Example: {row}")

    def successful(self, step: str) -> None:
        self._print(step)

    def ignorable(self, step: str) -> None:
        self._print(step)

    def pending(self, step: str) -> None:
        self._print(f"{step} (PENDING)")

    def not_performed(self, step: str) -> None:
        self._print(f"{step} (NOT PERFORMED)")

    def failed(self, step: str, failure: StepFailure) -> None:
        self._print(f"{step} (FAILED)")
        self._print(f"({failure})")

    def restarted(self, step: str, cause: BaseException) -> None:
        self._print(f"{step} (RESTARTED: {cause})")

    def pending_methods(self, methods: list[str]) -> None:
        for method in methods:
            for line in method.splitlines():
                self._print(line)

    def after_story(self, given_story: bool) -> None:
        if given_story:
            self._depth = max(0, self._depth - 1)
        self._print("")

    def cancelled(self) -> None:
        self._print("STORY CANCELLED")
