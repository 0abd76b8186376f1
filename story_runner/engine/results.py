"""Step outcomes: what happened when a step was (or was not) performed."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from story_runner.engine.failures import StepFailure
    from story_runner.reporters import StoryReporter


class StepResult:
    def __init__(self, step: str, failure: StepFailure | None = None):
        self.step = step
        self.failure = failure

    def describe_to(self, reporter: StoryReporter) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.step!r})"


class Successful(StepResult):
    def describe_to(self, reporter: StoryReporter) -> None:
        reporter.successful(self.step)


class Pending(StepResult):
    def describe_to(self, reporter: StoryReporter) -> None:
        reporter.pending(self.step)


class FailedResult(StepResult):
    def __init__(self, step: str, failure: StepFailure):
        super().__init__(step, failure)

    def describe_to(self, reporter: StoryReporter) -> None:
        reporter.failed(self.step, self.failure)


class NotPerformed(StepResult):
    """Skipped because an earlier step failed; still reported.

    Carries no failure of its own, so a skipped step never changes the state.
    """

    def __init__(self, step: str, cause: StepFailure | None = None):
        super().__init__(step)
        self.cause = cause

    def describe_to(self, reporter: StoryReporter) -> None:
        reporter.not_performed(self.step)


class Ignorable(StepResult):
    def describe_to(self, reporter: StoryReporter) -> None:
        reporter.ignorable(self.step)


class Silent(StepResult):
    def describe_to(self, reporter: StoryReporter) -> None:
        pass


class Skipped(StepResult):
    def describe_to(self, reporter: StoryReporter) -> None:
        pass


class RestartRequested(StepResult):
    """Typed restart signal. Not a failure; the runner reports it as `restarted`."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(step)
        self.cause = cause

    def describe_to(self, reporter: StoryReporter) -> None:
        reporter.restarted(self.step, self.cause)
