"""Execution state. Healthy until a step fails, then Failed for the rest of the run.

    Healthy --step fails--> Failed(cause)
    Failed  --any step----> Failed(cause)     (step asked not to perform, still reported)

Only an explicit reset puts a context back into Healthy.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from story_runner.engine.results import RestartRequested

if TYPE_CHECKING:
    from story_runner.engine.context import StoryRun
    from story_runner.engine.failures import StepFailure
    from story_runner.engine.steps import Step
    from story_runner.reporters import StoryReporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Healthy:
    failed = False


@dataclass(frozen=True)
class Failed:
    cause: StepFailure
    failed = True


State = Healthy | Failed

HEALTHY = Healthy()


def advance(
    state: State,
    step: Step,
    run: StoryRun,
    reporter: StoryReporter | None = None,
) -> State | RestartRequested:
    """Run one step under `state` and return the next state.

    A step asking for a restart returns its RestartRequested result instead
    of a state; the caller decides what to do with it.
    """
    reporter = reporter or run.reporter
    if isinstance(state, Failed):
        result = step.do_not_perform(state.cause)
        result.describe_to(reporter)
        return state

    result = step.perform(run.failure)
    if isinstance(result, RestartRequested):
        return result
    result.describe_to(reporter)
    if result.failure is None:
        return state

    logger.debug("Step %r failed: %s", step.text, result.failure)
    run.record_failure(result.failure)
    return Failed(run.failure)


def failure_of(state: State) -> BaseException | None:
    if isinstance(state, Failed):
        return state.cause.cause
    return None
