"""Failure taxonomy and the strategies that decide what a run does with it."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# ─── Signals raised by step code ───

class PendingStepFound(Exception):
    """No implementation matched the step, or the implementation is marked pending."""

    def __init__(self, step: str):
        super().__init__(f"Pending: {step}")
        self.step = step


class RestartScenario(Exception):
    """Raised by step code to restart the current scenario's steps from scratch."""


class StoryCancelled(BaseException):
    """An external interruption; never absorbed by a failure strategy."""


class StoryNotFound(Exception):
    def __init__(self, path: str, reason: str = ""):
        super().__init__(f"Story not found: {path}" + (f" ({reason})" if reason else ""))
        self.path = path


# ─── Wrapped step failure ───

@dataclass(frozen=True)
class StepFailure:
    cause: BaseException = field(compare=False)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.cause, PendingStepFound)

    def __str__(self) -> str:
        return f"{type(self.cause).__name__}: {self.cause}"


def most_important_of(current: StepFailure | None, new: StepFailure | None) -> StepFailure | None:
    """A pending discovery gives way to any later failure; anything else keeps its place."""
    if current is None:
        return new
    if current.is_pending:
        return new if new is not None else current
    return current


# ─── Strategies ───

class FailureStrategy:
    name = ""

    def handle_failure(self, failure: StepFailure | None) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return type(self).__name__


class SilentlyAbsorbingFailure(FailureStrategy):
    name = "silent"

    def handle_failure(self, failure: StepFailure | None) -> None:
        if failure is not None:
            logger.debug("Absorbing failure %s", failure)


class RethrowingFailure(FailureStrategy):
    name = "rethrowing"

    def handle_failure(self, failure: StepFailure | None) -> None:
        if failure is not None:
            raise failure.cause


class PendingStepStrategy(FailureStrategy):
    pass


class PassingUponPendingStep(PendingStepStrategy):
    name = "passing"

    def handle_failure(self, failure: StepFailure | None) -> None:
        pass


class FailingUponPendingStep(PendingStepStrategy):
    name = "failing"

    def handle_failure(self, failure: StepFailure | None) -> None:
        if failure is not None:
            raise failure.cause


FAILURE_STRATEGIES: dict[str, type[FailureStrategy]] = {
    SilentlyAbsorbingFailure.name: SilentlyAbsorbingFailure,
    RethrowingFailure.name: RethrowingFailure,
}

PENDING_STEP_STRATEGIES: dict[str, type[PendingStepStrategy]] = {
    PassingUponPendingStep.name: PassingUponPendingStep,
    FailingUponPendingStep.name: FailingUponPendingStep,
}


def strategy_for(
    failure: StepFailure,
    pending_step_strategy: PendingStepStrategy,
    failure_strategy: FailureStrategy,
) -> FailureStrategy:
    if failure.is_pending:
        return pending_step_strategy
    return failure_strategy
