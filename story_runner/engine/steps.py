"""Executable steps produced by the step collector."""
from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, get_type_hints

from story_runner.engine.failures import PendingStepFound, RestartScenario, StepFailure
from story_runner.engine.results import (
    FailedResult,
    Ignorable,
    NotPerformed,
    Pending,
    RestartRequested,
    Silent,
    Skipped,
    StepResult,
    Successful,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class Step:
    def __init__(self, text: str):
        self.text = text

    def perform(self, story_failure: StepFailure | None) -> StepResult:
        raise NotImplementedError

    def do_not_perform(self, story_failure: StepFailure | None) -> StepResult:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r})"


def _invoke(text: str, fn: Callable[..., Any], arguments: dict[str, Any]) -> StepResult | None:
    """Call step code; returns None on success or the result describing what went wrong."""
    try:
        fn(**arguments)
    except RestartScenario as e:
        return RestartRequested(text, e)
    except PendingStepFound as e:
        return Pending(text, StepFailure(e))
    except Exception as e:
        logger.debug("Step %r raised %r", text, e)
        return FailedResult(text, StepFailure(e))
    return None


_TRUE = {"true", "yes", "y", "on", "1"}
_FALSE = {"false", "no", "n", "off", "0"}


def _to_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"Cannot convert {value!r} to bool")


_CONVERTERS: dict[Any, Callable[[str], Any]] = {int: int, float: float, bool: _to_bool, str: str}


def convert_arguments(fn: Callable[..., Any], raw: dict[str, str]) -> dict[str, Any]:
    """Convert captured strings to the int/float/bool types the implementation annotates."""
    try:
        hints = get_type_hints(fn)
    except NameError:
        hints = {}
    accepted = inspect.signature(fn).parameters
    arguments: dict[str, Any] = {}
    for name, value in raw.items():
        if name not in accepted:
            continue
        converter = _CONVERTERS.get(hints.get(name), str)
        arguments[name] = converter(value.strip())
    return arguments


class MatchedStep(Step):
    """A scenario step bound to an implementation and the values captured from its text."""

    def __init__(self, text: str, fn: Callable[..., Any], raw_arguments: dict[str, str], dry_run: bool = False):
        super().__init__(text)
        self.fn = fn
        self.raw_arguments = raw_arguments
        self.dry_run = dry_run

    def _call(self) -> None:
        self.fn(**convert_arguments(self.fn, self.raw_arguments))

    def perform(self, story_failure: StepFailure | None) -> StepResult:
        if self.dry_run:
            return Successful(self.text)
        return _invoke(self.text, self._call, {}) or Successful(self.text)

    def do_not_perform(self, story_failure: StepFailure | None) -> StepResult:
        return NotPerformed(self.text, story_failure)


class PendingStep(Step):
    def __init__(self, text: str, keyword: str = "", annotated: bool = False):
        super().__init__(text)
        self.keyword = keyword
        self.annotated = annotated

    @property
    def step_text(self) -> str:
        """Text without its leading keyword."""
        if self.keyword and self.text.startswith(self.keyword):
            return self.text[len(self.keyword):].strip()
        return self.text

    def perform(self, story_failure: StepFailure | None) -> StepResult:
        return Pending(self.text, StepFailure(PendingStepFound(self.text)))

    def do_not_perform(self, story_failure: StepFailure | None) -> StepResult:
        return Pending(self.text, StepFailure(PendingStepFound(self.text)))


class IgnorableStep(Step):
    def perform(self, story_failure: StepFailure | None) -> StepResult:
        return Ignorable(self.text)

    def do_not_perform(self, story_failure: StepFailure | None) -> StepResult:
        return Ignorable(self.text)


# Hook outcomes: when an after hook runs relative to the story's health
ANY = "any"
SUCCESS = "success"
FAILURE = "failure"
HOOK_OUTCOMES = (ANY, SUCCESS, FAILURE)


class HookStep(Step):
    """A before/after hook. Runs silently; only a failure is reported."""

    def __init__(self, name: str, fn: Callable[[], Any], outcome: str = ANY, dry_run: bool = False):
        super().__init__(name)
        self.fn = fn
        self.outcome = outcome
        self.dry_run = dry_run

    def _run(self) -> StepResult:
        if self.dry_run:
            return Silent(self.text)
        result = _invoke(self.text, self.fn, {})
        if isinstance(result, RestartRequested):
            # only scenario steps can be restarted
            return FailedResult(self.text, StepFailure(result.cause))
        return result or Silent(self.text)

    def perform(self, story_failure: StepFailure | None) -> StepResult:
        if self.outcome == FAILURE:
            return Skipped(self.text)
        return self._run()

    def do_not_perform(self, story_failure: StepFailure | None) -> StepResult:
        if self.outcome == SUCCESS:
            return Skipped(self.text)
        return self._run()
