"""Candidate steps: step implementations and hooks registered on a StepLibrary."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from story_runner.engine.steps import ANY, HOOK_OUTCOMES

if TYPE_CHECKING:
    from collections.abc import Callable

KEYWORDS = ("Given", "When", "Then", "And", "But")

_PLACEHOLDER = re.compile(r"\$(\w+)")


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """`I add $x to $y` -> regex with named groups x and y, matching the whole text."""
    parts: list[str] = []
    last = 0
    for m in _PLACEHOLDER.finditer(pattern):
        parts.append(re.escape(pattern[last:m.start()]))
        parts.append(f"(?P<{m.group(1)}>.*?)")
        last = m.end()
    parts.append(re.escape(pattern[last:]))
    return re.compile("".join(parts), re.DOTALL)


@dataclass
class StepCandidate:
    keyword: str | None  # None = matches after any keyword
    pattern: str
    fn: Callable[..., Any]
    pending: bool = False
    regex: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self):
        self.regex = compile_pattern(self.pattern)

    def match(self, keyword: str, text: str) -> dict[str, str] | None:
        if self.keyword is not None and self.keyword != keyword:
            return None
        m = self.regex.fullmatch(text)
        return m.groupdict() if m else None


@dataclass
class Hook:
    fn: Callable[[], Any]
    outcome: str = ANY
    upon_given_story: bool = False

    @property
    def name(self) -> str:
        return getattr(self.fn, "__qualname__", repr(self.fn))


class StepLibrary:
    """A named set of step implementations and hooks.

    Usage in steps/calculator_steps.py::

        from story_runner.engine import StepLibrary

        steps = StepLibrary("calculator")

        @steps.given("a calculator")
        def a_calculator():
            ...

        @steps.when("I add $x")
        def add(x: int):
            ...
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.candidates: list[StepCandidate] = []
        self.hooks: dict[str, list[Hook]] = {
            "before_stories": [], "after_stories": [],
            "before_story": [], "after_story": [],
            "before_scenario": [], "after_scenario": [],
        }

    def __repr__(self) -> str:
        return f"StepLibrary({self.name!r})"

    # ─── Step decorators ───

    def step(self, pattern: str, keyword: str | None = None, pending: bool = False):
        if keyword is not None and keyword not in KEYWORDS:
            raise ValueError(f"Unknown keyword {keyword!r}")

        def decorator(fn):
            self.candidates.append(StepCandidate(keyword, pattern, fn, pending))
            return fn
        return decorator

    def given(self, pattern: str, pending: bool = False):
        return self.step(pattern, "Given", pending)

    def when(self, pattern: str, pending: bool = False):
        return self.step(pattern, "When", pending)

    def then(self, pattern: str, pending: bool = False):
        return self.step(pattern, "Then", pending)

    # ─── Hook decorators ───

    def _hook(self, stage: str, outcome: str = ANY, upon_given_story: bool = False):
        if outcome not in HOOK_OUTCOMES:
            raise ValueError(f"Unknown hook outcome {outcome!r}, expected one of {HOOK_OUTCOMES}")

        def decorator(fn):
            self.hooks[stage].append(Hook(fn, outcome, upon_given_story))
            return fn
        return decorator

    def before_stories(self, fn):
        return self._hook("before_stories")(fn)

    def after_stories(self, fn=None, *, outcome: str = ANY):
        decorator = self._hook("after_stories", outcome)
        return decorator(fn) if fn is not None else decorator

    def before_story(self, fn=None, *, upon_given_story: bool = False):
        decorator = self._hook("before_story", upon_given_story=upon_given_story)
        return decorator(fn) if fn is not None else decorator

    def after_story(self, fn=None, *, outcome: str = ANY, upon_given_story: bool = False):
        decorator = self._hook("after_story", outcome, upon_given_story)
        return decorator(fn) if fn is not None else decorator

    def before_scenario(self, fn):
        return self._hook("before_scenario")(fn)

    def after_scenario(self, fn=None, *, outcome: str = ANY):
        decorator = self._hook("after_scenario", outcome)
        return decorator(fn) if fn is not None else decorator
