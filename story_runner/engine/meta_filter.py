"""Glob match story/scenario meta against +include / -exclude terms.

    "+author ann* -skip"   include meta with author matching ann*, exclude anything tagged skip
"""
from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from story_runner.types import Meta


@dataclass(frozen=True)
class MetaTerm:
    name: str
    pattern: str = ""  # empty = any value

    def matches(self, meta: Meta) -> bool:
        if not meta.has(self.name):
            return False
        return not self.pattern or fnmatch(meta.get(self.name), self.pattern)


def _parse_terms(expression: str) -> tuple[list[MetaTerm], list[MetaTerm]]:
    include: list[MetaTerm] = []
    exclude: list[MetaTerm] = []
    target: list[MetaTerm] | None = None
    name = ""
    words: list[str] = []

    def flush():
        if target is not None and name:
            target.append(MetaTerm(name, " ".join(words)))

    for token in expression.split():
        if token[0] in "+-" and len(token) > 1:
            flush()
            target = include if token[0] == "+" else exclude
            name, words = token[1:], []
        elif target is None:
            raise ValueError(f"Invalid meta filter {expression!r}: terms must start with + or -")
        else:
            words.append(token)
    flush()
    return include, exclude


@dataclass(frozen=True)
class MetaFilter:
    expression: str = ""
    include: list[MetaTerm] = field(default_factory=list, compare=False, repr=False)
    exclude: list[MetaTerm] = field(default_factory=list, compare=False, repr=False)

    EMPTY: ClassVar[MetaFilter]

    @classmethod
    def parse(cls, expression: str) -> MetaFilter:
        include, exclude = _parse_terms(expression.strip())
        return cls(expression.strip(), include, exclude)

    def allow(self, meta: Meta) -> bool:
        if self.include and not any(t.matches(meta) for t in self.include):
            return False
        return not any(t.matches(meta) for t in self.exclude)

    def as_string(self) -> str:
        return self.expression


MetaFilter.EMPTY = MetaFilter()
