"""Parse YAML story definitions into Story / Scenario objects."""
from __future__ import annotations

import re

import yaml

from story_runner.types import (
    EMPTY_META,
    ExamplesTable,
    GivenStories,
    GivenStory,
    Meta,
    Narrative,
    Scenario,
    Story,
)

_ANCHORED = re.compile(r"^(?P<path>.+?)#\{(?P<anchor>[^}]*)\}$")


def _scalar(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_meta(raw) -> Meta:
    if raw is None:
        return EMPTY_META
    if isinstance(raw, list):
        # bare tag list: [smoke, slow]
        return Meta({str(tag): None for tag in raw})
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid meta: expected a mapping or list, got {type(raw).__name__}")
    return Meta({str(k): None if v is None else _scalar(v) for k, v in raw.items()})


def _parse_narrative(raw) -> Narrative:
    if not raw:
        return Narrative()
    if not isinstance(raw, dict):
        raise ValueError("Invalid narrative: expected a mapping")
    return Narrative(
        in_order_to=_scalar(raw.get("in_order_to")),
        as_a=_scalar(raw.get("as_a")),
        i_want_to=_scalar(raw.get("i_want_to")),
    )


def _parse_examples(raw) -> ExamplesTable:
    if not raw:
        return ExamplesTable()
    if not isinstance(raw, list) or not all(isinstance(r, dict) for r in raw):
        raise ValueError("Invalid examples: expected a list of mappings")
    return ExamplesTable([{str(k): _scalar(v) for k, v in row.items()} for row in raw])


def _parse_given_story(raw) -> GivenStory:
    if isinstance(raw, str):
        m = _ANCHORED.match(raw.strip())
        if m:
            anchor = m.group("anchor").strip()
            if not anchor.isdigit():
                raise ValueError(f"Invalid given story anchor in {raw!r}: expected a row index")
            return GivenStory(path=m.group("path"), anchor=anchor)
        return GivenStory(path=raw.strip())
    if isinstance(raw, dict) and "path" in raw:
        params = raw.get("parameters") or {}
        if not isinstance(params, dict):
            raise ValueError(f"Invalid given story parameters for {raw['path']!r}: expected a mapping")
        return GivenStory(path=str(raw["path"]), parameters={str(k): _scalar(v) for k, v in params.items()})
    raise ValueError(f"Invalid given story reference: {raw!r}")


def _parse_given_stories(raw) -> GivenStories:
    if not raw:
        return GivenStories()
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValueError("Invalid given_stories: expected a list")
    return GivenStories([_parse_given_story(r) for r in raw])


def _parse_scenario(raw, index: int) -> Scenario:
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid scenario #{index + 1}: expected a mapping")
    steps = raw.get("steps") or []
    if not isinstance(steps, list):
        raise ValueError(f'Invalid scenario #{index + 1}: "steps" must be a list')

    examples = _parse_examples(raw.get("examples"))
    given_stories = _parse_given_stories(raw.get("given_stories"))
    if examples.row_count:
        given_stories.use_examples_table(examples)

    return Scenario(
        title=_scalar(raw.get("title")),
        steps=[_scalar(s) for s in steps],
        meta=_parse_meta(raw.get("meta")),
        examples=examples,
        given_stories=given_stories,
    )


def parse_story_yaml(content: str, path: str = "") -> Story:
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Invalid YAML: expected a mapping")

    raw_scenarios = raw.get("scenarios") or []
    if not isinstance(raw_scenarios, list):
        raise ValueError('Invalid story: "scenarios" must be a list')

    return Story(
        path=path,
        description=_scalar(raw.get("description")),
        narrative=_parse_narrative(raw.get("narrative")),
        meta=_parse_meta(raw.get("meta")),
        scenarios=[_parse_scenario(s, i) for i, s in enumerate(raw_scenarios)],
    )
