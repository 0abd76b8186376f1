"""Run configuration: story controls, strategies and collaborators."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from story_runner.engine.collector import MarkingStepCollector
from story_runner.engine.failures import (
    FAILURE_STRATEGIES,
    PENDING_STEP_STRATEGIES,
    FailureStrategy,
    PassingUponPendingStep,
    PendingStepStrategy,
    SilentlyAbsorbingFailure,
)
from story_runner.loading import PATH_CALCULATORS, LoadFromFilesystem, RelativePathCalculator, YamlStoryParser
from story_runner.reporters import ConcurrentStoryReporter, ConsoleStoryReporter

if TYPE_CHECKING:
    from collections.abc import Callable

    from story_runner.reporters import StoryReporter


@dataclass
class StoryControls:
    dry_run: bool = False
    reset_state_before_story: bool = False  # given stories keep their parent's state unless set
    reset_state_before_scenario: bool = True
    skip_scenarios_after_failure: bool = False
    skip_before_and_after_scenario_steps_if_given_story: bool = False


@dataclass
class Configuration:
    story_controls: StoryControls = field(default_factory=StoryControls)
    pending_step_strategy: PendingStepStrategy = field(default_factory=PassingUponPendingStep)
    failure_strategy: FailureStrategy = field(default_factory=SilentlyAbsorbingFailure)
    story_loader: Any = field(default_factory=LoadFromFilesystem)
    story_parser: Any = field(default_factory=YamlStoryParser)
    step_collector: Any = None
    path_calculator: Any = field(default_factory=RelativePathCalculator)
    reporter_factory: Callable[[str], StoryReporter] | None = None
    delayed_reporting: bool = False  # queue output until the story completes

    def __post_init__(self):
        if self.step_collector is None:
            self.step_collector = MarkingStepCollector(self.story_controls)

    def story_reporter(self, story_path: str) -> StoryReporter:
        reporter = self.reporter_factory(story_path) if self.reporter_factory else ConsoleStoryReporter()
        if self.delayed_reporting:
            return ConcurrentStoryReporter(reporter)
        return reporter


def _lookup(table: dict[str, Any], name: str, what: str):
    try:
        return table[name]
    except KeyError:
        raise ValueError(f"Unknown {what} {name!r}, expected one of: {', '.join(table)}") from None


def configuration_from_dict(raw: dict[str, Any], root: str | Path = ".") -> Configuration:
    controls_raw = raw.get("story_controls") or {}
    known = {f.name for f in fields(StoryControls)}
    unknown = set(controls_raw) - known
    if unknown:
        raise ValueError(f"Unknown story controls: {', '.join(sorted(unknown))}")

    return Configuration(
        story_controls=StoryControls(**{k: bool(v) for k, v in controls_raw.items()}),
        pending_step_strategy=_lookup(
            PENDING_STEP_STRATEGIES, raw.get("pending_step_strategy", "passing"), "pending step strategy"
        )(),
        failure_strategy=_lookup(FAILURE_STRATEGIES, raw.get("failure_strategy", "silent"), "failure strategy")(),
        story_loader=LoadFromFilesystem(root),
        path_calculator=_lookup(PATH_CALCULATORS, raw.get("path_calculator", "relative"), "path calculator")(),
        delayed_reporting=bool(raw.get("delayed_reporting", False)),
    )


def load_configuration(path: str | Path | None, root: str | Path = ".") -> Configuration:
    """Read a YAML configuration file; no path means defaults."""
    if path is None:
        return configuration_from_dict({}, root)
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Invalid configuration: expected a mapping")
    return configuration_from_dict(raw, root)
