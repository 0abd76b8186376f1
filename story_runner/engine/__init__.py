from story_runner.engine.candidates import StepLibrary
from story_runner.engine.collector import MarkingStepCollector, Stage
from story_runner.engine.embedder import BatchResult, Embedder
from story_runner.engine.failures import (
    FailingUponPendingStep,
    PassingUponPendingStep,
    PendingStepFound,
    RestartScenario,
    RethrowingFailure,
    SilentlyAbsorbingFailure,
    StepFailure,
    StoryCancelled,
    StoryNotFound,
)
from story_runner.engine.meta_filter import MetaFilter
from story_runner.engine.runner import StoryRunner
from story_runner.engine.state import HEALTHY, Failed, Healthy, State

__all__ = [
    "HEALTHY",
    "BatchResult",
    "Embedder",
    "FailingUponPendingStep",
    "Failed",
    "Healthy",
    "MarkingStepCollector",
    "MetaFilter",
    "PassingUponPendingStep",
    "PendingStepFound",
    "RestartScenario",
    "RethrowingFailure",
    "SilentlyAbsorbingFailure",
    "Stage",
    "State",
    "StepFailure",
    "StepLibrary",
    "StoryCancelled",
    "StoryNotFound",
    "StoryRunner",
]
