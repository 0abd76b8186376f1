from story_runner.engine.candidates import StepLibrary

__all__ = ["StepLibrary"]
