from story_runner.compiler.parser import parse_story_yaml
from story_runner.compiler.validator import format_errors, validate_story

__all__ = ["format_errors", "parse_story_yaml", "validate_story"]
