"""Default collaborators for finding, reading and parsing story files."""
from __future__ import annotations

import logging
import posixpath
from pathlib import Path

from story_runner.compiler.parser import parse_story_yaml
from story_runner.engine.failures import StoryNotFound
from story_runner.types import Story

logger = logging.getLogger(__name__)


class LoadFromFilesystem:
    def __init__(self, root: str | Path = "."):
        self.root = Path(root)

    def load_text(self, path: str) -> str:
        story_path = self.root / path
        try:
            return story_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoryNotFound(path, e.strerror or str(e)) from e


class LoadFromMemory:
    """Stories kept in a dict, keyed by path."""

    def __init__(self, stories: dict[str, str] | None = None):
        self.stories = dict(stories or {})

    def load_text(self, path: str) -> str:
        if path not in self.stories:
            raise StoryNotFound(path)
        return self.stories[path]


class RelativePathCalculator:
    """Given story paths are relative to the directory of the story that names them."""

    def calculate(self, parent_path: str, child_path: str) -> str:
        if child_path.startswith("/"):
            return posixpath.normpath(child_path.lstrip("/"))
        return posixpath.normpath(posixpath.join(posixpath.dirname(parent_path), child_path))


class AbsolutePathCalculator:
    def calculate(self, parent_path: str, child_path: str) -> str:
        return child_path


PATH_CALCULATORS = {"relative": RelativePathCalculator, "absolute": AbsolutePathCalculator}


class YamlStoryParser:
    def parse(self, text: str, path: str) -> Story:
        logger.debug("Parsing story %s", path)
        return parse_story_yaml(text, path)
