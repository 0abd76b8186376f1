"""MCP Server exposing story_* tools for running and checking stories."""
from __future__ import annotations

import json
import os
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from story_runner.compiler import parse_story_yaml, validate_story
from story_runner.config import load_configuration
from story_runner.engine import MetaFilter, StoryRunner
from story_runner.engine.step_loader import load_step_libraries
from story_runner.reporters import RecordingStoryReporter

mcp = FastMCP("story-runner")


def _event_to_dict(event: tuple) -> dict:
    name, *args = event
    return {"event": name, "args": [a if isinstance(a, (str, int, float, bool, type(None))) else str(a) for a in args]}


@mcp.tool()
def story_run(path: str, steps_dir: str = "steps", meta_filter: str = "", config: str | None = None) -> str:
    """Run one story and return every report event plus the failure, if any."""
    cwd = Path(os.getcwd())
    try:
        configuration = load_configuration(cwd / config if config else None, root=cwd)
        recorder = RecordingStoryReporter()
        configuration.reporter_factory = lambda _path: recorder
        runner = StoryRunner()
        story = runner.story_of_path(configuration, path)
        libraries = load_step_libraries(cwd / steps_dir)
        failure = None
        try:
            runner.run(configuration, libraries, story, MetaFilter.parse(meta_filter))
        except Exception as e:
            failure = f"{type(e).__name__}: {e}"
        return json.dumps({
            "story": path,
            "failure": failure,
            "events": [_event_to_dict(e) for e in recorder.events],
        }, ensure_ascii=False, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)


@mcp.tool()
def story_check(path: str) -> str:
    """Parse and validate a story file."""
    try:
        story_path = Path(os.getcwd()) / path
        story = parse_story_yaml(story_path.read_text(encoding="utf-8"), path)
        return json.dumps({
            "story": path,
            "scenarios": [s.title for s in story.scenarios],
            "problems": [{"level": e.level, "message": e.message, "scenario": e.scenario}
                         for e in validate_story(story)],
        }, ensure_ascii=False, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)


def run_server():
    mcp.run(transport="stdio")
