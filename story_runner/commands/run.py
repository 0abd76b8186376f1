"""story run <story>...: run stories and print a report."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from story_runner.config import load_configuration
from story_runner.engine import Embedder, MetaFilter
from story_runner.engine.step_loader import load_step_libraries


def _parse_args(args: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="story run")
    parser.add_argument("stories", nargs="+")
    parser.add_argument("--steps", default="steps")
    parser.add_argument("--config", default=None)
    parser.add_argument("--filter", default="")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(args)


def cmd_run(args: list[str], cwd: str):
    options = _parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config_path = Path(cwd) / options.config if options.config else None
        configuration = load_configuration(config_path, root=cwd)
        meta_filter = MetaFilter.parse(options.filter)
    except (OSError, ValueError) as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    if options.dry_run:
        configuration.story_controls.dry_run = True

    libraries = load_step_libraries(Path(cwd) / options.steps)
    if not libraries:
        print(f"⚠ No step libraries found in {options.steps}; every step will be pending", file=sys.stderr)

    result = Embedder(configuration, libraries, meta_filter).run_stories_as_paths(options.stories)

    print(result.summary())
    if result.failed:
        sys.exit(1)
