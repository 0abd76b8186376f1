"""story check <story>...: parse and validate stories without running them."""
from __future__ import annotations

import sys
from pathlib import Path

from story_runner.compiler import format_errors, parse_story_yaml, validate_story


def cmd_check(paths: list[str], cwd: str):
    failed = False
    for path in paths:
        story_path = Path(cwd) / path
        if not story_path.exists():
            print(f"Story file not found: {story_path}", file=sys.stderr)
            failed = True
            continue

        try:
            story = parse_story_yaml(story_path.read_text(encoding="utf-8"), path)
        except ValueError as e:
            print(f"✗ {path}: parse error: {e}", file=sys.stderr)
            failed = True
            continue

        errors = validate_story(story)
        if any(e.level == "error" for e in errors):
            print(f"✗ {path} failed validation:")
            print(format_errors(errors))
            failed = True
            continue

        print(f"✓ {path} ({len(story.scenarios)} scenarios)")
        if errors:
            print(format_errors(errors))

    if failed:
        sys.exit(1)
