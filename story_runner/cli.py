"""Thin CLI router, dispatches to commands."""
from __future__ import annotations

import os
import sys

USAGE = """\
story: run YAML stories against Python step libraries

Usage:
  story run <story>... [options]   Run stories, print a plain-text report
      --steps DIR                  Directory of step modules (default: steps)
      --config FILE                YAML configuration file
      --filter EXPR                Meta filter, e.g. "+smoke -skip"
      --dry-run                    Report steps without running them
      --verbose                    Debug logging
  story check <story>...           Parse and validate stories
  story mcp-server                 Start MCP Server
"""


def main():
    args = sys.argv[1:]
    cwd = os.getcwd()
    command = args[0] if args else None

    if command == "run":
        if len(args) < 2:
            print("Usage: story run <story>... [options]", file=sys.stderr)
            sys.exit(1)
        from story_runner.commands.run import cmd_run
        cmd_run(args[1:], cwd)

    elif command == "check":
        if len(args) < 2:
            print("Usage: story check <story>...", file=sys.stderr)
            sys.exit(1)
        from story_runner.commands.check import cmd_check
        cmd_check(args[1:], cwd)

    elif command == "mcp-server":
        from story_runner.integrations.mcp_server import run_server
        run_server()

    elif command in ("help", "--help", "-h", None):
        print(USAGE)

    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
