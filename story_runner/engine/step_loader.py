"""Load step libraries from .py files in a steps directory."""
from __future__ import annotations

import importlib.util
import logging
from pathlib import Path

from story_runner.engine.candidates import StepLibrary

logger = logging.getLogger(__name__)


def load_step_libraries(steps_dir: str | Path) -> list[StepLibrary]:
    """Import every module in `steps_dir` and collect the StepLibrary objects it defines.

    A module that fails to import is logged and skipped, so one broken file
    does not hide the rest.
    """
    libraries: list[StepLibrary] = []
    steps_path = Path(steps_dir)
    if not steps_path.is_dir():
        logger.warning("Steps directory not found: %s", steps_path)
        return libraries

    for py_file in sorted(steps_path.glob("*.py")):
        try:
            spec = importlib.util.spec_from_file_location(f"story_steps_{py_file.stem}", py_file)
            if not spec or not spec.loader:
                continue
            mod = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(mod)
        except Exception as e:
            logger.warning("Failed to load steps from %s: %s", py_file, e)
            continue

        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            if isinstance(obj, StepLibrary) and obj not in libraries:
                if not obj.name:
                    obj.name = py_file.stem
                libraries.append(obj)

    return libraries
