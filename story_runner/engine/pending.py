"""Generate stub source for steps that have no implementation yet."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from story_runner.engine.steps import PendingStep

_DECORATORS = {"Given": "given", "When": "when", "Then": "then"}


def _method_name(keyword: str, text: str) -> str:
    words = re.sub(r"[^0-9a-zA-Z]+", " ", f"{keyword} {text}").lower().split()
    name = "_".join(words) or "pending_step"
    return f"step_{name}" if name[0].isdigit() else name


def generate_method(pending: PendingStep, library: str = "steps") -> str:
    decorator = _DECORATORS.get(pending.keyword, "step")
    text = pending.step_text.replace("\\", "\\\\").replace('"', '\\"')
    return (
        f'@{library}.{decorator}("{text}", pending=True)\n'
        f"def {_method_name(pending.keyword, pending.step_text)}():\n"
        f"    pass  # PENDING\n"
    )


def generate_methods(pending_steps: list[PendingStep]) -> list[str]:
    """Stubs for pending steps that are not already marked pending in code, without repeats."""
    methods: list[str] = []
    for step in pending_steps:
        if step.annotated:
            continue
        method = generate_method(step)
        if method not in methods:
            methods.append(method)
    return methods
