"""Scenarios parameterised by an examples table.

Covers:
- One run of the scenario per row, <name> replaced by the row's value
- Reset-before-scenario on: rows fail independently
- Reset-before-scenario off: a failing row leaves later rows not performed
- Scenario hooks run around every row
- Row values win over meta values
- An anchored given story turns examples into given story parameters instead
"""
from __future__ import annotations

ROWS = """
scenarios:
  - title: rows
    steps:
      - Given step <name> <result>
    examples:
      - {name: r1, result: passes}
      - {name: r2, result: fails}
      - {name: r3, result: passes}
"""


# ================================================================
# Rows
# ================================================================


def test_each_row_runs_with_its_values(harness):
    harness.add_story("s.yaml", ROWS)
    harness.run("s.yaml")
    assert harness.calls == ["r1", "r2", "r3"]
    assert harness.outcomes == [
        ("successful", "Given step r1 passes"),
        ("failed", "Given step r2 fails"),
        ("successful", "Given step r3 passes"),
    ]


def test_example_events_wrap_rows(harness):
    harness.add_story("s.yaml", ROWS)
    harness.run("s.yaml")
    events = [e for e in harness.events if e in ("before_examples", "example", "after_examples")]
    assert events == ["before_examples", "example", "example", "example", "after_examples"]
    rows = [e[1] for e in harness.reporter.events if e[0] == "example"]
    assert rows[1] == {"name": "r2", "result": "fails"}
    before = next(e for e in harness.reporter.events if e[0] == "before_examples")
    assert before[1] == ["Given step <name> <result>"]


def test_failing_row_without_reset_skips_later_rows(harness_factory):
    h = harness_factory(reset_state_before_scenario=False)
    h.add_story("s.yaml", ROWS)
    h.run("s.yaml")
    assert h.calls == ["r1", "r2"]
    assert h.outcomes == [
        ("successful", "Given step r1 passes"),
        ("failed", "Given step r2 fails"),
        ("not_performed", "Given step r3 passes"),
    ]


def test_skip_scenarios_after_failure_does_not_cut_rows_short(harness_factory):
    """The skip applies between scenarios; rows of the failing scenario are still reported."""
    h = harness_factory(reset_state_before_scenario=False, skip_scenarios_after_failure=True)
    h.add_story("s.yaml", ROWS + """
  - title: after
    steps:
      - Given step later passes
""")
    h.run("s.yaml")
    assert h.reporter.count("example") == 3
    assert ("not_performed", "Given step r3 passes") in h.outcomes
    assert "later" not in h.calls
    assert h.reporter.count("before_scenario") == 1


def test_scenario_hooks_run_per_row(harness):
    seen: list[str] = []
    harness.steps.before_scenario(lambda: seen.append("before"))
    harness.steps.after_scenario(lambda: seen.append("after"))

    @harness.steps.step("record $value")
    def record(value):
        seen.append(value)

    harness.add_story("s.yaml", """
scenarios:
  - steps: [Given record <v>]
    examples:
      - {v: one}
      - {v: two}
""")
    harness.run("s.yaml")
    assert seen == ["before", "one", "after", "before", "two", "after"]


# ================================================================
# Parameter precedence
# ================================================================


def test_row_value_overrides_meta(harness):
    harness.add_story("s.yaml", """
meta: {env: story, region: eu}
scenarios:
  - steps: [Given step <env>-<region> passes]
    examples:
      - {env: row}
""")
    harness.run("s.yaml")
    assert harness.calls == ["row-eu"]


def test_meta_values_fill_plain_scenarios(harness):
    harness.add_story("s.yaml", """
meta: {env: story}
scenarios:
  - meta: {region: us}
    steps: [Given step <env>-<region> passes]
""")
    harness.run("s.yaml")
    assert harness.calls == ["story-us"]


def test_typed_values_from_rows(harness):
    totals: list[int] = []

    @harness.steps.when("I add $a and $b")
    def add(a: int, b: int):
        totals.append(a + b)

    harness.add_story("s.yaml", """
scenarios:
  - steps: [When I add <a> and <b>]
    examples:
      - {a: 1, b: 2}
      - {a: 10, b: 20}
""")
    harness.run("s.yaml")
    assert totals == [3, 30]


# ================================================================
# Anchored given stories
# ================================================================


def test_anchored_given_story_uses_row_as_parameters(harness):
    harness.add_story("setup.yaml", """
scenarios:
  - steps: [Given step setup-<user> passes]
""")
    harness.add_story("s.yaml", """
scenarios:
  - given_stories: ["setup.yaml#{1}"]
    steps: [Then step main passes]
    examples:
      - {user: ann}
      - {user: bob}
""")
    harness.run("s.yaml")
    # one run of the scenario, not one per row
    assert harness.calls == ["setup-bob", "main"]
    assert harness.reporter.count("before_examples") == 0
