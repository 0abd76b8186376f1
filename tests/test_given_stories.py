"""Given stories: stories run inline before a scenario's own steps.

Covers:
- Inline run, reported as a given story, sharing the parent's reporter
- The given story starts in the parent's state and hands back only a failure;
  its scenarios never reset, so a failed parent stays failed
- Only the outermost story applies the failure strategy
- Relative and root-relative path resolution
- upon_given_story hooks, and skipping scenario hooks inside given stories
- Parameters passed to a given story
"""
from __future__ import annotations

import pytest

from story_runner.engine import RethrowingFailure
from story_runner.engine.failures import StoryNotFound
from story_runner.loading import AbsolutePathCalculator, RelativePathCalculator

LOGIN = """
scenarios:
  - title: login
    steps:
      - Given step login passes
"""

BROKEN_LOGIN = """
scenarios:
  - title: login
    steps:
      - Given step login fails
"""


def _main(given: str = "login.yaml") -> str:
    return f"""
scenarios:
  - title: main
    given_stories: ["{given}"]
    steps:
      - Then step main passes
"""


# ================================================================
# Inline execution
# ================================================================


def test_given_story_runs_before_scenario_steps(harness):
    harness.add_story("login.yaml", LOGIN)
    harness.add_story("main.yaml", _main())
    harness.run("main.yaml")

    assert harness.calls == ["login", "main"]
    before_stories = [e for e in harness.reporter.events if e[0] == "before_story"]
    assert [(e[1].path, e[2]) for e in before_stories] == [("main.yaml", False), ("login.yaml", True)]
    after_stories = [e[1] for e in harness.reporter.events if e[0] == "after_story"]
    assert after_stories == [True, False]


def test_given_stories_event_names_the_paths(harness):
    harness.add_story("login.yaml", LOGIN)
    harness.add_story("main.yaml", _main())
    harness.run("main.yaml")
    given = next(e[1] for e in harness.reporter.events if e[0] == "given_stories")
    assert given.paths == ["login.yaml"]
    # given stories run after the scenario is announced
    assert harness.events.index("given_stories") > harness.events.index("before_scenario")


def test_missing_given_story_raises(harness):
    harness.add_story("main.yaml", _main("nowhere.yaml"))
    error = harness.run_expecting_failure("main.yaml")
    assert isinstance(error, StoryNotFound)
    assert error.path == "nowhere.yaml"


# ================================================================
# State flows through given stories
# ================================================================


def test_given_story_inherits_failed_state(harness_factory):
    h = harness_factory(reset_state_before_scenario=False)
    h.add_story("login.yaml", LOGIN)
    h.add_story("main.yaml", """
scenarios:
  - title: breaks
    steps: [Given step early fails]
  - title: uses login
    given_stories: [login.yaml]
    steps: [Then step main passes]
""")
    h.run("main.yaml")
    assert h.calls == ["early"]
    assert h.outcomes == [
        ("failed", "Given step early fails"),
        ("not_performed", "Given step login passes"),
        ("not_performed", "Then step main passes"),
    ]


def test_reset_before_story_gives_given_story_a_fresh_start(harness_factory):
    h = harness_factory(reset_state_before_scenario=False, reset_state_before_story=True)
    h.add_story("login.yaml", LOGIN)
    h.add_story("main.yaml", """
scenarios:
  - steps: [Given step early fails]
  - given_stories: [login.yaml]
    steps: [Then step main passes]
""")
    h.run("main.yaml")
    assert h.calls == ["early", "login", "main"]


def test_given_story_failure_fails_parent_scenario(harness):
    harness.add_story("login.yaml", BROKEN_LOGIN)
    harness.add_story("main.yaml", _main())
    harness.run("main.yaml")
    assert harness.outcomes == [
        ("failed", "Given step login fails"),
        ("not_performed", "Then step main passes"),
    ]


def test_failed_parent_stays_failed_through_given_story(harness):
    setups: list[str] = []

    @harness.steps.before_scenario
    def setup():
        setups.append("setup")
        if len(setups) == 1:
            raise AssertionError("setup failed")

    harness.add_story("login.yaml", LOGIN)
    harness.add_story("main.yaml", _main())
    harness.run("main.yaml")
    assert "main" not in harness.calls
    hook, *steps = harness.outcomes
    assert hook[0] == "failed" and hook[1].endswith("setup")
    assert steps == [
        ("not_performed", "Given step login passes"),
        ("not_performed", "Then step main passes"),
    ]


def test_second_given_story_inherits_failure_of_first(harness):
    harness.add_story("broken.yaml", BROKEN_LOGIN)
    harness.add_story("login.yaml", LOGIN)
    harness.add_story("main.yaml", """
scenarios:
  - given_stories: [broken.yaml, login.yaml]
    steps: [Then step main passes]
""")
    harness.run("main.yaml")
    assert harness.calls == ["login"]
    assert harness.outcomes == [
        ("failed", "Given step login fails"),
        ("not_performed", "Given step login passes"),
        ("not_performed", "Then step main passes"),
    ]


def test_only_outer_story_applies_strategy(harness):
    harness.configuration.failure_strategy = RethrowingFailure()
    harness.add_story("login.yaml", BROKEN_LOGIN)
    harness.add_story("main.yaml", _main() + """
  - title: second
    steps:
      - Then step second passes
""")
    error = harness.run_expecting_failure("main.yaml")
    assert str(error) == "login failed"
    # the parent kept going after its given story failed
    assert harness.calls == ["login", "second"]
    assert harness.events[-1] == "after_story"
    assert harness.reporter.events[-1][1] is False


def test_given_story_failure_survives_later_pending(harness):
    """A failure inside a given story is the parent's failure: later pending steps do not hide it."""
    harness.configuration.failure_strategy = RethrowingFailure()
    harness.add_story("login.yaml", BROKEN_LOGIN)
    harness.add_story("main.yaml", _main() + """
  - title: pending
    steps:
      - Then nothing implements this
""")
    error = harness.run_expecting_failure("main.yaml")
    assert isinstance(error, AssertionError)


# ================================================================
# Paths and parameters
# ================================================================


def test_given_story_path_is_relative_to_parent(harness):
    harness.add_story("shared/login.yaml", LOGIN)
    harness.add_story("stories/main.yaml", _main("../shared/login.yaml"))
    harness.run("stories/main.yaml")
    assert harness.calls == ["login", "main"]


def test_root_relative_given_story_path(harness):
    harness.add_story("shared/login.yaml", LOGIN)
    harness.add_story("stories/deep/main.yaml", _main("/shared/login.yaml"))
    harness.run("stories/deep/main.yaml")
    assert harness.calls == ["login", "main"]


def test_path_calculators():
    assert RelativePathCalculator().calculate("a/b/main.yaml", "c.yaml") == "a/b/c.yaml"
    assert RelativePathCalculator().calculate("a/b/main.yaml", "../c.yaml") == "a/c.yaml"
    assert AbsolutePathCalculator().calculate("a/b/main.yaml", "x/c.yaml") == "x/c.yaml"


def test_given_story_parameters(harness):
    harness.add_story("login.yaml", """
scenarios:
  - steps: [Given step login-<user> passes]
""")
    harness.add_story("main.yaml", """
scenarios:
  - given_stories:
      - path: login.yaml
        parameters: {user: ann}
    steps: [Then step main passes]
""")
    harness.run("main.yaml")
    assert harness.calls == ["login-ann", "main"]


def test_nested_given_stories(harness):
    harness.add_story("a.yaml", LOGIN)
    harness.add_story("b.yaml", _main("a.yaml"))
    harness.add_story("c.yaml", _main("b.yaml"))
    harness.run("c.yaml")
    assert harness.calls == ["login", "main", "main"]
    assert harness.reporter.count("before_story") == 3


# ================================================================
# Hooks inside given stories
# ================================================================


def test_upon_given_story_hooks(harness):
    seen: list[str] = []
    harness.steps.before_story(lambda: seen.append("story"))
    harness.steps.before_story(upon_given_story=True)(lambda: seen.append("given"))
    harness.steps.after_story(upon_given_story=True)(lambda: seen.append("after given"))
    harness.add_story("login.yaml", LOGIN)
    harness.add_story("main.yaml", _main())
    harness.run("main.yaml")
    assert seen == ["story", "given", "after given"]


@pytest.mark.parametrize("skip, expected", [
    (False, ["before", "before", "after", "after"]),
    (True, ["before", "after"]),
])
def test_scenario_hooks_in_given_stories(harness_factory, skip, expected):
    h = harness_factory(skip_before_and_after_scenario_steps_if_given_story=skip)
    seen: list[str] = []
    h.steps.before_scenario(lambda: seen.append("before"))
    h.steps.after_scenario(lambda: seen.append("after"))
    h.add_story("login.yaml", LOGIN)
    h.add_story("main.yaml", _main())
    h.run("main.yaml")
    assert seen == expected
