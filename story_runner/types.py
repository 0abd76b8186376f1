from __future__ import annotations

from dataclasses import dataclass, field

# ─── Meta ───

@dataclass(frozen=True)
class Meta:
    properties: dict[str, str | None] = field(default_factory=dict)

    def property_names(self) -> list[str]:
        return list(self.properties)

    def has(self, name: str) -> bool:
        return name in self.properties

    def get(self, name: str) -> str:
        value = self.properties.get(name)
        return "" if value is None else value

    def is_empty(self) -> bool:
        return not self.properties

    def inherit_from(self, parent: Meta) -> Meta:
        """Merge with parent properties; our own values win on conflicts."""
        return Meta({**parent.properties, **self.properties})

    def as_parameters(self) -> dict[str, str]:
        return {name: self.get(name) for name in self.properties}


EMPTY_META = Meta()

# ─── Story IR (parsed from YAML) ───

@dataclass(frozen=True)
class Narrative:
    in_order_to: str = ""
    as_a: str = ""
    i_want_to: str = ""

    def is_empty(self) -> bool:
        return not (self.in_order_to or self.as_a or self.i_want_to)


@dataclass
class ExamplesTable:
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def headers(self) -> list[str]:
        names: list[str] = []
        for row in self.rows:
            for key in row:
                if key not in names:
                    names.append(key)
        return names

    def row(self, index: int) -> dict[str, str]:
        return dict(self.rows[index])


@dataclass
class GivenStory:
    path: str
    anchor: str | None = None  # "path#{0}" -> "0", index into the examples table
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def has_anchor(self) -> bool:
        return bool(self.anchor)


@dataclass
class GivenStories:
    stories: list[GivenStory] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return [s.path for s in self.stories]

    def requires_parameters(self) -> bool:
        return any(s.has_anchor for s in self.stories)

    def use_examples_table(self, table: ExamplesTable) -> None:
        for story in self.stories:
            if not story.has_anchor:
                continue
            index = int(story.anchor)
            if 0 <= index < table.row_count:
                story.parameters = table.row(index)


@dataclass
class Scenario:
    title: str = ""
    steps: list[str] = field(default_factory=list)
    meta: Meta = EMPTY_META
    examples: ExamplesTable = field(default_factory=ExamplesTable)
    given_stories: GivenStories = field(default_factory=GivenStories)


@dataclass
class Story:
    path: str = ""
    description: str = ""
    narrative: Narrative = field(default_factory=Narrative)
    meta: Meta = EMPTY_META
    scenarios: list[Scenario] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1] if self.path else ""
