"""Structural parser for model-generated decision briefs.

Splits raw model output into ordered sections keyed on a fixed list of
headings. Heading detection is deliberately loose: a line counts as a
heading when its upper-cased, trimmed text *contains* a configured title,
so "## 1. Decision Being Made:" still matches "DECISION BEING MADE".
"""

from dataclasses import asdict, dataclass
from typing import Iterable, Optional, Sequence


@dataclass(frozen=True)
class SectionConfig:
    """A recognized heading and its presentation metadata."""
    title: str
    id: str
    icon: str
    color: str


@dataclass
class BriefSection:
    """One parsed section of a brief."""
    id: str
    title: str
    content: str
    icon: str
    color: str

    @classmethod
    def from_config(cls, config: SectionConfig) -> "BriefSection":
        return cls(
            id=config.id,
            title=config.title,
            content="",
            icon=config.icon,
            color=config.color,
        )

    def to_dict(self) -> dict:
        return asdict(self)


# Order matters: on overlapping titles the first entry wins.
DEFAULT_SECTION_CONFIG: tuple[SectionConfig, ...] = (
    SectionConfig("DECISION BEING MADE", "decision", "🎯", "blue"),
    SectionConfig("OPTIONS CONSIDERED", "options", "🔀", "purple"),
    SectionConfig("TRADEOFFS", "tradeoffs", "⚖️", "indigo"),
    SectionConfig("RECOMMENDED DECISION", "recommendation", "✅", "green"),
    SectionConfig("DECISION OWNER", "owner", "👤", "orange"),
    SectionConfig("RISKS & WATCHOUTS", "risks", "⚠️", "red"),
    SectionConfig("NEXT 3 ACTIONS", "actions", "📋", "teal"),
)

SECTION_TITLES: tuple[str, ...] = tuple(c.title for c in DEFAULT_SECTION_CONFIG)


def match_heading(
    line: str,
    configs: Iterable[SectionConfig] = DEFAULT_SECTION_CONFIG,
) -> Optional[SectionConfig]:
    """Return the first config whose title appears in ``line``.

    Matching is case-insensitive substring search on the trimmed line.
    """
    normalized = line.strip().upper()
    if not normalized:
        return None
    for config in configs:
        if config.title in normalized:
            return config
    return None


def _split_lines(text: str) -> list[str]:
    """Split on ``"\\n"`` only, dropping one trailing ``"\\r"`` per line.

    Other characters ``str.splitlines`` treats as breaks (form feed,
    ``\\u2028`` and so on) stay inside the line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_brief(
    text: str,
    configs: Sequence[SectionConfig] = DEFAULT_SECTION_CONFIG,
) -> list[BriefSection]:
    """Split brief text into sections in the order their headings appear.

    - Text before the first heading is discarded.
    - A heading with no body still yields a (empty) section.
    - Body lines, blank ones included, are kept verbatim with ``"\\n"``
      terminators.
    - A repeated heading starts a new, separate section.

    Returns an empty list when no heading matches. Whether that is
    acceptable is for the caller to decide.
    """
    sections: list[BriefSection] = []
    current: Optional[BriefSection] = None

    for line in _split_lines(text):
        matched = match_heading(line, configs)
        if matched is not None:
            if current is not None:
                sections.append(current)
            current = BriefSection.from_config(matched)
        elif current is not None:
            current.content += line + "\n"

    if current is not None:
        sections.append(current)

    return sections
