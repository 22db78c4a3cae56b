"""Required-heading check applied to model output before it is returned."""

from typing import Iterable

from briefgate.app.services.brief_parser import SECTION_TITLES


REQUIRED_HEADINGS: tuple[str, ...] = SECTION_TITLES


def find_missing_headings(
    text: str,
    required: Iterable[str] = REQUIRED_HEADINGS,
) -> list[str]:
    """Return the required headings that do not appear anywhere in ``text``."""
    upper_text = text.upper()
    return [heading for heading in required if heading.upper() not in upper_text]


def is_valid_brief(text: str, required: Iterable[str] = REQUIRED_HEADINGS) -> bool:
    return not find_missing_headings(text, required)
