"""
Business name extraction from rendered page text.

Pages on the case tool declare themselves with a line such as
``3007608：株式会社Example``.  Headings are tried before body text, and the
expected case number before any other 7-digit number.
"""

import logging
import re
from typing import Iterable, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

# Half-width, full-width, small and vertical-form colons
COLON_CLASS = '[:：﹕︓]'
# Any whitespace, including no-break spaces and a line break after the colon
_SPACE = r'\s*'

GENERIC_ID_PATTERN = re.compile(
    r'(?<!\d)(\d{7})(?!\d)' + _SPACE + COLON_CLASS + _SPACE + r'(.+)'
)


class TextExtractionStrategy(Protocol):
    """Turns rendered page text into a business name."""

    def extract(
        self,
        heading_texts: Sequence[str],
        body_text: str,
        expected_id: str,
    ) -> Optional[str]:
        ...


def build_id_pattern(expected_id: str) -> re.Pattern:
    """Pattern for ``<expected_id><colon><name>``; the id is matched literally."""
    return re.compile(
        r'(?<!\d)' + re.escape(expected_id) + r'(?!\d)'
        + _SPACE + COLON_CLASS + _SPACE
        + r'(.+)'
    )


def _first_capture(pattern: re.Pattern, text: str, group: int) -> Optional[str]:
    for match in pattern.finditer(text or ''):
        name = match.group(group).strip()
        if name:
            return name
    return None


def _scan(pattern: re.Pattern, texts: Iterable[str], group: int) -> Optional[str]:
    for text in texts:
        name = _first_capture(pattern, text, group)
        if name:
            return name
    return None


class NameExtractor:
    """Heading-first, body-fallback regex extraction.

    Order of attempts (first hit wins):

    1. ``expected_id`` pattern over each heading, in document order
    2. any 7-digit id over the headings, then over the body
    3. ``expected_id`` pattern over the body
    """

    def extract(
        self,
        heading_texts: Sequence[str],
        body_text: str,
        expected_id: str,
    ) -> Optional[str]:
        headings = [h for h in (heading_texts or []) if h]
        expected_id = (expected_id or '').strip()
        id_pattern = build_id_pattern(expected_id) if expected_id else None

        if id_pattern is not None:
            name = _scan(id_pattern, headings, 1)
            if name:
                logger.debug("Matched %s in headings", expected_id)
                return name

        name = _scan(GENERIC_ID_PATTERN, headings, 2)
        if name is None:
            name = _first_capture(GENERIC_ID_PATTERN, body_text, 2)
        if name:
            logger.debug("Matched generic 7-digit id (expected %r)", expected_id)
            return name

        if id_pattern is not None:
            name = _first_capture(id_pattern, body_text, 1)
            if name:
                logger.debug("Matched %s in body", expected_id)
                return name

        return None


def extract_name(
    heading_texts: Sequence[str], body_text: str, expected_id: str
) -> Optional[str]:
    """Convenience wrapper around the default :class:`NameExtractor`."""
    return NameExtractor().extract(heading_texts, body_text, expected_id)
