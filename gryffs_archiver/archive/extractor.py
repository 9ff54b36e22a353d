"""
Field extractor for gryff detail pages.

Uses BeautifulSoup to locate the loosely structured text blocks of a
rendered detail page and regular expressions to pull typed fields out of
them.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from bs4 import BeautifulSoup, Tag, NavigableString
from bs4.element import PreformattedString

from ..config import FieldSelectors
from ..errors import ParseError
from ..utils.log import get_logger
from ..utils.constants import (
    TITLE_SELECTOR,
    SEPARATOR_SELECTOR,
    DESCRIPTION_SELECTOR,
    TEXT_BLOCK_SELECTOR,
)


# Elements whose boundaries separate words in rendered text
BLOCK_TAGS = {
    'address', 'article', 'aside', 'blockquote', 'br', 'dd', 'div', 'dl',
    'dt', 'fieldset', 'figcaption', 'figure', 'footer', 'form', 'h1', 'h2',
    'h3', 'h4', 'h5', 'h6', 'header', 'hr', 'li', 'main', 'nav', 'ol', 'p',
    'pre', 'section', 'table', 'tbody', 'td', 'tfoot', 'th', 'thead', 'tr',
    'ul',
}

# Elements that never contribute rendered text
SKIPPED_TAGS = {'script', 'style', 'noscript', 'template'}


@dataclass
class ExtractedFields:
    """Typed fields read from one detail page."""

    name: str
    species: str
    level: int
    experience: int
    wins: int
    losses: int
    hunting_experience: int
    description_html: str

    @property
    def total_battles(self) -> int:
        """Total battles fought, always derived from wins and losses."""
        return self.wins + self.losses


def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML with lxml, falling back to the builtin parser."""
    try:
        return BeautifulSoup(html, 'lxml')
    except Exception:
        # Fallback to html.parser if lxml fails
        return BeautifulSoup(html, 'html.parser')


def _collect_text(node: Tag, parts: List[str]) -> None:
    for child in node.children:
        if isinstance(child, Tag):
            if child.name in SKIPPED_TAGS:
                continue
            block = child.name in BLOCK_TAGS
            if block:
                parts.append(" ")
            _collect_text(child, parts)
            if block:
                parts.append(" ")
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            parts.append(str(child))


def element_text(element: Tag) -> str:
    """
    Get the visible text of an element with whitespace collapsed.

    Block-level children are separated by whitespace while inline markup
    is joined as-is, like the browser's rendered text.

    Args:
        element: Element to read

    Returns:
        Text with runs of whitespace folded into single spaces
    """
    parts: List[str] = []
    _collect_text(element, parts)
    return " ".join("".join(parts).split())


def normalize_name(title: str) -> str:
    """
    Strip the "Gryff - " prefix from a page title.

    Args:
        title: Raw page title text

    Returns:
        Bare gryff name; titles without the prefix are returned trimmed
    """
    return FieldExtractor.TITLE_PREFIX_PATTERN.sub('', title.strip())


class FieldExtractor:
    """
    Extracts typed fields from a rendered gryff detail page.

    Fields are scattered across free text rather than a clean schema, so
    each one is matched with a regular expression against the text of a
    known element or, for the stats blocks, the first matching text block.
    """

    TITLE_PREFIX_PATTERN = re.compile(r'^Gryff\s*-\s*', re.IGNORECASE)

    # "<species> Gryff Level <int> (<int> exp)"
    SEPARATOR_PATTERN = re.compile(
        r'^(.+?)\s+Gryff\s+Level\s+(\d+)\s+\((\d+)\s+exp\)',
        re.IGNORECASE
    )

    # "<int> Wins / <int> Losses"
    STATS_PATTERN = re.compile(r'(\d+)\s+Wins\s*/\s*(\d+)\s+Losses', re.IGNORECASE)

    # "<int> Hunting Exp"
    HUNTING_PATTERN = re.compile(r'(\d+)\s+Hunting\s+Exp', re.IGNORECASE)

    def __init__(self, selectors: Optional[FieldSelectors] = None):
        """
        Initialize the field extractor.

        Args:
            selectors: Optional scoped selectors for the stats blocks
        """
        self.selectors = selectors or FieldSelectors()
        self.logger = get_logger("extractor")

    def extract(self, html: str, description_html: Optional[str] = None) -> ExtractedFields:
        """
        Extract all fields from a rendered detail page.

        The description is stored as given when the caller read it from the
        live page. Otherwise it is re-serialized from the parsed document,
        which normalizes void tags and entities.

        Args:
            html: Rendered page HTML
            description_html: Raw inner HTML of the description container

        Returns:
            ExtractedFields for the page

        Raises:
            ParseError: If any required field is missing or malformed
        """
        soup = parse_html(html)

        name = self._extract_name(soup)
        species, level, experience = self._extract_separator(soup)
        wins, losses = self._extract_stats(soup)
        hunting_experience = self._extract_hunting(soup)
        serialized = self._extract_description(soup)
        if description_html is None:
            description_html = serialized

        fields = ExtractedFields(
            name=name,
            species=species,
            level=level,
            experience=experience,
            wins=wins,
            losses=losses,
            hunting_experience=hunting_experience,
            description_html=description_html,
        )

        self.logger.debug(
            f"Extracted {fields.name!r}: {fields.species} level {fields.level}, "
            f"{fields.wins}W/{fields.losses}L"
        )

        return fields

    def _extract_name(self, soup: BeautifulSoup) -> str:
        """Read and normalize the page title."""
        title = soup.select_one(TITLE_SELECTOR)
        if title is None:
            raise ParseError("name", f"title element {TITLE_SELECTOR!r} not found")
        return normalize_name(element_text(title))

    def _extract_separator(self, soup: BeautifulSoup):
        """Read species, level and experience from the separator block."""
        separator = soup.select_one(SEPARATOR_SELECTOR)
        if separator is None:
            raise ParseError("species", f"separator element {SEPARATOR_SELECTOR!r} not found")

        text = element_text(separator)
        match = self.SEPARATOR_PATTERN.match(text)
        if not match:
            raise ParseError("species", f"could not parse separator text: {text!r}")

        return match.group(1).strip(), int(match.group(2)), int(match.group(3))

    def _extract_stats(self, soup: BeautifulSoup):
        """Read the win and loss counts."""
        match = self._find_match(soup, self.STATS_PATTERN, self.selectors.stats, "wins/losses")
        if not match:
            raise ParseError("wins", "Wins/Losses block not found")
        return int(match.group(1)), int(match.group(2))

    def _extract_hunting(self, soup: BeautifulSoup) -> int:
        """Read the hunting experience."""
        match = self._find_match(soup, self.HUNTING_PATTERN, self.selectors.hunting, "hunting exp")
        if not match:
            raise ParseError("huntingExp", "Hunting Exp block not found")
        return int(match.group(1))

    def _extract_description(self, soup: BeautifulSoup) -> str:
        """Return the inner HTML of the description container."""
        description = soup.select_one(DESCRIPTION_SELECTOR)
        if description is None:
            raise ParseError(
                "descriptionHtml",
                f"description element {DESCRIPTION_SELECTOR!r} not found"
            )
        return description.decode_contents()

    def _find_match(
        self,
        soup: BeautifulSoup,
        pattern: Pattern,
        scoped_selector: Optional[str],
        label: str
    ) -> Optional[re.Match]:
        """
        Find the first text block matching a pattern.

        A configured scoped selector is tried first. Otherwise every text
        block is scanned in document order and the first match wins.

        Args:
            soup: Parsed page
            pattern: Pattern to search for
            scoped_selector: Optional selector of the element holding the field
            label: Field label for log messages

        Returns:
            The regex match, or None if no block matches
        """
        if scoped_selector:
            element = soup.select_one(scoped_selector)
            if element is not None:
                match = pattern.search(element_text(element))
                if match:
                    return match
            self.logger.debug(
                f"Scoped selector {scoped_selector!r} did not yield {label}, "
                f"scanning all text blocks"
            )

        blocks = soup.select(TEXT_BLOCK_SELECTOR)
        first = None
        for block in blocks:
            match = pattern.search(element_text(block))
            if match:
                first = match
                break

        if first is not None:
            self._warn_on_ambiguity(blocks, pattern, label)

        return first

    def _warn_on_ambiguity(self, blocks: List[Tag], pattern: Pattern, label: str) -> None:
        """Log a warning when innermost candidate blocks disagree."""
        values = set()
        for block in blocks:
            if not pattern.search(element_text(block)):
                continue
            # Ancestors always contain their descendants' text; only the
            # innermost matching blocks are independent candidates
            nested = any(
                pattern.search(element_text(child))
                for child in block.find_all(TEXT_BLOCK_SELECTOR)
            )
            if not nested:
                values.add(pattern.search(element_text(block)).groups())

        if len(values) > 1:
            self.logger.warning(
                f"{len(values)} different {label} blocks found, using the first one"
            )
