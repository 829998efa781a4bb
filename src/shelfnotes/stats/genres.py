"""Genre parsing for hierarchical category strings.

Category strings from book metadata look like "Fiction / Thriller / Noir"
or "Juvenile Fiction > Animals > General". The genre is the second-to-last
meaningful level and the subgenre the last one:

    "Fiction / Thriller"         -> genre "Thriller", no subgenre
    "Fiction / Thriller / Noir"  -> genre "Thriller", subgenre "Noir"
    "Fiction / General"          -> genre "Fiction", no subgenre
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..library.schemas import Book

# "/" plus every other separator seen in category data
_SEPARATORS = re.compile(r"[/>•|—–:]")

GENERIC_HEADS = frozenset({
    "fiction",
    "nonfiction",
    "juvenile fiction",
    "juvenile nonfiction",
    "young adult fiction",
    "young adult",
    "general",
})

GENERIC_LEAVES = frozenset({
    "general",
    "miscellaneous",
    "other",
})


@dataclass(frozen=True)
class ParsedGenre:
    """Result of parsing one category string."""

    genre: str
    subgenre: Optional[str] = None


def genre_tokens(raw: Optional[str]) -> list[str]:
    """Split a category string into trimmed, non-empty levels."""
    if raw is None:
        return []
    parts = _SEPARATORS.split(raw.strip())
    return [p.strip() for p in parts if p.strip()]


def is_generic_head(token: str) -> bool:
    return token.strip().lower() in GENERIC_HEADS


def is_generic_leaf(token: str) -> bool:
    return token.strip().lower() in GENERIC_LEAVES


def parse_genre(raw: Optional[str]) -> ParsedGenre:
    """Parse a category string into genre and optional subgenre.

    Generic trailing levels are dropped first, then generic leading
    levels; neither pass removes the last remaining token.
    """
    tokens = genre_tokens(raw)
    if not tokens:
        return ParsedGenre(genre="")

    trimmed = list(tokens)
    while len(trimmed) > 1 and is_generic_leaf(trimmed[-1]):
        trimmed.pop()
    while len(trimmed) > 1 and is_generic_head(trimmed[0]):
        trimmed.pop(0)

    if len(trimmed) == 1:
        return ParsedGenre(genre=trimmed[0])

    return ParsedGenre(genre=trimmed[-2], subgenre=trimmed[-1])


def _book_category_strings(book: Book) -> list[Optional[str]]:
    return [book.main_category, *book.categories]


def _append_unique(out: list[str], label: str) -> None:
    folded = label.casefold()
    if not any(existing.casefold() == folded for existing in out):
        out.append(label)


def extract_genres(book: Book) -> list[str]:
    """Distinct genres of a book (case-insensitive), in first-seen order."""
    out: list[str] = []
    for raw in _book_category_strings(book):
        genre = parse_genre(raw).genre.strip()
        if genre:
            _append_unique(out, genre)
    return out


def extract_subgenres(book: Book) -> list[str]:
    """Distinct subgenres of a book (case-insensitive), in first-seen order."""
    out: list[str] = []
    for raw in _book_category_strings(book):
        subgenre = parse_genre(raw).subgenre
        if subgenre and subgenre.strip():
            _append_unique(out, subgenre.strip())
    return out
