"""Order-independent structural signature of a book collection.

Each book is hashed on its own; the per-book digests are combined with XOR
and a modular sum so the result does not depend on iteration order. The
hash covers the fields aggregations read, at day resolution for dates, and
only the number of sessions per book. Session edits that keep the count
must be signalled through SignatureCache.invalidate().
"""

import hashlib
from typing import Iterable, Optional

from ..library.schemas import RATING_CRITERIA, Book

_MASK = (1 << 64) - 1
_FIELD_SEP = "\x1f"
_LIST_SEP = "\x1e"


def _text(value: Optional[object]) -> str:
    if value is None:
        return ""
    return str(value)


def book_fingerprint(book: Book) -> str:
    """Canonical text form of the fields that affect aggregation results."""
    fields = [
        book.id,
        book.status.value,
        book.read_from.isoformat() if book.read_from else "",
        book.read_to.isoformat() if book.read_to else "",
        _text(book.page_count),
        book.author,
        _text(book.publisher),
        _text(book.language),
        _text(book.main_category),
        *(str(getattr(book, name)) for name in RATING_CRITERIA),
        _LIST_SEP.join(sorted(book.categories)),
        _LIST_SEP.join(sorted(book.tags)),
        str(len(book.sessions)),
    ]
    return _FIELD_SEP.join(fields)


def book_digest(book: Book) -> int:
    """64-bit BLAKE2b digest of a book's fingerprint."""
    digest = hashlib.blake2b(book_fingerprint(book).encode("utf-8"), digest_size=8)
    return int.from_bytes(digest.digest(), "big")


def books_signature(books: Iterable[Book]) -> str:
    """Signature of a collection; equal for any ordering of the same books.

    Returns:
        Hex string combining count, XOR and sum accumulators
    """
    count = 0
    xor_acc = 0
    sum_acc = 0
    for book in books:
        h = book_digest(book)
        count += 1
        xor_acc ^= h
        sum_acc = (sum_acc + h) & _MASK
    return f"{count:x}-{xor_acc:016x}-{sum_acc:016x}"
