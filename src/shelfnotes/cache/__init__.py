"""Signature-keyed caching of aggregation results."""

from .manager import CacheKey, HeatmapReport, InsightsService, SignatureCache
from .signature import book_digest, books_signature

__all__ = [
    "CacheKey",
    "HeatmapReport",
    "InsightsService",
    "SignatureCache",
    "book_digest",
    "books_signature",
]
