"""
Article Search Module

Builds the search index for the published articles and serves ranked
search and related-article lookups from it.

Key Components:
- IndexBuilder: Converts built articles into bounded index records
- IndexStore: Publishes the index atomically and loads read-only snapshots
- QueryEngine: Weighted substring search with pagination and suggestions
- SimilarityEngine: Related articles from shared tags, focus topics, genre, author
- SearchStats: Search term counters and popular searches
"""

from .errors import (
    DuplicateDocumentError,
    IndexUnavailableError,
    SearchIndexError,
    UnknownDocumentError,
)
from .models import DocumentSource, IndexRecord, QueryResult, SearchQuery, SimilarityResult
from .index_builder import IndexBuilder, article_stats, extract_plain_text, make_excerpt
from .index_store import IndexStore, SearchIndex
from .query_engine import QueryEngine
from .similarity_engine import SimilarityEngine
from .search_stats import SearchStats

__all__ = [
    "DuplicateDocumentError",
    "IndexUnavailableError",
    "SearchIndexError",
    "UnknownDocumentError",
    "DocumentSource",
    "IndexRecord",
    "QueryResult",
    "SearchQuery",
    "SimilarityResult",
    "IndexBuilder",
    "article_stats",
    "extract_plain_text",
    "make_excerpt",
    "IndexStore",
    "SearchIndex",
    "QueryEngine",
    "SimilarityEngine",
    "SearchStats",
]
