from typing import Dict, List, Mapping, Optional, Sequence

from colored_logger import get_colored_logger
from .errors import IndexUnavailableError
from .index_store import IndexStore
from .models import DEFAULT_FIELDS, IndexRecord, Number, QueryResult, SearchQuery, canonical_field

logger = get_colored_logger(__name__)

DEFAULT_FIELD_WEIGHTS: Dict[str, int] = {
    "title": 10,
    "tags": 5,
    "dse_focus": 3,
    "author": 2,
    "content": 1,
    "genre": 1,
}


class QueryEngine:
    """
    Weighted substring search over the published index.

    Scoring:
    - each requested field whose text contains the query (case-insensitive)
      adds that field's weight
    - importance x multiplier is added to every record
    - only records with at least one field match are returned

    Results are ordered by descending score; equal scores keep index order.
    Weights are fixed per engine, only the field set varies per query.
    """

    def __init__(
        self,
        store: IndexStore,
        field_weights: Optional[Mapping[str, Number]] = None,
        importance_multiplier: Number = 2,
        default_fields: Sequence[str] = DEFAULT_FIELDS,
    ):
        self.store = store
        weights = dict(DEFAULT_FIELD_WEIGHTS)
        for name, weight in (field_weights or {}).items():
            weights[canonical_field(name)] = weight
        self.field_weights = weights
        self.importance_multiplier = importance_multiplier
        self.default_fields = tuple(default_fields)

    def search(self, query: SearchQuery) -> List[QueryResult]:
        """
        Run a query against the current index.

        Returns:
            The requested page of QueryResult objects; an empty list for a blank
            query or when the index is unavailable
        """
        needle = query.text.strip().casefold()
        if not needle:
            logger.debug("Blank query, returning no results")
            return []

        try:
            index = self.store.load()
        except IndexUnavailableError as e:
            logger.error("Search index unavailable: %s", e)
            return []

        scored = []
        for record in index.records:
            score = self.score(record, needle, query.fields)
            if score is not None:
                scored.append(QueryResult(record=record, score=score))

        ranked = sorted(scored, key=lambda result: -result.score)
        page = ranked[query.offset : query.offset + query.limit]
        logger.debug(
            "Query %r matched %d records, returning %d", query.text, len(ranked), len(page)
        )
        return page

    def search_simple(
        self,
        text: str,
        limit: int = 10,
        offset: int = 0,
        fields: Optional[Sequence[str]] = None,
    ) -> List[QueryResult]:
        """Convenience wrapper building the SearchQuery."""
        query = SearchQuery(
            text=text,
            limit=limit,
            offset=offset,
            fields=self.default_fields if fields is None else fields,
        )
        return self.search(query)

    def score(self, record: IndexRecord, needle: str, fields: Sequence[str]) -> Optional[Number]:
        """
        Score one record, or None if no field matches.

        needle must already be stripped and casefolded.
        """
        score: Number = 0
        matched = False

        for name in fields:
            value = record.field_text(name)
            if value and needle in value.casefold():
                matched = True
                score += self.field_weights.get(name, 1)

        if not matched:
            return None

        score += (record.importance or 0) * self.importance_multiplier
        return score if score > 0 else None

    def suggest(self, text: str, limit: int = 5) -> List[str]:
        """
        Suggest titles, tags and focus topics that contain text.

        Candidates come from the top 20 search results, in ranking order.
        """
        needle = text.strip().casefold()
        if not needle:
            return []

        results = self.search_simple(text, limit=20)
        suggestions: Dict[str, None] = {}

        for result in results:
            record = result.record
            candidates = [record.title, *record.tags, *record.focus_topics]
            for candidate in candidates:
                if candidate and needle in candidate.casefold():
                    suggestions.setdefault(candidate, None)

        return list(suggestions)[:limit]
