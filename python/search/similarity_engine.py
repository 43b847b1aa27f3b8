from typing import List

from colored_logger import get_colored_logger
from .errors import IndexUnavailableError, UnknownDocumentError
from .index_store import IndexStore, SearchIndex
from .models import IndexRecord, Number, SimilarityResult

logger = get_colored_logger(__name__)


class SimilarityEngine:
    """
    Related-article discovery from shared classification.

    similarity(source, candidate) =
        tag_weight   x (source tags found in candidate tags)
      + focus_weight x (source focus topics found in candidate focus topics)
      + genre_bonus  if genres match
      + author_bonus if authors match

    Counts run over the source's lists, so the measure is not symmetric:
    duplicates in the source count twice.
    """

    def __init__(
        self,
        store: IndexStore,
        tag_weight: Number = 5,
        focus_weight: Number = 3,
        genre_bonus: Number = 2,
        author_bonus: Number = 4,
    ):
        self.store = store
        self.tag_weight = tag_weight
        self.focus_weight = focus_weight
        self.genre_bonus = genre_bonus
        self.author_bonus = author_bonus

    def related(self, document_id: str, limit: int = 5) -> List[SimilarityResult]:
        """
        Articles related to document_id, most similar first.

        Returns an empty list when the index is unavailable or the id is unknown.
        """
        if limit <= 0:
            return []

        try:
            index = self.store.load()
            source = self._find_source(index, document_id)
        except IndexUnavailableError as e:
            logger.error("Search index unavailable: %s", e)
            return []
        except UnknownDocumentError as e:
            logger.info("%s, no related articles", e)
            return []

        scored = []
        for candidate in index.records:
            if candidate.id == source.id:
                continue
            similarity = self.similarity(source, candidate)
            if similarity > 0:
                scored.append(SimilarityResult(record=candidate, similarity=similarity))

        ranked = sorted(scored, key=lambda result: -result.similarity)
        return ranked[:limit]

    def similarity(self, source: IndexRecord, candidate: IndexRecord) -> Number:
        candidate_tags = set(candidate.tags)
        candidate_focus = set(candidate.focus_topics)

        shared_tags = sum(1 for tag in source.tags if tag in candidate_tags)
        shared_focus = sum(1 for focus in source.focus_topics if focus in candidate_focus)

        similarity = shared_tags * self.tag_weight + shared_focus * self.focus_weight
        if source.genre and source.genre == candidate.genre:
            similarity += self.genre_bonus
        if source.author and source.author == candidate.author:
            similarity += self.author_bonus
        return similarity

    @staticmethod
    def _find_source(index: SearchIndex, document_id: str) -> IndexRecord:
        record = index.get(document_id)
        if record is None:
            raise UnknownDocumentError(document_id)
        return record
