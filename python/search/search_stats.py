from typing import Any, Dict, List, Optional

from colored_logger import get_colored_logger
from io_ops.file_manager import FileManager

logger = get_colored_logger(__name__)


class SearchStats:
    """
    Per-term search counters kept in a small JSON file ({"searches": {term: count}}).

    Failures to read or write are logged and never raised to the caller.
    """

    def __init__(self, stats_path: str, default_popular: Optional[List[Dict[str, Any]]] = None):
        self.stats_path = stats_path
        self.default_popular = list(default_popular or [])

    def record_search(self, query: str) -> None:
        term = query.strip()
        if not term:
            return

        stats = self._load()
        searches = stats.setdefault("searches", {})
        searches[term] = int(searches.get(term, 0)) + 1

        try:
            FileManager.write_json(self.stats_path, stats)
        except OSError as e:
            logger.error("Failed to record search statistics: %s", e)

    def popular_searches(self, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Most searched terms, highest count first.

        Falls back to the configured default list while no statistics exist.
        """
        searches = self._load().get("searches")
        if not searches:
            return self.default_popular[:limit]

        ranked = sorted(searches.items(), key=lambda item: -item[1])
        return [{"term": term, "count": count} for term, count in ranked[:limit]]

    def _load(self) -> Dict[str, Any]:
        data = FileManager.read_json(self.stats_path)
        if not isinstance(data, dict) or not isinstance(data.get("searches", {}), dict):
            return {"searches": {}}
        searches = {
            str(term): count
            for term, count in data.get("searches", {}).items()
            if isinstance(count, int) and not isinstance(count, bool)
        }
        return {**data, "searches": searches}
