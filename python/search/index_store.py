import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from packaging.version import InvalidVersion, Version

from colored_logger import get_colored_logger
from io_ops.file_manager import FileManager
from .errors import IndexUnavailableError
from .models import IndexRecord

logger = get_colored_logger(__name__)

INDEX_FORMAT_VERSION = "1.0"


@dataclass(frozen=True)
class SearchIndex:
    """An immutable snapshot of the published index."""

    records: Tuple[IndexRecord, ...]
    version: str = INDEX_FORMAT_VERSION
    created: str = ""

    @property
    def count(self) -> int:
        return len(self.records)

    def get(self, document_id: str) -> Optional[IndexRecord]:
        for record in self.records:
            if record.id == document_id:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "created": self.created,
            "count": self.count,
            "data": [record.to_dict() for record in self.records],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SearchIndex":
        """
        Parse a stored index.

        Entries that cannot be read are skipped with a warning; a payload that
        is not an index at all raises IndexUnavailableError.
        """
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise IndexUnavailableError("index has no 'data' list")

        version = str(data.get("version", INDEX_FORMAT_VERSION))
        check_format_version(version)

        records = []
        for position, entry in enumerate(data["data"]):
            try:
                records.append(IndexRecord.from_dict(entry))
            except ValueError as e:
                logger.warning("Skipping index entry %d: %s", position, e)

        return cls(records=tuple(records), version=version, created=str(data.get("created", "")))


def check_format_version(version: str) -> None:
    """Reject index files written by an incompatible (newer major) format."""
    try:
        stored = Version(version)
    except InvalidVersion as e:
        raise IndexUnavailableError(f"invalid index version '{version}'") from e

    if stored.major > Version(INDEX_FORMAT_VERSION).major:
        raise IndexUnavailableError(
            f"index version {version} is newer than supported {INDEX_FORMAT_VERSION}"
        )


class IndexStore:
    """
    Owns the published search index.

    publish() writes the whole index to a temporary file and swaps it into
    place with os.replace, then swaps the in-memory snapshot reference, so a
    reader sees either the old index or the new one. Readers only ever get
    immutable SearchIndex snapshots.
    """

    def __init__(self, index_path: Optional[str] = None):
        self.index_path = index_path
        self._snapshot: Optional[SearchIndex] = None
        self._snapshot_key: Optional[Tuple[int, int]] = None

    @classmethod
    def from_records(cls, records: Iterable[IndexRecord]) -> "IndexStore":
        """In-memory store (no file), mostly for tests and embedding."""
        store = cls()
        store._snapshot = SearchIndex(records=tuple(records), created=_now())
        return store

    def publish(self, records: Iterable[IndexRecord], created: Optional[str] = None) -> SearchIndex:
        """Replace the entire index with records."""
        snapshot = SearchIndex(records=tuple(records), created=created or _now())

        if self.index_path:
            FileManager.write_json(self.index_path, snapshot.to_dict())
            self._snapshot_key = self._file_key()
            logger.info("Published search index with %d records to %s", snapshot.count, self.index_path)

        self._snapshot = snapshot
        return snapshot

    def load(self) -> SearchIndex:
        """
        Return the current snapshot, re-reading the file if it changed on disk.

        Raises:
            IndexUnavailableError: if the index is missing, unreadable or malformed
        """
        if not self.index_path:
            if self._snapshot is None:
                raise IndexUnavailableError("no index has been published")
            return self._snapshot

        key = self._file_key()
        if key is None:
            raise IndexUnavailableError(f"index file not found: {self.index_path}")

        if self._snapshot is not None and key == self._snapshot_key:
            return self._snapshot

        data = FileManager.read_json(self.index_path)
        if data is None:
            raise IndexUnavailableError(f"index file unreadable: {self.index_path}")

        snapshot = SearchIndex.from_dict(data)
        self._snapshot = snapshot
        self._snapshot_key = key
        logger.debug("Loaded search index with %d records", snapshot.count)
        return snapshot

    def _file_key(self) -> Optional[Tuple[int, int]]:
        try:
            stat = os.stat(self.index_path)
        except OSError:
            return None
        return (stat.st_mtime_ns, stat.st_size)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
