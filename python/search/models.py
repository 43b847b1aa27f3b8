from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from markup.blocks import ArticleMeta

Number = Union[int, float]

# Field names as stored in the index file
SEARCHABLE_FIELDS = ("title", "tags", "dse_focus", "author", "content", "genre")
DEFAULT_FIELDS = ("title", "content", "tags")
FIELD_ALIASES = {
    "focusTopics": "dse_focus",
    "focus_topics": "dse_focus",
}


def canonical_field(name: str) -> str:
    """Map a query field name (including the focus-topic aliases) to its index name."""
    name = FIELD_ALIASES.get(name, name)
    if name not in SEARCHABLE_FIELDS:
        raise ValueError(
            f"Unknown search field '{name}'. Expected one of: {', '.join(SEARCHABLE_FIELDS)}"
        )
    return name


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    return ()


@dataclass(frozen=True)
class DocumentSource:
    """A built article as the index builder sees it."""

    meta: ArticleMeta
    markup: str
    url: str
    date: Optional[str] = None


@dataclass(frozen=True)
class IndexRecord:
    """
    Read-only search projection of one article.

    Serialized with the index file's field names: `dse_focus` for focus_topics
    and `wordCount` for word_count. Unknown fields found in a stored index are
    kept in `extra` and written back unchanged.
    """

    id: str
    title: str
    author: str = ""
    genre: str = ""
    tags: Tuple[str, ...] = ()
    focus_topics: Tuple[str, ...] = ()
    content: str = ""
    excerpt: str = ""
    url: str = ""
    date: str = ""
    importance: Number = 0
    word_count: int = 0
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    _KNOWN_KEYS = (
        "id", "title", "author", "genre", "tags", "dse_focus", "focusTopics",
        "content", "excerpt", "url", "date", "importance", "wordCount",
    )

    def field_text(self, name: str) -> str:
        """Searchable text of an index field; list fields are joined with spaces."""
        if name == "dse_focus":
            return " ".join(self.focus_topics)
        if name == "tags":
            return " ".join(self.tags)
        value = getattr(self, name, "")
        return "" if value is None else str(value)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "title": self.title,
                "author": self.author,
                "genre": self.genre,
                "tags": list(self.tags),
                "dse_focus": list(self.focus_topics),
                "content": self.content,
                "excerpt": self.excerpt,
                "url": self.url,
                "date": self.date,
                "importance": self.importance,
                "wordCount": self.word_count,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexRecord":
        """
        Build a record from a stored index entry.

        Raises:
            ValueError: if the entry is not an object or has no id
        """
        if not isinstance(data, dict):
            raise ValueError("index entry is not an object")
        record_id = data.get("id")
        if record_id is None or str(record_id) == "":
            raise ValueError("index entry has no id")

        importance = data.get("importance", 0)
        if isinstance(importance, bool) or not isinstance(importance, (int, float)):
            importance = 0
        word_count = data.get("wordCount", 0)
        if isinstance(word_count, bool) or not isinstance(word_count, int):
            word_count = 0

        return cls(
            id=str(record_id),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            genre=str(data.get("genre") or ""),
            tags=_as_tuple(data.get("tags")),
            focus_topics=_as_tuple(data.get("dse_focus", data.get("focusTopics"))),
            content=str(data.get("content") or ""),
            excerpt=str(data.get("excerpt") or ""),
            url=str(data.get("url") or ""),
            date=str(data.get("date") or ""),
            importance=importance,
            word_count=word_count,
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )


@dataclass(frozen=True)
class SearchQuery:
    """
    Free-text query with pagination and the fields to match against.

    Raises ValueError on a negative limit/offset or an unknown field name.
    """

    text: str = ""
    limit: int = 10
    offset: int = 0
    fields: Sequence[str] = DEFAULT_FIELDS

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError("limit must not be negative")
        if self.offset < 0:
            raise ValueError("offset must not be negative")
        fields = (self.fields,) if isinstance(self.fields, str) else self.fields
        canonical = tuple(dict.fromkeys(canonical_field(name) for name in fields))
        object.__setattr__(self, "fields", canonical)


@dataclass(frozen=True)
class QueryResult:
    record: IndexRecord
    score: Number

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["score"] = self.score
        return data


@dataclass(frozen=True)
class SimilarityResult:
    record: IndexRecord
    similarity: Number

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["similarity"] = self.similarity
        return data
