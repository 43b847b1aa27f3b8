"""
Annotation block kinds, payload schemas and placeholder tokens.

Every kind that can appear inside an article is a member of BlockKind. Payload
classes validate the decoded JSON (or text) of one block and raise ValueError
with a short reason when a required field is missing or has the wrong type.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


class BlockKind(Enum):
    META = "meta"
    QUIZ = "quiz"
    MEMORY_CARD = "memory-card"
    EXERCISE = "exercise"
    CALLOUT = "dse-important"

    @property
    def marker(self) -> str:
        return "@" + self.value

    @property
    def is_json(self) -> bool:
        return self is not BlockKind.CALLOUT


# Kinds that are excised and later spliced back, in splice order
CONTENT_KINDS: Tuple[BlockKind, ...] = (
    BlockKind.QUIZ,
    BlockKind.MEMORY_CARD,
    BlockKind.EXERCISE,
    BlockKind.CALLOUT,
)

PLACEHOLDER_PATTERN = re.compile(r"<!--\s*annotation:([a-z-]+):(\d+)\s*-->")

DEFAULT_META: Dict[str, Any] = {
    "title": "未命名文章",
    "author": "佚名",
    "source": "未知",
    "genre": "未知體裁",
    "importance": 3,
}

REQUIRED_META_FIELDS = ("id", "title", "author", "source")


@dataclass(frozen=True)
class PlaceholderToken:
    kind: BlockKind
    ordinal: int

    def render(self) -> str:
        return f"<!-- annotation:{self.kind.value}:{self.ordinal} -->"

    def __str__(self) -> str:
        return self.render()


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"missing or empty '{key}'")
    return value


def _require_object(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be an object")
    return value


def _optional_points(value: Any) -> Optional[Union[int, float, str]]:
    # 0 is a real score; only absent, blank or non-scalar values are dropped
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _string_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    return ()


@dataclass(frozen=True)
class ArticleMeta:
    """Identity and classification of one article, taken from its @meta block."""

    id: str
    title: str
    author: str
    source: str
    genre: str
    tags: Tuple[str, ...] = ()
    focus_topics: Tuple[str, ...] = ()
    importance: Union[int, float] = 3
    missing_fields: Tuple[str, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(
        cls,
        data: Dict[str, Any],
        source_name: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> "ArticleMeta":
        defaults = {**DEFAULT_META, **(defaults or {})}
        missing = tuple(name for name in REQUIRED_META_FIELDS if not data.get(name))

        fallback_id = Path(source_name).stem if source_name else "untitled"
        importance = data.get("importance", defaults["importance"])
        if isinstance(importance, bool) or not isinstance(importance, (int, float)):
            importance = defaults["importance"]

        known = {"id", "title", "author", "source", "genre", "tags", "dse_focus",
                 "focusTopics", "importance"}

        return cls(
            id=str(data.get("id") or fallback_id),
            title=str(data.get("title") or defaults["title"]),
            author=str(data.get("author") or defaults["author"]),
            source=str(data.get("source") or defaults["source"]),
            genre=str(data.get("genre") or defaults["genre"]),
            tags=_string_tuple(data.get("tags")),
            focus_topics=_string_tuple(data.get("dse_focus", data.get("focusTopics"))),
            importance=importance,
            missing_fields=missing,
            extra={k: v for k, v in data.items() if k not in known},
        )

    @classmethod
    def empty(
        cls, source_name: Optional[str] = None, defaults: Optional[Dict[str, Any]] = None
    ) -> "ArticleMeta":
        return cls.from_payload({}, source_name, defaults)


@dataclass(frozen=True)
class QuizOption:
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class Quiz:
    question: str
    options: Tuple[QuizOption, ...]
    explanation: str
    points: Optional[Union[int, float, str]] = None

    @classmethod
    def from_payload(cls, data: Any) -> "Quiz":
        if not isinstance(data, dict):
            raise ValueError("quiz payload must be an object")

        raw_options = data.get("options")
        if not isinstance(raw_options, list) or not raw_options:
            raise ValueError("missing or empty 'options'")

        options: List[QuizOption] = []
        for i, option in enumerate(raw_options):
            if not isinstance(option, dict) or not isinstance(option.get("text"), str):
                raise ValueError(f"option {i} must be an object with 'text'")
            correct = option.get("correct", option.get("isCorrect", False))
            options.append(QuizOption(text=option["text"], is_correct=bool(correct)))

        return cls(
            question=_require_str(data, "question"),
            options=tuple(options),
            explanation=_require_str(data, "explanation"),
            points=_optional_points(data.get("points")),
        )


@dataclass(frozen=True)
class CardFace:
    title: str
    content: str
    footer: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "CardFace":
        footer = data.get("footer")
        return cls(
            title=_require_str(data, "title"),
            content=_require_str(data, "content"),
            footer=str(footer) if footer else None,
        )


@dataclass(frozen=True)
class MemoryCard:
    front: CardFace
    back: CardFace

    @classmethod
    def from_payload(cls, data: Any) -> "MemoryCard":
        if not isinstance(data, dict):
            raise ValueError("memory-card payload must be an object")
        return cls(
            front=CardFace.from_payload(_require_object(data, "front")),
            back=CardFace.from_payload(_require_object(data, "back")),
        )


@dataclass(frozen=True)
class Exercise:
    type: str
    questions: Tuple[str, ...]
    title: Optional[str] = None

    SUPPORTED_TYPES = ("self-check",)

    @classmethod
    def from_payload(cls, data: Any) -> "Exercise":
        if not isinstance(data, dict):
            raise ValueError("exercise payload must be an object")

        exercise_type = data.get("type", "self-check")
        if exercise_type not in cls.SUPPORTED_TYPES:
            raise ValueError(f"unsupported exercise type '{exercise_type}'")

        questions = data.get("questions")
        if (
            not isinstance(questions, list)
            or not questions
            or not all(isinstance(q, str) for q in questions)
        ):
            raise ValueError("'questions' must be a non-empty list of strings")

        title = data.get("title")
        return cls(type=exercise_type, questions=tuple(questions), title=title or None)


@dataclass(frozen=True)
class Callout:
    content: str

    @classmethod
    def from_payload(cls, data: Any) -> "Callout":
        if not isinstance(data, str) or not data.strip():
            raise ValueError("callout text is empty")
        return cls(content=data.strip())


Payload = Union[Quiz, MemoryCard, Exercise, Callout]

PAYLOAD_SCHEMAS = {
    BlockKind.QUIZ: Quiz,
    BlockKind.MEMORY_CARD: MemoryCard,
    BlockKind.EXERCISE: Exercise,
    BlockKind.CALLOUT: Callout,
}


def parse_payload(kind: BlockKind, data: Any) -> Payload:
    """Validate decoded block data against the schema for its kind."""
    return PAYLOAD_SCHEMAS[kind].from_payload(data)


@dataclass(frozen=True)
class AnnotationBlock:
    kind: BlockKind
    ordinal: int
    payload: Payload
    line: int
    raw_text: str = ""

    @property
    def token(self) -> PlaceholderToken:
        return PlaceholderToken(self.kind, self.ordinal)
