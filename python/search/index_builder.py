import math
import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from colored_logger import get_colored_logger
from processing.content_converter import ContentConverter
from .models import DocumentSource, IndexRecord

logger = get_colored_logger(__name__)

ELLIPSIS = "..."
WORDS_PER_MINUTE = 200

_COMMENT = re.compile(r"<!--.*?(?:-->|$)", re.DOTALL)
_SCRIPT_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?(?:</\1\s*>|$)", re.DOTALL | re.IGNORECASE)
_HEADERLINK = re.compile(r'<a\b[^>]*\bclass="headerlink"[^>]*>.*?</a\s*>', re.DOTALL | re.IGNORECASE)
# A tag starts with '<' + letter, '/', '!' or '?', and ends at '>', before the next '<', or at EOF
_TAG = re.compile(r"<[A-Za-z/!?][^<>]*(?:>|(?=<)|$)")
_WHITESPACE = re.compile(r"\s+")
_MARKDOWN_PUNCTUATION = re.compile(r"[#*`\[\]()]")
_HEADING = re.compile(r"^#{1,6}\s", re.MULTILINE)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

_ZWJ = "\u200d"


def extract_plain_text(markup: str) -> str:
    """
    Strip markup down to plain text.

    Tag removal is a tolerant scan: a stray '<' in prose is kept, and an
    unterminated tag only swallows text up to the next '<'.
    """
    if not markup:
        return ""
    text = _COMMENT.sub(" ", markup)
    text = _HEADERLINK.sub("", text)
    text = _SCRIPT_STYLE.sub(" ", text)
    text = _TAG.sub(" ", text)
    text = ContentConverter.decode_html_entities(text)
    return _WHITESPACE.sub(" ", text).strip()


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def _continues_cluster(text: str, index: int) -> bool:
    """True if text[index] belongs to the same grapheme cluster as text[index - 1]."""
    ch = text[index]
    prev = text[index - 1]
    code = ord(ch)

    if prev == "\r" and ch == "\n":
        return True
    if unicodedata.category(ch) in ("Mn", "Me", "Mc"):
        return True
    if ch == _ZWJ or prev == _ZWJ:
        return True
    if 0xFE00 <= code <= 0xFE0F or 0xE0100 <= code <= 0xE01EF:  # variation selectors
        return True
    if 0x1F3FB <= code <= 0x1F3FF:  # emoji skin tone modifiers
        return True
    if 0xE0020 <= code <= 0xE007F:  # emoji tag sequences
        return True
    if _is_regional_indicator(ch) and _is_regional_indicator(prev):
        run = 0
        i = index - 1
        while i >= 0 and _is_regional_indicator(text[i]):
            run += 1
            i -= 1
        return run % 2 == 1
    return False


def truncate_text(text: str, max_length: int, ellipsis: str = ELLIPSIS) -> str:
    """
    Hard-truncate text to at most max_length characters including the ellipsis.

    The cut is moved back so it never lands inside a grapheme cluster.
    """
    if len(text) <= max_length:
        return text

    cut = max(max_length - len(ellipsis), 0)
    while 0 < cut < len(text) and _continues_cluster(text, cut):
        cut -= 1
    return text[:cut].rstrip() + ellipsis


def make_excerpt(text: str, max_length: int = 150) -> str:
    plain = _MARKDOWN_PUNCTUATION.sub("", text)
    plain = _WHITESPACE.sub(" ", plain).strip()
    return truncate_text(plain, max_length)


def count_words(text: str) -> int:
    return len(text.split())


@dataclass(frozen=True)
class ArticleStats:
    words: int
    paragraphs: int
    headings: int
    reading_time: int  # minutes


def article_stats(markdown_text: str) -> ArticleStats:
    """Rough size statistics for an article's markdown body."""
    stripped = markdown_text.strip()
    words = count_words(stripped)
    paragraphs = len(_PARAGRAPH_BREAK.findall(stripped)) + 1 if stripped else 0
    return ArticleStats(
        words=words,
        paragraphs=paragraphs,
        headings=len(_HEADING.findall(markdown_text)),
        reading_time=math.ceil(words / WORDS_PER_MINUTE),
    )


class IndexBuilder:
    """
    Turns built articles into index records.

    Every call to build() produces a complete record list; there is no
    incremental update path.
    """

    def __init__(
        self,
        excerpt_length: int = 150,
        content_sample_length: int = 500,
    ):
        self.excerpt_length = excerpt_length
        self.content_sample_length = content_sample_length

    def build(
        self, documents: Iterable[DocumentSource], today: Optional[str] = None
    ) -> List[IndexRecord]:
        """
        Build index records for documents, in input order.

        A document whose id was already seen is skipped and logged.
        """
        today = today or date.today().isoformat()
        records: List[IndexRecord] = []
        seen = set()

        for document in documents:
            if document.meta.id in seen:
                logger.error("Skipping duplicate document id in index: %s", document.meta.id)
                continue
            seen.add(document.meta.id)
            records.append(self.build_record(document, today))

        logger.info("Built %d index records", len(records))
        return records

    def build_record(self, document: DocumentSource, today: Optional[str] = None) -> IndexRecord:
        meta = document.meta
        plain_text = extract_plain_text(document.markup)

        return IndexRecord(
            id=meta.id,
            title=meta.title,
            author=meta.author,
            genre=meta.genre,
            tags=tuple(meta.tags),
            focus_topics=tuple(meta.focus_topics),
            content=truncate_text(plain_text, self.content_sample_length, ellipsis=""),
            excerpt=make_excerpt(plain_text, self.excerpt_length),
            url=document.url,
            date=document.date or today or date.today().isoformat(),
            importance=meta.importance,
            word_count=count_words(plain_text),
        )
