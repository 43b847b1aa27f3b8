import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Tuple, Union

from colored_logger import get_colored_logger
from markup import BlockParseError, PlaceholderSplicer, TagExtractor
from markup.blocks import PLACEHOLDER_PATTERN, ArticleMeta
from markup.errors import MetaParseError
from search.index_builder import ArticleStats, article_stats
from search.models import DocumentSource
from settings import Settings
from .content_converter import ContentConverter

logger = get_colored_logger(__name__)

_VALID_ID = re.compile(r"[\w][\w.-]*")


@dataclass(frozen=True)
class BuiltArticle:
    meta: ArticleMeta
    body_html: str
    page_html: str
    filename: str
    source_name: str
    date: str
    stats: ArticleStats
    block_errors: Tuple[BlockParseError, ...] = ()

    def to_index_source(self) -> DocumentSource:
        return DocumentSource(meta=self.meta, markup=self.body_html, url=self.filename, date=self.date)


class ArticleBuilder:
    """
    Builds one article: extract annotations, convert markdown, splice fragments
    back in and wrap the result in the page layout.

    MetaParseError and SpliceError propagate; they mean this article cannot be
    published. Malformed non-meta blocks only end up in block_errors.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[TagExtractor] = None,
        splicer: Optional[PlaceholderSplicer] = None,
    ):
        self.settings = settings or Settings()
        self.extractor = extractor or TagExtractor(self.settings.meta_defaults)
        self.splicer = splicer or PlaceholderSplicer()

    def build_file(self, path: Union[str, Path], today: Optional[str] = None) -> BuiltArticle:
        path = Path(path)
        logger.info("Processing %s", path.name)
        raw_text = path.read_text(encoding="utf-8")
        return self.build_text(raw_text, source_name=path.name, today=today)

    def build_text(
        self, raw_text: str, source_name: str = "<text>", today: Optional[str] = None
    ) -> BuiltArticle:
        today = today or date.today().isoformat()

        extraction = self.extractor.extract(raw_text, source_name=source_name)
        converted = ContentConverter.markdown_to_html(extraction.cleaned_body)
        body_html = self.splicer.splice(converted, extraction.blocks_by_kind)

        meta = extraction.meta
        if not _VALID_ID.fullmatch(meta.id):
            raise MetaParseError(source_name, f"id '{meta.id}' is not a valid file name slug")

        page_html = ContentConverter.render_page(
            meta,
            body_html,
            base_url=self.settings.base_url,
            site_title=self.settings.site_title,
            update_date=today,
        )

        if extraction.errors:
            logger.warning(
                "%s: %d annotation block(s) left as plain text",
                source_name,
                len(extraction.errors),
            )

        return BuiltArticle(
            meta=meta,
            body_html=body_html,
            page_html=page_html,
            filename=f"{meta.id}.html",
            source_name=source_name,
            date=today,
            stats=article_stats(PLACEHOLDER_PATTERN.sub("", extraction.cleaned_body)),
            block_errors=extraction.errors,
        )
