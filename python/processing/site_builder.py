import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from colored_logger import get_colored_logger
from io_ops.file_manager import FileManager
from markup.errors import AnnotationError
from search.errors import DuplicateDocumentError
from search.index_builder import IndexBuilder
from search.index_store import IndexStore
from settings import Settings
from .article_builder import ArticleBuilder, BuiltArticle

logger = get_colored_logger(__name__)


@dataclass(frozen=True)
class BuildFailure:
    source_name: str
    error_type: str
    message: str


@dataclass
class BuildReport:
    articles: List[BuiltArticle] = field(default_factory=list)
    failures: List[BuildFailure] = field(default_factory=list)
    indexed: int = 0
    index_path: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def block_error_count(self) -> int:
        return sum(len(article.block_errors) for article in self.articles)


class SiteBuilder:
    """
    Builds every article in the articles directory and publishes the search index.

    Articles are processed one at a time in file-name order. A failing article
    is reported and left out of the output and the index; the rest of the batch
    carries on. The index is rebuilt from scratch on every run.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        articles_dir: Optional[str] = None,
        output_dir: Optional[str] = None,
    ):
        self.settings = settings or Settings()
        self.articles_dir = articles_dir or self.settings.articles_dir
        self.output_dir = output_dir or self.settings.output_dir
        self.article_builder = ArticleBuilder(self.settings)
        self.index_builder = IndexBuilder(
            excerpt_length=self.settings.excerpt_length,
            content_sample_length=self.settings.content_sample_length,
        )
        self.store = IndexStore(os.path.join(self.output_dir, self.settings.index_file))

    def build(self, today: Optional[str] = None) -> BuildReport:
        today = today or date.today().isoformat()
        report = BuildReport(index_path=self.store.index_path)

        files = FileManager.list_articles(self.articles_dir)
        logger.info("Found %d articles in %s", len(files), self.articles_dir)

        seen: Dict[str, str] = {}
        for position, path in enumerate(files, 1):
            article = self._build_one(path, today, seen, report)
            if article is None:
                continue
            seen[article.meta.id] = article.source_name
            report.articles.append(article)
            logger.progress("Progress: %d/%d articles built", position, len(files))

        # sorted() is stable, so equal titles keep file-name order
        report.articles = sorted(report.articles, key=lambda a: a.meta.title)

        records = self.index_builder.build(
            (article.to_index_source() for article in report.articles), today=today
        )
        try:
            self.store.publish(records)
            report.indexed = len(records)
        except OSError as e:
            logger.failure("Could not publish search index: %s", e)
            report.failures.append(BuildFailure("<index>", type(e).__name__, str(e)))

        self._log_summary(report, len(files))
        return report

    def _build_one(
        self, path: Path, today: str, seen: Dict[str, str], report: BuildReport
    ) -> Optional[BuiltArticle]:
        try:
            article = self.article_builder.build_file(path, today=today)
            if article.meta.id in seen:
                raise DuplicateDocumentError(article.meta.id, seen[article.meta.id], path.name)
            FileManager.write_to_file(Path(self.output_dir) / article.filename, article.page_html)
        except (AnnotationError, DuplicateDocumentError, OSError, UnicodeDecodeError) as e:
            logger.error("Failed to build %s: %s", path.name, e)
            report.failures.append(BuildFailure(path.name, type(e).__name__, str(e)))
            return None
        except Exception as e:
            logger.error("Unexpected error building %s: %s", path.name, e)
            report.failures.append(BuildFailure(path.name, type(e).__name__, str(e)))
            return None

        logger.debug("Wrote %s", article.filename)
        return article

    @staticmethod
    def _log_summary(report: BuildReport, total: int) -> None:
        logger.notice(
            "Build complete! Built: %d, Failed: %d, Total: %d, Indexed: %d",
            len(report.articles),
            len(report.failures),
            total,
            report.indexed,
        )
        if report.block_error_count:
            logger.warning(
                "%d annotation block(s) could not be parsed and were left as text",
                report.block_error_count,
            )
        if report.failures:
            logger.failure("Some articles failed to build. Check the log above for details.")
        else:
            logger.success("All articles built successfully!")
