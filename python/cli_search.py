#!/usr/bin/env python3

import argparse
import json
import sys
from collections import Counter
from typing import List, Optional

from colored_logger import setup_colored_logging, get_colored_logger
from search import (
    IndexStore,
    IndexUnavailableError,
    QueryEngine,
    SearchQuery,
    SearchStats,
    SimilarityEngine,
)
from settings import Settings

logger = get_colored_logger(__name__)


class SearchCLI:
    """
    Command-line interface for the published article index.

    Provides commands for:
    - Searching articles by free text
    - Listing related articles
    - Search suggestions and popular searches
    - Index statistics
    """

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.store: Optional[IndexStore] = None
        self.query_engine: Optional[QueryEngine] = None
        self.similarity_engine: Optional[SimilarityEngine] = None
        self.search_stats: Optional[SearchStats] = None

    def run(self, args: List[str] = None) -> int:
        """
        Run the search CLI with the given arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        try:
            parser = self._create_parser()
            parsed_args = parser.parse_args(args)

            setup_colored_logging(level="DEBUG" if parsed_args.verbose else "WARNING")

            if not hasattr(parsed_args, "func"):
                parser.print_help()
                return 1

            self._configure(parsed_args)
            return parsed_args.func(parsed_args)

        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1
        except ValueError as e:
            logger.error("Invalid arguments: %s", e)
            return 2

    def _configure(self, args) -> None:
        self.settings = Settings(args.settings)
        index_path = args.index or self.settings.index_path
        stats_path = args.stats_file or self.settings.stats_path

        self.store = IndexStore(index_path)
        self.query_engine = QueryEngine(
            self.store,
            field_weights=self.settings.field_weights,
            importance_multiplier=self.settings.importance_multiplier,
            default_fields=self.settings.default_fields,
        )
        self.similarity_engine = SimilarityEngine(self.store)
        self.search_stats = SearchStats(stats_path, self.settings.popular_searches)

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="dse-search",
            description="Search the published article index",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  %(prog)s search 學習                      # Search titles, content and tags
  %(prog)s search 比喻 --field dse_focus     # Search focus topics only
  %(prog)s search 荀子 --offset 10 -l 10     # Second page of results
  %(prog)s related xunzi-qinxue             # Articles related to an article
  %(prog)s suggest 儒                       # Suggestions for a partial query
  %(prog)s popular                          # Most searched terms
  %(prog)s stats                            # Index statistics
            """,
        )

        parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
        parser.add_argument("--settings", help="Settings file (.json, .yml or .yaml)")
        parser.add_argument("--index", help="Index file (default: from settings)")
        parser.add_argument("--stats-file", help="Search statistics file (default: from settings)")

        subparsers = parser.add_subparsers(dest="command", help="Available commands")
        self._add_search_parser(subparsers)
        self._add_related_parser(subparsers)
        self._add_suggest_parser(subparsers)
        self._add_popular_parser(subparsers)
        self._add_stats_parser(subparsers)
        return parser

    def _add_search_parser(self, subparsers):
        search_parser = subparsers.add_parser("search", help="Search articles")
        search_parser.add_argument("query", help="Search text")
        search_parser.add_argument(
            "-f",
            "--field",
            action="append",
            help="Field to search (title, tags, dse_focus, author, content, genre); repeatable",
        )
        search_parser.add_argument(
            "-l", "--limit", type=int, help="Maximum results to show (default: from settings)"
        )
        search_parser.add_argument(
            "-o", "--offset", type=int, default=0, help="Results to skip (default: 0)"
        )
        search_parser.add_argument(
            "--no-record", action="store_true", help="Do not count this search in statistics"
        )
        search_parser.add_argument(
            "--format",
            choices=["table", "list", "json"],
            default="table",
            help="Output format (default: table)",
        )
        search_parser.set_defaults(func=self._cmd_search)

    def _add_related_parser(self, subparsers):
        related_parser = subparsers.add_parser("related", help="Show related articles")
        related_parser.add_argument("article_id", help="Article id")
        related_parser.add_argument(
            "-l", "--limit", type=int, help="Maximum results to show (default: from settings)"
        )
        related_parser.add_argument(
            "--format",
            choices=["table", "list", "json"],
            default="table",
            help="Output format (default: table)",
        )
        related_parser.set_defaults(func=self._cmd_related)

    def _add_suggest_parser(self, subparsers):
        suggest_parser = subparsers.add_parser("suggest", help="Suggest search terms")
        suggest_parser.add_argument("query", help="Partial search text")
        suggest_parser.add_argument("-l", "--limit", type=int, default=5, help="Maximum suggestions")
        suggest_parser.set_defaults(func=self._cmd_suggest)

    def _add_popular_parser(self, subparsers):
        popular_parser = subparsers.add_parser("popular", help="Show popular searches")
        popular_parser.add_argument("-l", "--limit", type=int, default=10, help="Maximum terms")
        popular_parser.set_defaults(func=self._cmd_popular)

    def _add_stats_parser(self, subparsers):
        stats_parser = subparsers.add_parser("stats", help="Show index statistics")
        stats_parser.set_defaults(func=self._cmd_stats)

    # Command implementations
    def _cmd_search(self, args) -> int:
        query = SearchQuery(
            text=args.query,
            limit=args.limit if args.limit is not None else self.settings.default_limit,
            offset=args.offset,
            fields=args.field or self.settings.default_fields,
        )
        results = self.query_engine.search(query)

        if not args.no_record:
            self.search_stats.record_search(args.query)

        if args.format == "json":
            print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
            return 0

        if not results:
            print("No results found.")
            return 0

        print(f"\nFound {len(results)} results:")
        self._print_results(
            [(r.record, r.score) for r in results], "Score", args.format, query.offset
        )
        return 0

    def _cmd_related(self, args) -> int:
        limit = args.limit if args.limit is not None else self.settings.related_limit
        results = self.similarity_engine.related(args.article_id, limit=limit)

        if args.format == "json":
            print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
            return 0

        if not results:
            print(f"No related articles for '{args.article_id}'.")
            return 0

        print(f"\nArticles related to {args.article_id}:")
        self._print_results([(r.record, r.similarity) for r in results], "Similarity", args.format)
        return 0

    def _cmd_suggest(self, args) -> int:
        for suggestion in self.query_engine.suggest(args.query, limit=args.limit):
            print(suggestion)
        return 0

    def _cmd_popular(self, args) -> int:
        popular = self.search_stats.popular_searches(limit=args.limit)
        if not popular:
            print("No searches recorded yet.")
            return 0

        for i, entry in enumerate(popular, 1):
            print(f"{i:<3} {entry['term']:<20} {entry['count']}")
        return 0

    def _cmd_stats(self, args) -> int:
        try:
            index = self.store.load()
        except IndexUnavailableError as e:
            logger.error("Search index unavailable: %s", e)
            print("Search index not available. Run the build first.")
            return 1

        tag_counts = Counter(tag for record in index.records for tag in record.tags)
        genre_counts = Counter(record.genre for record in index.records)

        print("\nIndex Statistics:")
        print(f"  Version: {index.version}")
        print(f"  Created: {index.created}")
        print(f"  Articles: {index.count}")
        print(f"  Total words: {sum(r.word_count for r in index.records)}")

        if genre_counts:
            print("\n  Genres:")
            for genre, count in genre_counts.most_common():
                print(f"    {genre}: {count}")

        if tag_counts:
            print("\n  Top tags:")
            for tag, count in tag_counts.most_common(10):
                print(f"    {tag}: {count}")
        return 0

    @staticmethod
    def _print_results(rows, score_label: str, output_format: str, start: int = 0) -> None:
        if output_format == "list":
            for i, (record, score) in enumerate(rows, start + 1):
                print(f"\n{i}. {record.title}")
                print(f"   Author: {record.author} | Genre: {record.genre} | {score_label}: {score}")
                if record.tags:
                    print(f"   Tags: {', '.join(record.tags)}")
                print(f"   URL: {record.url}")
                if record.excerpt:
                    print(f"   {record.excerpt}")
            return

        print(f"{'#':<4} {'Title':<30} {'Author':<20} {score_label:<10} URL")
        print("-" * 80)
        for i, (record, score) in enumerate(rows, start + 1):
            title = record.title[:27] + "..." if len(record.title) > 30 else record.title
            author = record.author[:17] + "..." if len(record.author) > 20 else record.author
            print(f"{i:<4} {title:<30} {author:<20} {score:<10} {record.url}")


def main():
    """Main entry point for the search CLI."""
    cli = SearchCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
