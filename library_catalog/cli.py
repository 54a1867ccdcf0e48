"""
Library Catalog - command line entry point.

Usage:
    library-catalog search "Dune"
    library-catalog query 'category="SF" AND year>=1960'
    library-catalog recommend --user alice --mode hybrid --count 5
    library-catalog recommend --book 3 --mode content

Data files are read from --data-dir, or from LIBCAT_DATA_DIR when omitted.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from library_catalog.catalog.library import Library
from library_catalog.core.config import Settings
from library_catalog.core.exceptions import ConfigurationError, LibraryCatalogError
from library_catalog.core.logging import configure_from_settings, get_logger
from library_catalog.models.book import Book

logger = get_logger(__name__)

RECOMMEND_MODES = ("cf", "content", "hybrid")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="library-catalog",
        description="Search a library catalog and recommend books",
    )
    parser.add_argument("--data-dir", type=Path, help="Directory holding books.json and loans.json")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Case-sensitive keyword search")
    search.add_argument("keyword")

    query = subparsers.add_parser("query", help="Boolean/field query search")
    query.add_argument("query")

    recommend = subparsers.add_parser("recommend", help="Recommend books")
    target = recommend.add_mutually_exclusive_group(required=True)
    target.add_argument("--user", help="Borrower to recommend for (cf, hybrid)")
    target.add_argument("--book", type=int, help="Reference book id (content)")
    recommend.add_argument("--mode", choices=RECOMMEND_MODES, default="hybrid")
    recommend.add_argument("--count", type=int, help="Number of recommendations")
    return parser


def format_book(book: Book | None, book_id: int, score: float | None = None) -> str:
    if book is None:
        line = f"{book_id}\t<missing>"
    else:
        line = f"{book.id}\t{book.title}\t{book.author}\t{book.year}"
    if score is not None:
        line += f"\t{score:.4f}"
    return line


def _recommend(library: Library, args: argparse.Namespace, count: int) -> list[tuple[int, float]]:
    if args.mode == "content":
        if args.book is None:
            raise SystemExit("--mode content requires --book")
        return library.similar_books(args.book, count)
    if args.user is None:
        raise SystemExit(f"--mode {args.mode} requires --user")
    if args.mode == "cf":
        return library.collaborative_recommendations(args.user, count)
    return library.recommend_for_user(args.user, count)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings(data_dir=args.data_dir) if args.data_dir else Settings()
    try:
        configure_from_settings(settings)
    except ConfigurationError as e:
        print(f"library-catalog: {e}", file=sys.stderr)
        return 2

    try:
        library = Library.load(settings)
    except LibraryCatalogError as e:
        logger.error("library_load_failed", error=str(e), data_dir=str(settings.data_dir))
        return 1

    if args.command == "search":
        for book_id in library.search(args.keyword):
            print(format_book(library.catalog.get_book(book_id), book_id))
    elif args.command == "query":
        for book_id in library.advanced_search(args.query):
            print(format_book(library.catalog.get_book(book_id), book_id))
    else:
        count = args.count if args.count is not None else settings.default_recommendation_count
        for book_id, score in _recommend(library, args, count):
            print(format_book(library.catalog.get_book(book_id), book_id, score))
    return 0


if __name__ == "__main__":
    sys.exit(main())
