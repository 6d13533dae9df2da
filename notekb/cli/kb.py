"""Command-line interface for the notekb knowledge base.

Usage::

    python -m notekb.cli load [--notebook NAME] [--section NAME]
    python -m notekb.cli ask "What did I write about Kafka?" --sources
    python -m notekb.cli search "release checklist" -k 5
    python -m notekb.cli interactive [--llm anthropic]
    python -m notekb.cli stats
    python -m notekb.cli delete --yes

Configuration comes from environment variables / ``.env`` (see
:class:`notekb.config.settings.Settings`).  Answers go to stdout; logs go
to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from notekb.config.settings import LLMBackend, Settings
from notekb.utils.errors import NoteKBError
from notekb.utils.logging import configure_logging

_QUIT_WORDS = frozenset({"quit", "exit", "q"})
_SEARCH_PREFIX = "search:"
_PREVIEW_LENGTH = 200


def _build_kb(app_settings: Settings, llm: str | None = None):  # noqa: ANN202
    """Deferred import keeps ``--help`` fast (no chromadb / SDK imports)."""
    from notekb.main import build_knowledge_base

    return build_knowledge_base(app_settings, llm_backend=llm)


def _print_search_results(results) -> None:  # noqa: ANN001
    print(f"\nSearch results ({len(results)}):\n")
    for i, hit in enumerate(results, start=1):
        meta = hit.chunk.metadata
        text = hit.chunk.text
        preview = text[:_PREVIEW_LENGTH] + ("..." if len(text) > _PREVIEW_LENGTH else "")
        print(f"--- Result {i} (distance {hit.distance:.4f}) ---")
        print(f"  Notebook: {meta.get('notebook') or 'N/A'}")
        print(f"  Section:  {meta.get('section') or 'N/A'}")
        print(f"  Title:    {meta.get('title') or 'N/A'}")
        print(f"  {preview}")
        print()


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_load(args: argparse.Namespace, app_settings: Settings) -> int:
    kb = _build_kb(app_settings)
    stop_event = asyncio.Event()
    # First Ctrl+C stops cleanly after the current page or batch.
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop_event.set)
    except (NotImplementedError, RuntimeError):
        pass

    target = args.notebook or "all notebooks"
    if args.section:
        target += f" / {args.section}"
    print(f"Loading OneNote content: {target}")

    report = await kb.load_from_onenote(args.notebook, args.section, stop_event=stop_event)

    print("\nIngestion complete:" if not report.cancelled else "\nIngestion stopped:")
    print(f"  Chunks indexed: {report.chunks_indexed}")
    print(f"  Pages loaded:   {report.pages_loaded}")
    print(f"  Pages skipped:  {report.pages_skipped}")
    print(f"  Time:           {report.elapsed_seconds:.2f}s")
    for skipped in report.skipped:
        print(f"    - {skipped.notebook} / {skipped.section} / {skipped.title}: {skipped.reason}")
    if report.chunks_indexed == 0 and not report.cancelled:
        print("No content found.")
    return 0


async def _handle_ask(args: argparse.Namespace, app_settings: Settings) -> int:
    kb = _build_kb(app_settings, args.llm)
    await kb.setup_qa()
    answer = await kb.ask(args.question, show_sources=args.sources)
    print(f"\nAnswer:\n{answer}")
    return 0


async def _handle_search(args: argparse.Namespace, app_settings: Settings) -> int:
    kb = _build_kb(app_settings)
    results = await kb.search(args.query, k=args.k)
    _print_search_results(results)
    return 0


async def _handle_interactive(args: argparse.Namespace, app_settings: Settings) -> int:
    kb = _build_kb(app_settings, args.llm)
    await kb.setup_qa()

    print("=" * 60)
    print("Interactive mode")
    print("  Ask a question, 'search: <terms>' to search, 'quit' to leave.")
    print("=" * 60)

    while True:
        try:
            line = await asyncio.to_thread(input, "\nQuestion: ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        user_input = line.strip()
        if not user_input:
            continue
        if user_input.lower() in _QUIT_WORDS:
            break
        try:
            if user_input.startswith(_SEARCH_PREFIX):
                query = user_input[len(_SEARCH_PREFIX) :].strip()
                _print_search_results(await kb.search(query))
            else:
                answer = await kb.ask(user_input, show_sources=True)
                print(f"\nAnswer:\n{answer}")
        except NoteKBError as exc:
            print(f"Error: {exc}", file=sys.stderr)

    print("Bye.")
    return 0


async def _handle_stats(app_settings: Settings) -> int:
    kb = _build_kb(app_settings)
    stats = await kb.get_stats()
    print("Knowledge base statistics")
    print("=" * 40)
    print(f"  Collection:  {stats.collection_name}")
    print(f"  Chunks:      {stats.document_count}")
    print(f"  Location:    {stats.persist_directory}")
    return 0


async def _handle_delete(args: argparse.Namespace, app_settings: Settings) -> int:
    """Drop the whole collection.  Destructive, so it asks unless --yes is passed."""
    kb = _build_kb(app_settings)
    stats = await kb.get_stats()
    if stats.document_count == 0 and not kb.vector_store.is_ready():
        print(f"Collection '{stats.collection_name}' does not exist. Nothing to delete.")
        return 0

    if not args.yes:
        confirm = input(
            f"  Delete collection '{stats.collection_name}' "
            f"({stats.document_count} chunks)? [y/N] "
        ).strip().lower()
        if confirm not in ("y", "yes"):
            print("  Aborted.")
            return 0

    await kb.delete()
    print(f"Deleted collection '{stats.collection_name}'.")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m notekb.cli",
        description="Search and question your OneNote notebooks.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Knowledge base commands")
    llm_choices = [b.value for b in LLMBackend]

    load_parser = subparsers.add_parser("load", help="Index OneNote pages")
    load_parser.add_argument("--notebook", "-n", help="Only this notebook (exact name)")
    load_parser.add_argument("--section", "-s", help="Only this section (exact name)")

    ask_parser = subparsers.add_parser("ask", help="Ask a question")
    ask_parser.add_argument("question", help="The question to answer")
    ask_parser.add_argument("--sources", "-s", action="store_true", help="Show sources")
    ask_parser.add_argument("--llm", choices=llm_choices, help="Override LLM_BACKEND")

    search_parser = subparsers.add_parser("search", help="Search indexed notes")
    search_parser.add_argument("query", help="Search text")
    search_parser.add_argument("-k", type=int, default=5, help="Number of results (default: 5)")

    interactive_parser = subparsers.add_parser("interactive", help="Interactive Q&A")
    interactive_parser.add_argument("--llm", choices=llm_choices, help="Override LLM_BACKEND")

    subparsers.add_parser("stats", help="Show knowledge base statistics")

    delete_parser = subparsers.add_parser("delete", help="Delete the whole collection")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _dispatch(args: argparse.Namespace, app_settings: Settings) -> int:
    if args.command == "load":
        return await _handle_load(args, app_settings)
    if args.command == "ask":
        return await _handle_ask(args, app_settings)
    if args.command == "search":
        return await _handle_search(args, app_settings)
    if args.command == "interactive":
        return await _handle_interactive(args, app_settings)
    if args.command == "stats":
        return await _handle_stats(app_settings)
    return await _handle_delete(args, app_settings)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, load settings, run the subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    try:
        exit_code = asyncio.run(_dispatch(args, app_settings))
    except NoteKBError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
