# =============================================================================
# src/cli/ingest.py — CLI Ingest Command (one-shot ingestion pass)
# =============================================================================
#
# Runs a single ingestion pass against the configured content source without
# starting the web server, then prints what was indexed.  Useful for checking
# a local wiki checkout before deploying, or for seeing why a page is missing
# (ignored / skipped counts come from the pass report).
#
# Source selection mirrors main.py: --local (or WIKI_LOCAL_DIR) reads a
# directory, otherwise the repository tarball is downloaded.
#
# Usage examples:
#   python -m src.cli.ingest --local ~/notes/wiki
#   python -m src.cli.ingest --json
# =============================================================================

"""Standalone CLI that runs one ingestion pass and prints the result.

Usage::

    python -m src.cli.ingest --local /path/to/wiki
    python -m src.cli.ingest --json

Exit status is 0 when the pass published an index set, 1 otherwise.
"""

from __future__ import annotations

import argparse
import json
import sys

from src.config.loader import load_config
from src.config.settings import Settings
from src.models.ingestion import IngestionReport
from src.models.site import IndexSet, TreeNode
from src.utils.errors import FikiError
from src.utils.logging import configure_logging


def _build_coordinator(app_settings: Settings):  # noqa: ANN202
    """Construct the source, renderer and coordinator for a one-shot pass.

    Source selection is shared with the server through
    ``build_entry_source``.  Imports are deferred so ``--help`` stays fast.
    """
    from src.providers.markdown.python_markdown_renderer import PythonMarkdownRenderer
    from src.providers.source.factory import build_entry_source
    from src.services.ingestion.coordinator import IngestionCoordinator
    from src.services.ingestion.live_index import LiveIndex

    config = load_config(app_settings.config_path, settings=app_settings)

    return IngestionCoordinator(
        source=build_entry_source(config["source"]),
        renderer=PythonMarkdownRenderer(extensions=config["markdown"]["extensions"]),
        live_index=LiveIndex(),
    )


def _format_tree(node: TreeNode, depth: int = 0) -> list[str]:
    lines: list[str] = []
    for name, child in node.children.items():
        marker = "" if child.is_page else "/"
        lines.append(f"{'  ' * depth}- {name}{marker}")
        lines.extend(_format_tree(child, depth + 1))
    return lines


def _print_summary(index_set: IndexSet, report: IngestionReport | None) -> None:
    print(f"Source:  {index_set.source_name}")
    print(f"Pass:    {index_set.pass_id}")
    print(f"Pages:   {index_set.page_count}")
    print(f"Topics:  {', '.join(index_set.topic_names) or '(none)'}")
    if report is not None:
        print(f"Ignored: {report.ignored}   Skipped: {report.skipped}   ({report.duration_ms} ms)")

    print("\nHierarchy")
    print("=" * 40)
    for directory in sorted(index_set.hierarchy):
        children = ", ".join(index_set.children_of(directory))
        print(f"  {directory or '/':<20} {children}")

    print("\nPage tree")
    print("=" * 40)
    for line in _format_tree(index_set.tree()):
        print(f"  {line}")


def _to_json(index_set: IndexSet, report: IngestionReport | None) -> str:
    payload = {
        "source": index_set.source_name,
        "pass_id": index_set.pass_id,
        "pages": sorted(index_set.pages),
        "topics": list(index_set.topic_names),
        "hierarchy": {key: list(value) for key, value in index_set.hierarchy.items()},
        "tree": index_set.tree().model_dump(),
        "report": report.model_dump(mode="json") if report is not None else None,
    }
    return json.dumps(payload, indent=2)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.ingest",
        description="Run one wiki ingestion pass and print what was indexed.",
    )
    parser.add_argument(
        "--local",
        default=None,
        help="Read this directory instead of downloading the repository tarball",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the result as JSON",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run one pass and return the process exit code."""
    args = _build_parser().parse_args(argv)

    app_settings = Settings()
    if args.local:
        app_settings = app_settings.model_copy(update={"wiki_local_dir": args.local})

    # Logs go to stdout too; keep them out of the way of --json output.
    configure_logging(
        log_level="ERROR" if args.as_json else app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    try:
        coordinator = _build_coordinator(app_settings)
        index_set = coordinator.run_pass()
    except FikiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.as_json:
        print(_to_json(index_set, coordinator.last_report))
    else:
        _print_summary(index_set, coordinator.last_report)
    return 0


def main() -> None:
    """CLI entry point for the ingestion tool."""
    sys.exit(run())


if __name__ == "__main__":
    main()
