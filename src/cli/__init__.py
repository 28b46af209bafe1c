# =============================================================================
# src/cli/__init__.py — CLI Module Overview
# =============================================================================
#
# Command-line tools for fiki, run via `python -m src.cli.<module>`.
#
#   INGESTION (ingest.py)
#      Runs one ingestion pass (tarball or local directory) without the
#      web server and prints pages, topics, hierarchy and page tree.
#
# Architecture Notes:
#   - argparse for argument parsing (not Click/Typer).
#   - Provider imports are deferred inside functions so --help is fast.
#   - The CLI builds its own coordinator; it does not import src.main,
#     which would configure the web application as a side effect.
# =============================================================================

"""CLI tools for fiki.

- ``python -m src.cli.ingest`` — run one ingestion pass and print the result.
"""
