"""Unit tests for the ingestion CLI (src.cli.ingest)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import write_tree

from src.cli import ingest
from src.services.ingestion.index_builder import SiteIndexBuilder


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's .env and config file out of the CLI runs."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("WIKI_LOCAL_DIR", raising=False)


class TestRun:
    def test_local_pass_succeeds(self, wiki_dir: Path) -> None:
        assert ingest.run(["--local", str(wiki_dir)]) == 0

    def test_json_output_succeeds(self, wiki_dir: Path) -> None:
        assert ingest.run(["--local", str(wiki_dir), "--json"]) == 0

    def test_missing_directory_exits_1(self, tmp_path: Path) -> None:
        assert ingest.run(["--local", str(tmp_path / "absent")]) == 1

    def test_parser_flags(self) -> None:
        args = ingest._build_parser().parse_args(["--local", "/srv/wiki", "--json"])
        assert args.local == "/srv/wiki"
        assert args.as_json is True


class TestFormatting:
    @pytest.fixture
    def coordinator(self, tmp_path: Path):  # noqa: ANN201
        root = write_tree(tmp_path / "wiki", {"linux/vim.md": "# Vim\n", "about.md": "# About\n"})
        settings = ingest.Settings(_env_file=None, wiki_local_dir=str(root))
        return ingest._build_coordinator(settings)

    def test_json_payload(self, coordinator) -> None:  # noqa: ANN001
        index_set = coordinator.run_pass()
        payload = json.loads(ingest._to_json(index_set, coordinator.last_report))

        assert payload["pages"] == ["about", "linux/vim"]
        assert payload["topics"] == ["linux"]
        assert payload["hierarchy"] == {"": ["about"], "linux": ["vim"]}
        assert payload["tree"]["children"]["linux"]["children"]["vim"]["is_page"] is True
        assert payload["report"]["outcome"] == "READY"

    def test_tree_lines(self) -> None:
        builder = SiteIndexBuilder()
        builder.add_tree_leaf("linux/tools", "vim")
        builder.add_tree_leaf("", "about")
        tree = builder.finalize(pass_id="p", source_name="t").tree()

        assert ingest._format_tree(tree) == [
            "- linux/",
            "  - tools/",
            "    - vim",
            "- about",
        ]
