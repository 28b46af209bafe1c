"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.config.loader import DEFAULT_MARKDOWN_EXTENSIONS, load_config
from src.config.settings import Settings
from src.utils.errors import ConfigurationError


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


class TestSettings:
    def test_defaults(self, settings: Settings) -> None:
        assert settings.wiki_owner == "umurgdk"
        assert settings.wiki_repo == "wiki"
        assert settings.wiki_fetch_timeout == 30.0
        assert settings.wiki_local_dir == ""

    def test_tarball_url(self, settings: Settings) -> None:
        assert settings.tarball_url() == "https://api.github.com/repos/umurgdk/wiki/tarball/master"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WIKI_LOCAL_DIR", "/srv/wiki")
        monkeypatch.setenv("WIKI_REF", "main")
        settings = Settings(_env_file=None)
        assert settings.wiki_local_dir == "/srv/wiki"
        assert settings.tarball_url().endswith("/tarball/main")


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path, settings: Settings) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=settings)
        assert config["site"]["title"] == "wiki"
        assert config["markdown"]["extensions"] == DEFAULT_MARKDOWN_EXTENSIONS
        assert config["source"]["tarball_url"] == settings.tarball_url()
        assert config["source"]["local_dir"] == ""
        assert config["source"]["name"] == "tarball:umurgdk/wiki@master"
        assert config["logging"] == {"level": "INFO", "json": False}

    def test_yaml_values_kept(self, tmp_path: Path, settings: Settings) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("site:\n  title: notes\nmarkdown:\n  extensions: [toc]\n", encoding="utf-8")
        config = load_config(str(path), settings=settings)
        assert config["site"]["title"] == "notes"
        assert config["markdown"]["extensions"] == ["toc"]

    def test_settings_merged_over_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("source:\n  fetch_timeout: 1\n  mirror: backup\n", encoding="utf-8")
        config = load_config(str(path), settings=Settings(_env_file=None, wiki_fetch_timeout=9.0))
        assert config["source"]["fetch_timeout"] == 9.0
        assert config["source"]["mirror"] == "backup"

    def test_production_env_selects_json_logs(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, app_env="production", log_level="DEBUG")
        config = load_config(str(tmp_path / "absent.yaml"), settings=settings)
        assert config["logging"] == {"level": "DEBUG", "json": True}

    def test_invalid_yaml(self, tmp_path: Path, settings: Settings) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("site: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=settings)

    def test_non_mapping(self, tmp_path: Path, settings: Settings) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path), settings=settings)

    def test_repository_config(self, settings: Settings) -> None:
        project_root = Path(__file__).resolve().parents[2]
        config = load_config(str(project_root / "config" / "config.yaml"), settings=settings)
        assert config["markdown"]["extensions"] == ["fenced_code", "tables"]
