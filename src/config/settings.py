"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from, in priority order:
#
#   1. Environment variables -- e.g. WIKI_LOCAL_DIR=/srv/wiki
#   2. .env file in the working directory
#   3. The defaults declared below
#
# Field ``wiki_local_dir`` maps to env var ``WIKI_LOCAL_DIR``.
#
# Content source selection: an empty ``wiki_local_dir`` means the wiki is
# fetched as a tarball of ``wiki_owner/wiki_repo`` at ``wiki_ref``.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """fiki application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Content source ===
    wiki_owner: str = "umurgdk"
    wiki_repo: str = "wiki"
    wiki_ref: str = "master"
    # {owner}, {repo} and {ref} are substituted by tarball_url().
    wiki_tarball_url: str = "https://api.github.com/repos/{owner}/{repo}/tarball/{ref}"
    wiki_local_dir: str = ""  # Serve from this directory instead of the tarball
    wiki_fetch_timeout: float = 30.0  # Seconds; bounds the whole tarball request

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8080
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"

    def tarball_url(self) -> str:
        """Return the archive URL with owner, repository and ref filled in."""
        return self.wiki_tarball_url.format(
            owner=self.wiki_owner,
            repo=self.wiki_repo,
            ref=self.wiki_ref,
        )
