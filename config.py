"""
Bookmarks2Notion - Configuration Module

Loads settings from environment variables (and an optional .env file) and
provides typed access. Settings are built once by the CLI and passed down
explicitly; nothing in the package reads the environment on its own.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Google Bookmarks puts unlabeled bookmarks under this folder name
DEFAULT_NO_LABEL_TAG = "ラベルなし"


class NotionSettings(BaseSettings):
    """Notion API configuration"""
    token: str = Field(alias="NOTION_TOKEN")
    database_id: str = Field(alias="NOTION_DATABASE_ID")
    api_base: str = Field(default="https://api.notion.com", alias="NOTION_API_BASE")
    api_version: str = Field(default="2022-06-28", alias="NOTION_VERSION")
    timeout: float = Field(default=30.0, alias="NOTION_TIMEOUT")
    max_retries: int = Field(default=3, ge=1, alias="MAX_RETRIES")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class ImportSettings(BaseSettings):
    """Import run configuration"""
    bookmarks_file: Path = Field(default=Path("GoogleBookmarks.html"), alias="BOOKMARKS_FILE")
    request_delay: float = Field(default=1.0, ge=0.0, alias="REQUEST_DELAY")
    checkpoint_file: Path = Field(
        default=Path(".notion_import_checkpoint.json"),
        alias="CHECKPOINT_FILE",
    )
    no_label_tag: str = Field(default=DEFAULT_NO_LABEL_TAG, alias="NO_LABEL_TAG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Config:
    """Main configuration class that combines all settings"""

    def __init__(self):
        self.importer = ImportSettings()
        self._notion: NotionSettings | None = None

    @property
    def notion(self) -> NotionSettings:
        """
        Notion settings, loaded on first access.

        Parsing and previewing a bookmarks file works without Notion
        credentials; only the upload step needs them.

        Raises:
            pydantic.ValidationError: If NOTION_TOKEN or NOTION_DATABASE_ID is missing
        """
        if self._notion is None:
            self._notion = NotionSettings()
        return self._notion


def load_env(env_file: str = ".env") -> bool:
    """Load environment variables from file, returning whether it existed"""
    from dotenv import load_dotenv
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)
        return True
    return False
