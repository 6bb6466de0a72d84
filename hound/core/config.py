import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hound.core.errors import ConfigurationError

CONFIG_FILE_PATH = Path(os.environ.get("HOUND_CONFIG", ".houndfile"))


class GitHubSettings(BaseModel):
    active: bool = False
    user: str = ""
    token: Optional[str] = None
    base_url: str = "https://api.github.com"

    def missing(self) -> list[str]:
        return [] if self.user else ["user"]


class GitLabSettings(BaseModel):
    active: bool = False
    base_url: str = ""
    api_path: str = "/api/v3"
    repo_feed_path: str = ""
    token: str = ""
    project_id: str = ""

    def missing(self) -> list[str]:
        keys = ["base_url", "api_path", "repo_feed_path", "token", "project_id"]
        return [key for key in keys if not getattr(self, key)]


class JiraSettings(BaseModel):
    active: bool = False
    base_url: str = ""
    api_path: str = "/rest/api/2"
    activity_path: str = "/activity"
    user: str = ""
    activity_user: str = ""
    max_results: int = 30

    def missing(self) -> list[str]:
        keys = ["base_url", "api_path", "activity_path", "user", "activity_user"]
        return [key for key in keys if not getattr(self, key)]


class Settings(BaseSettings):
    # Providers
    GITHUB: GitHubSettings = GitHubSettings()
    GITLAB: GitLabSettings = GitLabSettings()
    JIRA: JiraSettings = JiraSettings()

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FILE: Optional[str] = None

    # Aggregation deadlines
    FETCH_TIMEOUT_SECONDS: float = 15.0
    AGGREGATION_TIMEOUT_SECONDS: float = 30.0
    HTTP_TIMEOUT_SECONDS: float = 15.0

    model_config = SettingsConfigDict(
        env_file=CONFIG_FILE_PATH,
        env_nested_delimiter="__",
        extra="ignore",  # the config file may carry keys from newer versions
    )

    def missing(self) -> list[str]:
        """Return ``SECTION__KEY`` names required by active sections but unset."""
        missing: list[str] = []
        for section in ("GITHUB", "GITLAB", "JIRA"):
            provider = getattr(self, section)
            if provider.active:
                missing.extend(f"{section}__{key.upper()}" for key in provider.missing())
        return missing

    @property
    def any_active(self) -> bool:
        return self.GITHUB.active or self.GITLAB.active or self.JIRA.active


def invalid_keys(exc: ValidationError) -> list[str]:
    """``SECTION__KEY`` names of the values a ValidationError rejected."""
    return ["__".join(str(part).upper() for part in error["loc"]) for error in exc.errors()]


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from the environment and the given configuration file."""
    try:
        return Settings(_env_file=config_path or CONFIG_FILE_PATH)
    except ValidationError as exc:
        keys = invalid_keys(exc)
        raise ConfigurationError(f"Invalid configuration values: {', '.join(keys)}", invalid=keys) from exc


try:
    settings = Settings()
except ValidationError:
    # Defaults only; load_settings reports the bad values once the CLI runs
    settings = Settings.model_construct()
