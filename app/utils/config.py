"""
Configuration management for the release watchman.

Uses pydantic-settings to load configuration from a YAML file, environment
variables and .env files. Environment variables win over the YAML file, so
secrets can stay out of ``config.yaml`` (``WATCHMAN_REMOTE__PASSWORD``,
``WATCHMAN_NOTIFY__PASSWORD``).
"""

from pathlib import Path
from typing import List, Optional, Tuple, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_FILE = Path("config.yaml")


class RemoteSettings(BaseModel):
    """FTP drop that publishes release manifests."""

    server: str
    port: int = 21
    user: str = "anonymous"
    password: str = ""
    dir: str = "/"
    pattern: str = "*"
    period: int = Field(default=5, gt=0)  # minutes
    list_timeout: float = 5.0  # seconds
    retrieve_timeout: float = 30.0  # seconds
    # Codec for file names on the control connection (e.g. cp1251 on legacy servers).
    encoding: str = "utf-8"


class NotifySettings(BaseModel):
    """SMTP endpoint and message templates."""

    model_config = ConfigDict(populate_by_name=True)

    host: str
    port: int = 25
    from_address: str = Field(validation_alias=AliasChoices("from", "from_address"))
    password: str = ""
    to: List[str] = Field(min_length=1)
    subject: str = "Release"
    text: str = "New release"
    # Self-signed relays are common on build networks, so verification is opt-in.
    verify_tls: bool = False
    timeout: float = 30.0


class Settings(BaseSettings):
    """Application settings loaded from YAML and environment."""

    remote: RemoteSettings
    notify: NotifySettings

    ledger_path: Path = Path("sent_files.log")
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="WATCHMAN_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=DEFAULT_CONFIG_FILE,
        yaml_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Build settings from ``config_file`` (default ``config.yaml``).

    Raises:
        FileNotFoundError: if an explicitly requested file does not exist
        pydantic.ValidationError: if the merged configuration is invalid
    """
    if config_file is None:
        return Settings()

    if not config_file.is_file():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    class FileSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=config_file)

    return FileSettings()
