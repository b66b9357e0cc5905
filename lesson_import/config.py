"""Configuration loader for the lesson import service."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Lesson Import"
    version: str = "1.0.0"
    log_level: str = "INFO"


class SegmentationConfig(BaseModel):
    """Section splitting configuration."""

    max_chars: int = 6000
    overflow_ratio: float = 1.6


class ClassifierConfig(BaseModel):
    """Word-count thresholds used to label uploaded files."""

    long_words: int = 1500
    short_words: int = 500
    min_words: int = 150
    min_prefix_length: int = 3


class ImportConfig(BaseModel):
    """Batch import policy."""

    max_files_per_request: int = 10
    split_sections: bool = False


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 8000


class TokenGrant(BaseModel):
    """Identity bound to a static API token."""

    user_id: str
    role: str


class AuthConfig(BaseModel):
    """Authorization settings."""

    allowed_roles: list[str] = Field(default_factory=lambda: ["organization", "admin"])
    tokens: dict[str, TokenGrant] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Root application configuration."""

    model_config = ConfigDict(populate_by_name=True)

    app: AppInfo = Field(default_factory=AppInfo)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    import_: ImportConfig = Field(default_factory=ImportConfig, alias="import")
    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    # Loaded from environment
    service_token: str | None = None


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    config.service_token = os.getenv("LESSON_IMPORT_SERVICE_TOKEN")
    level = os.getenv("LESSON_IMPORT_LOG_LEVEL")
    if level:
        config.app.log_level = level.upper()

    return config
