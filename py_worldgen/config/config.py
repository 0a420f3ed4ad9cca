from pathlib import Path
from typing import List

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORLDGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Output Configuration
    output_dir: str = Field(default="assets/maps", description="Directory for generated maps")
    index_filename: str = Field(default="index.json", description="Manifest file name")

    # Map Generation Configuration
    default_map_size: float = Field(default=1000.0, description="Default world size in units")
    max_map_size: float = Field(default=5000.0, description="Max allowed world size")

    # Compaction Configuration
    compaction_cell_size: float = Field(default=20.0, description="Tree batching cell size")
    compaction_keep_members: bool = Field(
        default=True, description="Store member positions in tree clusters"
    )

    # Minimap Configuration
    minimap_resolution: int = Field(default=200, description="Minimap grid cells per side")
    minimap_image_resolutions: List[int] = Field(
        default=[256], description="Pixel sizes of rendered minimap images"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")


# Instantiate singleton settings object
settings = Settings()
