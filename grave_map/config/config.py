from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Database Configuration
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_name: str = Field(default="grave_map", description="Database name")
    db_user: str = Field(default="postgres", description="Database user")
    db_password: str = Field(default="password", description="Database password")
    db_url: Optional[str] = Field(default=None, description="Full database URL, overrides the db_* parts")

    @property
    def database_url(self) -> str:
        """Construct full database URL."""
        if self.db_url:
            return self.db_url
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")
    site_url: str = Field(default="http://localhost:3000", description="Public site URL used for share links")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Map Configuration
    default_grid_size: int = Field(default=16, ge=1, description="Grid size used when placing new graves")
    min_grid_size: int = Field(default=8, ge=1, description="Smallest grid size the districts view accepts")
    max_grid_size: int = Field(default=32, ge=1, description="Largest grid size the districts view accepts")
    search_radius: int = Field(default=3, ge=0, description="Neighbourhood radius for placement search")
    crowding_weight: int = Field(default=10, ge=0, description="Score cost of one extra grave in a district")

    # Grave Creation Configuration
    auto_approve: bool = Field(default=False, description="Publish new graves without moderation")
    slug_attempts: int = Field(default=5, ge=1, description="Retries when a generated slug collides")

    # Device Identity Configuration
    device_cookie_name: str = Field(default="rip_device", description="Cookie holding the device hash")
    device_header_name: str = Field(default="x-rip-device", description="Header that overrides the device cookie")
    device_cookie_max_age: int = Field(default=60 * 60 * 24 * 90, description="Device cookie lifetime in seconds")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Instantiate singleton settings object
settings = Settings()
