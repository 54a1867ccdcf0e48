"""
Library Catalog - Application Configuration

Patterns Applied:
- Pydantic Settings with SettingsConfigDict
- Environment variable prefix LIBCAT_ for the library catalog

Anti-Patterns Avoided:
- Hard-coded data paths scattered across modules
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with LIBCAT_ prefix.
    Example: LIBCAT_DATA_DIR=/srv/library, LIBCAT_LOG_LEVEL=DEBUG
    """

    # Application metadata
    service_name: str = "library-catalog"
    version: str = "0.1.0"

    # Data files (relative names are resolved against data_dir)
    data_dir: Path = Path("data")
    books_file: str = "books.json"
    loans_file: str = "loans.json"

    # Logging configuration
    log_level: str = "INFO"
    log_json: bool = False

    # Recommendation / loan defaults
    default_recommendation_count: int = Field(default=5, ge=1)
    loan_period_days: int = Field(default=14, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="LIBCAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def books_path(self) -> Path:
        """Full path of the books JSON file."""
        return self.data_dir / self.books_file

    @property
    def loans_path(self) -> Path:
        """Full path of the loans JSON file."""
        return self.data_dir / self.loans_file


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings instance with values from environment
    """
    return Settings()
