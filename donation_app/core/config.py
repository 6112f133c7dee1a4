from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, CATALOG_SOURCE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Donation Desk"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "donations.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    seed_reference_data: bool = True

    # Reference data source for categories / courier charges
    # Allowed: 'sqlite' (local tables), 'http' (remote donor-site backend)
    catalog_source: str = "sqlite"
    catalog_base_url: Optional[AnyHttpUrl] = None
    catalog_api_token: Optional[str] = None
    http_timeout_seconds: float = 5.0

    # Order recording
    self_collect_label: str = "Will collect from Durga Sthan"
    receipt_prefix: str = "SDP"
    currency: str = "INR"

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        allowed = {"sqlite", "http"}
        if self.catalog_source not in allowed:
            raise ValueError(
                f"Unsupported catalog_source '{self.catalog_source}'. Allowed: {allowed}"
            )
        if self.catalog_source == "http" and self.catalog_base_url is None:
            raise ValueError("catalog_base_url is required when catalog_source is 'http'")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
