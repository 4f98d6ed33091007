from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, USD_TO_KHR_RATE, DEFAULT_PAGE_SIZE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Ledger"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "ledger.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    seed_demo_data: bool = False

    # Fixed exchange rates; both sides configured independently
    usd_to_khr_rate: Decimal = Decimal("4000")
    khr_to_usd_rate: Decimal = Decimal("0.00025")
    enforce_reciprocal_rates: bool = True

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # Summaries
    summary_min_year: int = 2020
    summary_max_year: int = 2030
    recent_months: int = 3
    top_k: int = 5
    ranking_window_months: int = 3

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        if self.usd_to_khr_rate <= 0 or self.khr_to_usd_rate <= 0:
            raise ValueError("exchange rates must be positive")
        if not (1 <= self.default_page_size <= self.max_page_size):
            raise ValueError(
                f"default_page_size must be within 1..{self.max_page_size}"
            )
        if self.summary_min_year > self.summary_max_year:
            raise ValueError("summary_min_year cannot exceed summary_max_year")
        for name in ("recent_months", "top_k", "ranking_window_months"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
