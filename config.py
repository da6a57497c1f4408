import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        recent_limit: int,
        import_limit: int,
        forecast_periods: int,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.recent_limit = recent_limit
        self.import_limit = import_limit
        self.forecast_periods = forecast_periods


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("FINANCE_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "finance.db"
    database_url = os.getenv("FINANCE_DATABASE_URL", f"sqlite:///{default_db}")
    timezone = os.getenv("FINANCE_TIMEZONE", "Europe/Berlin")
    recent_limit = int(os.getenv("FINANCE_RECENT_LIMIT", "5"))
    import_limit = int(os.getenv("FINANCE_IMPORT_LIMIT", "1000"))
    forecast_periods = int(os.getenv("FINANCE_FORECAST_PERIODS", "3"))
    return Settings(
        database_url=database_url,
        timezone=timezone,
        recent_limit=recent_limit,
        import_limit=import_limit,
        forecast_periods=forecast_periods,
    )
