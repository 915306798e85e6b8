# agricloud/config.py
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _float_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    database_url: str
    open_meteo_url: str
    open_meteo_archive_url: str
    soilgrids_url: str
    http_timeout: float
    oracle_api_url: str
    oracle_api_key: str
    oracle_model: str
    oracle_timeout: float
    log_level: str
    cors_origins: tuple


@lru_cache()
def get_settings() -> Settings:
    origins = os.getenv("AGRICLOUD_CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("AGRICLOUD_DATABASE_URL", "sqlite:///./agricloud.db"),
        open_meteo_url=os.getenv("OPEN_METEO_URL", "https://api.open-meteo.com/v1/forecast"),
        open_meteo_archive_url=os.getenv("OPEN_METEO_ARCHIVE_URL", "https://archive-api.open-meteo.com/v1/archive"),
        soilgrids_url=os.getenv("SOILGRIDS_URL", "https://rest.isric.org/soilgrids/v2.0/properties/query"),
        http_timeout=_float_env("AGRICLOUD_HTTP_TIMEOUT", 10.0),
        oracle_api_url=os.getenv("ORACLE_API_URL", "https://api.openai.com/v1/chat/completions"),
        oracle_api_key=os.getenv("ORACLE_API_KEY", ""),
        oracle_model=os.getenv("ORACLE_MODEL", "gpt-4o-mini"),
        oracle_timeout=_float_env("ORACLE_TIMEOUT", 60.0),
        log_level=os.getenv("AGRICLOUD_LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
