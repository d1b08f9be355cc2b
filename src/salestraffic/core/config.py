import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field

# In a real deployment, load these from the environment or a secrets manager
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "your-secret-key-for-jwt-!ChangeMe!"
)  # TODO: Refuse to start with the default secret outside of local development
ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./sales_traffic.sqlite3")
MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "stat")
REPORT_COLLECTION: str = os.getenv("REPORT_COLLECTION", "report")

CACHE_MAXSIZE: int = int(os.getenv("CACHE_MAXSIZE", "128"))
_cache_ttl = os.getenv("CACHE_TTL_SECONDS")
CACHE_TTL_SECONDS: Optional[float] = float(_cache_ttl) if _cache_ttl else None

# Only for load-testing demos: makes the units/sales cache effect visible.
REPORT_DEMO_DELAY_SECONDS: float = float(os.getenv("REPORT_DEMO_DELAY_SECONDS", "0"))

PUBLIC_PATHS: tuple[str, ...] = tuple(
    p.strip()
    for p in os.getenv("PUBLIC_PATHS", "/api/auth/signup,/api/auth/login").split(",")
    if p.strip()
)


class Settings(BaseModel):
    """Runtime settings for one application instance.

    Defaults come from the module-level environment values above, so
    ``Settings()`` reflects the process environment while tests can build
    an instance with overrides.
    """

    secret_key: str = SECRET_KEY
    algorithm: str = ALGORITHM
    access_token_expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES

    database_url: str = DATABASE_URL
    generate_schemas: bool = True

    mongodb_url: str = MONGODB_URL
    mongodb_database: str = MONGODB_DATABASE
    report_collection: str = REPORT_COLLECTION

    cache_maxsize: int = Field(CACHE_MAXSIZE, ge=1)
    cache_ttl_seconds: Optional[float] = CACHE_TTL_SECONDS
    report_demo_delay_seconds: float = Field(REPORT_DEMO_DELAY_SECONDS, ge=0)

    public_paths: tuple[str, ...] = PUBLIC_PATHS


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_tortoise_config(database_url: str) -> dict:
    return {
        "connections": {"default": database_url},
        "apps": {
            "models": {
                "models": ["salestraffic.features.auth.models"],
                "default_connection": "default",
            }
        },
    }
