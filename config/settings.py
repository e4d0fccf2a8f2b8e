"""
Application settings loaded from environment variables.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Document store ──────────────────────────────────────────────────
    database_url: str = ""              # base URL of the document store, e.g. https://couch.example.com
    auth_db: str = "users"              # collection holding identity documents
    db_username: str = ""               # basic-auth user for the store
    db_password: str = ""
    store_timeout_seconds: float = 10.0

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = ""                # HMAC secret for session tokens
    jwt_algorithm: str = "HS256"
    jwt_expiry_seconds: int = 604800    # 7 days
    verify_identity_on_request: bool = False

    # ── Session cookie ───────────────────────────────────────────────────
    cookie_name: str = "auth"
    cookie_secure: bool = True

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    def missing_store_config(self) -> List[str]:
        """Names of the store settings that are still empty."""
        required = {
            "DATABASE_URL": self.database_url,
            "DB_USERNAME": self.db_username,
            "DB_PASSWORD": self.db_password,
        }
        return [name for name, value in required.items() if not value]

    def missing_auth_config(self) -> List[str]:
        return [] if self.jwt_secret else ["JWT_SECRET"]


@lru_cache
def get_settings() -> Settings:
    """Dependency function — override in tests via ``app.dependency_overrides``."""
    return Settings()


config = get_settings()
