# task_tracker/core/config.py
import logging
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

from task_tracker.core.durations import parse_duration

logger = logging.getLogger(__name__)

# Fallbacks used outside prod only. Prod refuses to start without real values.
DEFAULT_ACCESS_SECRET = "default-access-secret"
DEFAULT_REFRESH_SECRET = "default-refresh-secret"
DEFAULT_SQLITE_URL = "sqlite:///./task_tracker.db"


def str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def merge_unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in items:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


class Settings:
    def __init__(self) -> None:
        self.ENV = os.getenv("ENV", "dev").strip().lower()  # dev | test | prod
        if self.ENV != "prod":
            # Load .env only for non-prod so prod can't be accidentally influenced by local files.
            load_dotenv()

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

        # Names of settings that silently fell back to an insecure built-in value.
        self.insecure_defaults: list[str] = []

        # ----------------------------
        # Database
        # ----------------------------
        self.DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
        self.DB_HOST = os.getenv("DB_HOST", "")
        self.DB_PORT = os.getenv("DB_PORT", "5432")
        self.DB_NAME = os.getenv("DB_NAME", "")
        self.DB_USER = os.getenv("DB_USER", "")
        self.DB_PASSWORD = os.getenv("DB_PASSWORD", "")
        self.DB_SSLMODE = os.getenv("DB_SSLMODE", "prefer").strip().lower()

        # ----------------------------
        # CORS
        # ----------------------------
        dev_defaults = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

        cors_from_env = parse_csv(os.getenv("CORS_ORIGINS"))
        if self.ENV == "prod":
            self.CORS_ORIGINS = merge_unique(cors_from_env)
        else:
            self.CORS_ORIGINS = merge_unique(cors_from_env + dev_defaults)

        # ----------------------------
        # Auth / JWT
        # ----------------------------
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_ACCESS_SECRET = self._secret("JWT_ACCESS_SECRET", DEFAULT_ACCESS_SECRET)
        self.JWT_REFRESH_SECRET = self._secret("JWT_REFRESH_SECRET", DEFAULT_REFRESH_SECRET)
        self.JWT_ACCESS_EXPIRY = os.getenv("JWT_ACCESS_EXPIRY", "15m").strip()
        self.JWT_REFRESH_EXPIRY = os.getenv("JWT_REFRESH_EXPIRY", "7d").strip()

        self.REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refreshToken")
        self.REFRESH_COOKIE_SAMESITE = os.getenv("REFRESH_COOKIE_SAMESITE", "strict")
        self.REFRESH_COOKIE_PATH = os.getenv("REFRESH_COOKIE_PATH", "/")
        self.REFRESH_COOKIE_DOMAIN = os.getenv("REFRESH_COOKIE_DOMAIN", "") or None

        # ----------------------------
        # Password policy
        # ----------------------------
        self.PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))

        # ----------------------------
        # Rate limiting
        # ----------------------------
        self.ENABLE_RATE_LIMITING = str_to_bool(os.getenv("ENABLE_RATE_LIMITING"), default=self.ENV == "prod")
        self.AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "100/15 minutes")

        self._validate_durations()
        # Final: fail fast in prod
        self._validate_prod()

    def _secret(self, key: str, fallback: str) -> str:
        value = os.getenv(key, "").strip()
        if value:
            return value
        self.insecure_defaults.append(key)
        return fallback

    def _validate_durations(self) -> None:
        for key in ("JWT_ACCESS_EXPIRY", "JWT_REFRESH_EXPIRY"):
            try:
                parse_duration(getattr(self, key))
            except ValueError as e:
                raise RuntimeError(f"{key} is not a valid duration: {e}") from e

    def _validate_prod(self) -> None:
        if self.ENV != "prod":
            return

        missing: list[str] = []

        # Insecure fallbacks are never acceptable in prod.
        missing.extend(self.insecure_defaults)

        if not self.DATABASE_URL and not self.DB_HOST:
            missing.append("DATABASE_URL")
        if self.DB_HOST and not self.DB_NAME:
            missing.append("DB_NAME")

        if not self.CORS_ORIGINS:
            missing.append("CORS_ORIGINS")

        if missing:
            raise RuntimeError(f"Missing required prod env vars: {', '.join(missing)}")

        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ in prod")

        cors_joined = ",".join(self.CORS_ORIGINS)
        if "localhost" in cors_joined or "127.0.0.1" in cors_joined:
            raise RuntimeError("CORS_ORIGINS contains localhost/dev origins in prod")

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"

    @property
    def access_token_lifetime(self):
        return parse_duration(self.JWT_ACCESS_EXPIRY)

    @property
    def refresh_token_lifetime(self):
        return parse_duration(self.JWT_REFRESH_EXPIRY)

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            encoded_password = quote_plus(self.DB_PASSWORD)
            return (
                f"postgresql+psycopg2://{self.DB_USER}:{encoded_password}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
                f"?sslmode={self.DB_SSLMODE}"
            )
        return DEFAULT_SQLITE_URL

    def warn_insecure_defaults(self) -> None:
        if self.insecure_defaults:
            logger.warning(
                "Using insecure built-in fallbacks for %s (ENV=%s). Set them before deploying.",
                ", ".join(self.insecure_defaults),
                self.ENV,
            )


settings = Settings()
