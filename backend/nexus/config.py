import json
import os
import threading
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()

SUPPORTED_DATABASE_SCHEMES = frozenset({"sqlite+aiosqlite", "postgresql+asyncpg"})

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, str(default)).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value")


def _parse_allowed_origins(raw: str) -> list[str]:
    # Support both CSV format and JSON array format
    if raw.startswith("["):
        try:
            parsed_list = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"ALLOWED_ORIGINS JSON is malformed: {exc}") from exc
        if not isinstance(parsed_list, list):
            raise ValueError("ALLOWED_ORIGINS JSON must be an array")
        origins = [
            origin.strip() for origin in parsed_list if isinstance(origin, str) and origin.strip()
        ]
    else:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

    if not origins:
        raise ValueError("ALLOWED_ORIGINS must contain at least one origin")

    if "*" in origins:
        raise ValueError(
            "ALLOWED_ORIGINS cannot contain '*' when credentialed requests are used"
        )

    for origin in origins:
        parsed = urlparse(origin)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "ALLOWED_ORIGINS must contain valid http/https origins with host"
            )
    return origins


class Settings(BaseModel):
    app_name: str = Field(default="Nexus Admin")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    database_url: str = Field(default="sqlite+aiosqlite:///:memory:")
    allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    seed_on_startup: bool = Field(default=True)
    strict_references: bool = Field(default=False)
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    @classmethod
    def from_env(cls) -> "Settings":
        fields = cls.model_fields

        raw_allowed_origins = os.getenv("ALLOWED_ORIGINS", "").strip()
        if raw_allowed_origins:
            allowed_origins = _parse_allowed_origins(raw_allowed_origins)
        else:
            allowed_origins = fields["allowed_origins"].get_default(call_default_factory=True)

        database_url = os.getenv("DATABASE_URL", "").strip() or fields["database_url"].default
        parsed_db = urlparse(database_url)
        if parsed_db.scheme not in SUPPORTED_DATABASE_SCHEMES:
            raise ValueError(
                "DATABASE_URL must start with 'sqlite+aiosqlite://' or 'postgresql+asyncpg://'"
            )
        if parsed_db.scheme == "postgresql+asyncpg" and not parsed_db.hostname:
            raise ValueError("DATABASE_URL must include hostname")

        default_page_size = int(
            os.getenv("DEFAULT_PAGE_SIZE", fields["default_page_size"].default)
        )
        if default_page_size <= 0:
            raise ValueError("DEFAULT_PAGE_SIZE must be greater than 0")

        max_page_size = int(os.getenv("MAX_PAGE_SIZE", fields["max_page_size"].default))
        if max_page_size < default_page_size:
            raise ValueError("MAX_PAGE_SIZE must be greater than or equal to DEFAULT_PAGE_SIZE")

        return cls(
            app_name=os.getenv("APP_NAME", fields["app_name"].default),
            debug=_parse_bool("DEBUG", fields["debug"].default),
            log_level=os.getenv("LOG_LEVEL", fields["log_level"].default).upper(),
            database_url=database_url,
            allowed_origins=allowed_origins,
            seed_on_startup=_parse_bool("SEED_ON_STARTUP", fields["seed_on_startup"].default),
            strict_references=_parse_bool(
                "STRICT_REFERENCES", fields["strict_references"].default
            ),
            default_page_size=default_page_size,
            max_page_size=max_page_size,
        )


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    The module can be imported without reading the environment; validation
    happens when settings are first requested (normally during app creation).

    Raises:
        ValueError: If environment variables are present but invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None
