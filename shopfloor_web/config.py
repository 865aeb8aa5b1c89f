"""Process configuration for the shop web API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DEFAULT_SECRET_KEY = "change-me"
ENVIRONMENTS = ("development", "production", "test")


class ConfigurationError(ValueError):
    """Raised when the environment does not describe a usable configuration."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid configuration: " + "; ".join(problems))


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    database_url: str = "sqlite:///./shopfloor.db"
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    environment: str = "development"
    admin_username: str = "admin"
    admin_password: str = "admin123"
    user_username: str = "user"
    user_password: str = "user123"
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (``os.environ`` by default)."""

        env = os.environ if environ is None else environ
        defaults = cls()
        problems: list[str] = []

        def _int(name: str, fallback: int) -> int:
            raw = env.get(name)
            if raw is None or raw == "":
                return fallback
            try:
                return int(raw)
            except ValueError:
                problems.append(f"{name} must be an integer")
                return fallback

        settings = cls(
            database_url=env.get("SHOPFLOOR_DATABASE_URL", defaults.database_url),
            secret_key=env.get("SHOPFLOOR_SECRET_KEY", defaults.secret_key),
            jwt_algorithm=env.get("SHOPFLOOR_JWT_ALGORITHM", defaults.jwt_algorithm),
            access_token_expire_minutes=_int(
                "SHOPFLOOR_ACCESS_TOKEN_EXPIRE_MINUTES",
                defaults.access_token_expire_minutes,
            ),
            environment=env.get("SHOPFLOOR_ENV", defaults.environment),
            admin_username=env.get("SHOPFLOOR_ADMIN_USERNAME", defaults.admin_username),
            admin_password=env.get("SHOPFLOOR_ADMIN_PASSWORD", defaults.admin_password),
            user_username=env.get("SHOPFLOOR_USER_USERNAME", defaults.user_username),
            user_password=env.get("SHOPFLOOR_USER_PASSWORD", defaults.user_password),
            cors_origins=_split_origins(
                env.get("SHOPFLOOR_CORS_ORIGINS", ",".join(defaults.cors_origins))
            ),
            log_level=env.get("SHOPFLOOR_LOG_LEVEL", defaults.log_level).upper(),
            host=env.get("SHOPFLOOR_HOST", defaults.host),
            port=_int("SHOPFLOOR_PORT", defaults.port),
        )
        if problems:
            raise ConfigurationError(problems)
        return settings

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> "Settings":
        """Return ``self`` or raise :class:`ConfigurationError` listing every problem."""

        problems: list[str] = []
        if self.environment not in ENVIRONMENTS:
            problems.append(
                f"SHOPFLOOR_ENV must be one of {', '.join(ENVIRONMENTS)}"
            )
        if self.access_token_expire_minutes <= 0:
            problems.append("SHOPFLOOR_ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
        if not 0 < self.port < 65536:
            problems.append("SHOPFLOOR_PORT must be a valid TCP port")
        if self.is_production:
            if len(self.secret_key) < 32 or self.secret_key == DEFAULT_SECRET_KEY:
                problems.append("SHOPFLOOR_SECRET_KEY must be at least 32 characters")
            for label, username, password in (
                ("ADMIN", self.admin_username, self.admin_password),
                ("USER", self.user_username, self.user_password),
            ):
                if len(username) < 3:
                    problems.append(f"SHOPFLOOR_{label}_USERNAME must be at least 3 characters")
                if len(password) < 8:
                    problems.append(f"SHOPFLOOR_{label}_PASSWORD must be at least 8 characters")
        if problems:
            raise ConfigurationError(problems)
        return self
