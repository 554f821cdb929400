"""Nastavitve CSRF zaščite – sestavijo se enkrat ob zagonu aplikacije."""
import os
from dataclasses import dataclass
from enum import Enum

from .exceptions import ConfigurationError

FORM_FIELD = "csrftoken"

_SAMESITE_VALUES = ("lax", "strict", "none")
_TRUE_VALUES = ("1", "true", "yes", "on")


class TokenBackend(str, Enum):
    COOKIE = "cookie"
    SESSION = "session"


@dataclass(frozen=True)
class CSRFConfig:
    cookie_key: str = "CSRFToken"
    header_name: str = "X-CSRFToken"
    cookie_max_age: int = 86400  # 24 ur
    backend: TokenBackend = TokenBackend.COOKIE

    # Atributi piškotka
    cookie_path: str = "/"
    cookie_domain: str | None = None
    cookie_secure: bool = False
    cookie_httponly: bool = False
    cookie_samesite: str = "lax"

    # Razvojni način: 403 odgovor vsebuje razlago
    debug: bool = False

    def __post_init__(self):
        if not self.cookie_key:
            raise ConfigurationError("cookie_key must not be empty")
        if not self.header_name:
            raise ConfigurationError("header_name must not be empty")
        if self.cookie_max_age < 0:
            raise ConfigurationError("cookie_max_age must be >= 0")
        if self.cookie_samesite not in _SAMESITE_VALUES:
            raise ConfigurationError(
                f"cookie_samesite must be one of {_SAMESITE_VALUES}, got {self.cookie_samesite!r}"
            )
        try:
            object.__setattr__(self, "backend", TokenBackend(self.backend))
        except ValueError:
            raise ConfigurationError(f"Unknown token backend: {self.backend!r}") from None

    @classmethod
    def from_env(cls) -> "CSRFConfig":
        """Prebere nastavitve iz okoljskih spremenljivk (CSRF_*, ENVIRONMENT)."""
        age_raw = os.getenv("CSRF_COOKIE_AGE", "86400")
        try:
            age = int(age_raw)
        except ValueError:
            raise ConfigurationError(f"CSRF_COOKIE_AGE is not an integer: {age_raw!r}") from None

        backend_raw = os.getenv("CSRF_BACKEND", TokenBackend.COOKIE.value).strip().lower()
        try:
            backend = TokenBackend(backend_raw)
        except ValueError:
            raise ConfigurationError(f"Unknown CSRF_BACKEND: {backend_raw!r}") from None

        return cls(
            cookie_key=os.getenv("CSRF_COOKIE_KEY", "CSRFToken"),
            header_name=os.getenv("CSRF_HEADER", "X-CSRFToken"),
            cookie_max_age=age,
            backend=backend,
            cookie_secure=_env_bool("CSRF_COOKIE_SECURE"),
            cookie_httponly=_env_bool("CSRF_COOKIE_HTTPONLY"),
            cookie_samesite=os.getenv("CSRF_COOKIE_SAMESITE", "lax").strip().lower(),
            debug=os.getenv("ENVIRONMENT", "production") == "development",
        )


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES
