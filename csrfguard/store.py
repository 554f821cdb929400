"""Where the unmasked per-client secret lives between requests."""
from typing import Protocol

from starlette.requests import Request
from starlette.responses import Response

from .config import CSRFConfig, TokenBackend
from .exceptions import ConfigurationError


class TokenStore(Protocol):
    def load(self, request: Request) -> str | None: ...

    def save(self, response: Response, secret: str, max_age: int) -> None: ...


class CookieTokenStore:
    """Secret kept in a plain site-wide cookie (config.cookie_key)."""

    def __init__(self, config: CSRFConfig):
        self.config = config

    def load(self, request: Request) -> str | None:
        return request.cookies.get(self.config.cookie_key)

    def save(self, response: Response, secret: str, max_age: int) -> None:
        response.set_cookie(
            self.config.cookie_key,
            secret,
            max_age=max_age,
            path=self.config.cookie_path,
            domain=self.config.cookie_domain,
            secure=self.config.cookie_secure,
            httponly=self.config.cookie_httponly,
            samesite=self.config.cookie_samesite,
        )


def build_token_store(config: CSRFConfig) -> TokenStore:
    if config.backend is TokenBackend.COOKIE:
        return CookieTokenStore(config)
    if config.backend is TokenBackend.SESSION:
        raise ConfigurationError("Session token storage is not implemented; use the cookie backend.")
    raise ConfigurationError(f"Unknown token backend: {config.backend!r}")
