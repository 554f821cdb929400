from .config import CSRFConfig, TokenBackend
from .csrf import (
    CSRFContext,
    CSRFMiddleware,
    CSRFState,
    get_csrf_context,
    get_csrf_html,
    get_csrf_token,
    install_template_globals,
)
from .exceptions import ConfigurationError, CSRFError
from .tokens import generate_secret, mask_token, unmask_token, verify_token

__version__ = "1.0"

__all__ = [
    "CSRFConfig",
    "CSRFContext",
    "CSRFError",
    "CSRFMiddleware",
    "CSRFState",
    "ConfigurationError",
    "TokenBackend",
    "generate_secret",
    "get_csrf_context",
    "get_csrf_html",
    "get_csrf_token",
    "install_template_globals",
    "mask_token",
    "unmask_token",
    "verify_token",
]
