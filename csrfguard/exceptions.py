class CSRFError(Exception):
    """Base class for csrfguard errors."""


class ConfigurationError(CSRFError):
    """CSRF protection is configured in a way that cannot work (e.g. an unimplemented backend)."""
