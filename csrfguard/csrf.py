import logging
from dataclasses import dataclass
from enum import Enum

from markupsafe import Markup
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from .config import FORM_FIELD, CSRFConfig
from .exceptions import ConfigurationError
from .store import TokenStore, build_token_store
from .tokens import generate_secret, is_valid_secret, mask_token, verify_token

logger = logging.getLogger(__name__)

PROTECTED_METHODS = frozenset({"POST", "PUT", "DELETE"})

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

REJECTED_MESSAGE = "CSRF verification failed! Request aborted."


class CSRFState(str, Enum):
    ISSUED = "issued"
    VERIFIED = "verified"
    REJECTED = "rejected"


@dataclass
class CSRFContext:
    """Per-request CSRF state, attached to request.state.csrf by CSRFMiddleware."""

    secret: str
    state: CSRFState = CSRFState.ISSUED
    new_secret: bool = False
    masked_token: str | None = None

    def current_masked_token(self) -> str:
        # Masked once per request so every embed in one response matches.
        if self.masked_token is None:
            self.masked_token = mask_token(self.secret)
        return self.masked_token


def get_csrf_context(request: Request) -> CSRFContext:
    context = getattr(request.state, "csrf", None)
    if not isinstance(context, CSRFContext):
        raise ConfigurationError("CSRFMiddleware is not installed for this request.")
    return context


def get_csrf_token(request: Request) -> str:
    """Masked CSRF token for this request. Used as Jinja2 template global."""
    return get_csrf_context(request).current_masked_token()


def get_csrf_html(request: Request) -> Markup:
    """Hidden <input> carrying the masked token, ready to embed in a form."""
    token = get_csrf_token(request)
    return Markup('<input type="hidden" name="{}" value="{}">').format(FORM_FIELD, token)


def install_template_globals(templates) -> None:
    """Register csrf_token(request) and csrf_input(request) on Jinja2Templates."""
    templates.env.globals["csrf_token"] = get_csrf_token
    templates.env.globals["csrf_input"] = get_csrf_html


class CSRFMiddleware(BaseHTTPMiddleware):
    """Issues the per-client secret and verifies POST/PUT/DELETE requests.

    The secret is read from the token store; when it is missing or malformed
    a new one is generated and written back on the response. Protected
    methods must carry a masked copy of the secret, either in the
    ``csrftoken`` form field or in the configured header (form field wins).
    Anything else is answered with 403 before the endpoint runs.
    """

    def __init__(self, app: ASGIApp, config: CSRFConfig | None = None, store: TokenStore | None = None):
        super().__init__(app)
        self.config = config or CSRFConfig()
        self.store = store if store is not None else build_token_store(self.config)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        context = self._load_context(request)
        request.state.csrf = context

        if request.method in PROTECTED_METHODS:
            supplied = await self._request_token(request)
            if verify_token(supplied, context.secret):
                context.state = CSRFState.VERIFIED
            else:
                context.state = CSRFState.REJECTED
                client = request.client.host if request.client else "unknown"
                logger.warning(f"CSRF zavrnjen: {request.method} {request.url.path} ({client})")
                response = self._rejected_response()
                self._persist(context, response)
                return response

        response = await call_next(request)
        self._persist(context, response)
        return response

    def _load_context(self, request: Request) -> CSRFContext:
        secret = self.store.load(request)
        if is_valid_secret(secret):
            return CSRFContext(secret=secret)
        context = CSRFContext(secret=generate_secret(), new_secret=True)
        logger.info(f"Nov CSRF žeton za {request.client.host if request.client else 'unknown'}")
        return context

    def _persist(self, context: CSRFContext, response: Response) -> None:
        if context.new_secret:
            self.store.save(response, context.secret, self.config.cookie_max_age)

    async def _request_token(self, request: Request) -> str:
        token = ""
        content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if content_type in _FORM_CONTENT_TYPES:
            # body() first: the cached body is replayed to the endpoint.
            await request.body()
            try:
                form = await request.form()
            except (MultiPartException, HTTPException):
                form = None
            if form is not None:
                # First value wins when the field is repeated.
                values = form.getlist(FORM_FIELD)
                if values and isinstance(values[0], str):
                    token = values[0]
                await form.close()
        if not token:
            token = request.headers.get(self.config.header_name, "")
        return token

    def _rejected_response(self) -> Response:
        if self.config.debug:
            return PlainTextResponse(REJECTED_MESSAGE, status_code=403)
        return Response(status_code=403)
