import os
import logging
from logging.handlers import RotatingFileHandler
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Form
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from .config import CSRFConfig
from .csrf import CSRFMiddleware, get_csrf_token, install_template_globals

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")

templates = Jinja2Templates(directory=_TEMPLATES_DIR)
install_template_globals(templates)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _nastavi_logging() -> None:
    """Doda RotatingFileHandler na root logger (LOG_DIR/app.log, 5 MB × 5)."""
    log_dir = os.getenv("LOG_DIR", "data")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "app.log")
    fmt = logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    root = logging.getLogger()
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        handler = RotatingFileHandler(
            log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        handler.setFormatter(fmt)
        root.addHandler(handler)
        if root.level == logging.NOTSET:
            root.setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Aplikacija
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    _nastavi_logging()
    config: CSRFConfig = app.state.csrf_config
    if config.debug:
        logger.warning("CSRF v razvojnem načinu – 403 odgovori vsebujejo razlago.")
    logger.info(f"CSRF zaščita aktivna (piškotek {config.cookie_key}, header {config.header_name})")
    yield


def create_app(config: CSRFConfig | None = None) -> FastAPI:
    config = config or CSRFConfig.from_env()

    app = FastAPI(title="csrfguard demo", lifespan=lifespan)
    app.state.csrf_config = config
    app.add_middleware(CSRFMiddleware, config=config)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/form", response_class=HTMLResponse)
    async def form_stran(request: Request) -> Response:
        return templates.TemplateResponse(request, "form.html", {"request": request})

    @app.post("/form", response_class=HTMLResponse)
    async def form_oddaja(request: Request, komentar: str = Form("")) -> Response:
        logger.info(f"Sprejet obrazec ({len(komentar)} znakov)")
        return templates.TemplateResponse(
            request, "form.html", {"request": request, "sporocilo": f"Sprejeto: {komentar}"}
        )

    @app.get("/token")
    async def token(request: Request) -> dict[str, str]:
        """Maskiran žeton za skripte, ki ga pošljejo v headerju."""
        return {"token": get_csrf_token(request), "header": config.header_name}

    @app.put("/items/{item_id}")
    async def posodobi(item_id: int) -> dict:
        return {"id": item_id, "status": "updated"}

    @app.delete("/items/{item_id}")
    async def izbrisi(item_id: int) -> dict:
        return {"id": item_id, "status": "deleted"}

    return app


def run() -> None:
    import uvicorn

    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
