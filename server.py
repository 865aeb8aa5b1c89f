"""FastAPI entry point for the shop floor web API and dashboard."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

load_dotenv(Path(__file__).resolve().with_name(".env"))

from shopfloor_web.config import Settings
from shopfloor_web.database import Database
from shopfloor_web.errors import install_exception_handlers
from shopfloor_web.routes import announcements, barrels, inventory, users
from shopfloor_web.seed import seed_all

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).resolve().parent / "shopfloor_web"
templates = Jinja2Templates(directory=str(WEB_DIR / "templates"))

API_ENDPOINTS = ["/auth/login", "/inventory", "/barrels", "/announcements"]


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.init_db()
    with database.session_scope() as session:
        seed_all(session, app.state.settings)
    logger.info("Shop floor API ready (%s)", app.state.settings.environment)
    try:
        yield
    finally:
        database.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject strict security headers for every HTTP response."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault(
            "Permissions-Policy",
            "camera=(), microphone=(), geolocation=()",
        )
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "connect-src 'self'; "
            "frame-ancestors 'none';",
        )
        return response


def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """Build the application around an explicit settings object and storage handle."""

    settings = (settings or Settings.from_env()).validate()
    database = database or Database(settings.database_url)

    app = FastAPI(title="Shop Floor", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(inventory.router)
    app.include_router(barrels.router)
    app.include_router(announcements.router)
    app.mount("/static", StaticFiles(directory=str(WEB_DIR / "static")), name="static")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api")
    async def api_index() -> dict[str, object]:
        return {"message": "API is running", "endpoints": API_ENDPOINTS}

    @app.get("/", response_class=HTMLResponse)
    async def home_page(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(request, "login.html", {})

    @app.get("/login", response_class=HTMLResponse)
    async def login_page(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(request, "login.html", {})

    @app.get("/dashboard", response_class=HTMLResponse)
    async def dashboard_page(request: Request) -> HTMLResponse:
        # The page authenticates its own API calls with the stored token.
        return templates.TemplateResponse(request, "dashboard.html", {})

    return app


app = create_app()


def run() -> None:
    """Helper to run the development server."""

    import uvicorn

    settings: Settings = app.state.settings
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run("server:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    run()
