"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stargazers.api.exception_handlers import setup_exception_handlers
from stargazers.api.v1 import router as api_router
from stargazers.core.config import Settings, get_settings
from stargazers.store import build_stores


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app around one settings object and the record stores it selects."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Stargazers API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.stores = build_stores(settings)

    # Credentialed CORS: the session cookie must reach the API from the SPA origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Stargazers API"}

    return app


app = create_app()
