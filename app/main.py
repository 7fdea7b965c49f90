from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import Settings, get_settings
from app.core.logging import setup_logging
from app.api import health, tokens
from app.api.middleware import access_log_middleware, security_headers_middleware
from app.livekit.tokens import SigningContext


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    # Missing LIVEKIT_* config exits here, before any route is mounted
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Room Token Service")
    app.state.signing_context = SigningContext.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(access_log_middleware)

    app.include_router(health.router)
    app.include_router(tokens.router)
    return app


app = create_app()
