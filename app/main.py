from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.auth import router as auth_router
from app.api.checkins import router as checkins_router
from app.api.health import router as health_router
from app.api.me import router as me_router
from app.api.root import router as root_router
from app.api.users import router as users_router
from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.core.security import AuthMiddleware
from app.core.tokens import TokenService
from app.db.session import build_engine, build_session_factory


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the API. Run with:
      uvicorn app.main:create_app --factory
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Team Check-in API")

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = TokenService.from_settings(settings)

    register_exception_handlers(app)

    # added first so it runs inside CORS
    app.add_middleware(AuthMiddleware, token_service=app.state.token_service)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(users_router)
    app.include_router(checkins_router)
    return app
