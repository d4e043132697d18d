import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, settings as default_settings
from app.core.errors import register_exception_handlers
from app.core.logging_config import configure_logging, install_request_logging
from app.core.security import PasswordHasher, TokenService
from app.db.tables import Tables, build_tables
from app.models.base import utc_now_iso
from app.routes import auth, dsa, progress, tech_products
from app.services.image_storage import LocalImageStorage, build_image_storage

logger = logging.getLogger("app.main")


def create_app(settings: Optional[Settings] = None, tables: Optional[Tables] = None) -> FastAPI:
    """Build the application; ``tables`` overrides the configured document store."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Authentication, DSA problem tracking and tech product catalog API",
    )

    app.state.settings = settings
    app.state.tables = tables or build_tables(settings)
    app.state.tokens = TokenService(settings)
    app.state.hasher = PasswordHasher(settings.BCRYPT_ROUNDS)
    app.state.image_storage = build_image_storage(settings)

    # CORS configuration (no configured origins allows any origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    install_request_logging(app)
    register_exception_handlers(app, debug=not settings.is_production)

    # Register routers
    app.include_router(auth.router)
    app.include_router(dsa.router)
    app.include_router(progress.router)
    app.include_router(tech_products.router)

    if isinstance(app.state.image_storage, LocalImageStorage):
        app.mount(
            settings.UPLOAD_URL_PREFIX,
            StaticFiles(directory=str(app.state.image_storage.upload_dir)),
            name="uploads",
        )

    @app.get("/api/health")
    def health():
        return {
            "success": True,
            "status": "OK",
            "message": "Server is running",
            "timestamp": utc_now_iso(),
        }

    @app.get("/")
    def root():
        return {
            "success": True,
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "endpoints": {
                "health": "/api/health",
                "auth": {
                    "signup": "POST /api/auth/signup",
                    "login": "POST /api/auth/login",
                    "refresh": "POST /api/auth/refresh",
                    "me": "GET /api/auth/me",
                    "profile": "PUT /api/auth/profile",
                    "changePassword": "PUT /api/auth/change-password",
                    "logout": "POST /api/auth/logout",
                    "createAdmin": "POST /api/auth/create-admin",
                },
                "dsa": "/api/dsa",
                "progress": "/api/progress",
                "techProducts": "/api/tech-products",
            },
        }

    logger.info(
        "%s v%s ready (environment=%s, store=%s)",
        settings.APP_NAME,
        settings.APP_VERSION,
        settings.ENVIRONMENT,
        settings.STORE_BACKEND,
    )
    return app


app = create_app()


def run():
    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.PORT)


if __name__ == "__main__":
    run()
