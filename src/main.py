from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.errors import register_exception_handlers
from src.infrastructure.api.middlewares import add_default_middlewares
from src.infrastructure.api.routes.auth_routes import router as auth_router
from src.infrastructure.api.routes.profile_routes import router as profile_router
from src.infrastructure.api.routes.user_routes import router as user_router
from src.infrastructure.database.postgres_client import get_postgres_client
from src.infrastructure.logging import configure_logging, get_logger

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    pg = get_postgres_client()
    if pg is not None:
        pg.ensure_schema()
    logger.info("startup_complete", version=app.version, local_db=pg is not None)
    yield
    if pg is not None:
        pg.close()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="DevConnector Backend",
        version="0.1.0",
        lifespan=lifespan,
        description="""
        ## DevConnector Backend API

        FastAPI backend for developer accounts and profiles, with Clean
        Architecture and PostgreSQL or Supabase for storage.

        ### Features
        - **Authentication**: Email/password login issuing signed JWTs
        - **Profiles**: One profile per user with skills, social links,
          experience and education
        - **Public directory**: List all profiles or fetch one by user id

        ### Authentication
        Private endpoints require the token returned by `POST /auth` or
        `POST /users` in the `x-auth-token` header:
        ```
        x-auth-token: your-jwt-token
        ```

        ### Error Responses
        - **400 Bad Request**: `{"errors": [...]}` for invalid input, `{"msg": ...}` when a
          profile or entry does not exist
        - **401 Unauthorized**: `{"msg": ...}` for a missing or invalid token
        - **500 Internal Server Error**: plain text `Server Error`
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app)
    register_exception_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the DevConnector API",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "devconnector-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(user_router)
    app.include_router(auth_router)
    app.include_router(profile_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
