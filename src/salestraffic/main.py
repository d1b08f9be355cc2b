import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorClient
from tortoise.contrib.fastapi import RegisterTortoise, tortoise_exception_handlers

from .core.cache import CacheManager
from .core.config import Settings, build_tortoise_config, get_settings
from .core.logging_config import configure_logging
from .features.auth import service as auth_service
from .features.auth.middleware import AccessControlMiddleware, JwtAuthenticationMiddleware
from .features.auth.router import router as auth_router
from .features.auth.security import TokenVerifier
from .features.reports.repository import MongoReportRepository, ReportRepository
from .features.reports.router import router as reports_router
from .features.reports.service import SalesAndTrafficService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    report_repository: Optional[ReportRepository] = None,
) -> FastAPI:
    """
    Build the API application.

    ``report_repository`` replaces the MongoDB-backed repository, which is
    how tests run without a MongoDB server.
    """
    settings = settings or get_settings()
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting application...")
        async with RegisterTortoise(
            app=app,
            config=build_tortoise_config(settings.database_url),
            generate_schemas=settings.generate_schemas,
        ):
            logger.info("Tortoise-ORM has been initialized.")

            mongo_client = None
            repository = report_repository
            if repository is None:
                mongo_client = AsyncIOMotorClient(settings.mongodb_url)
                collection = mongo_client[settings.mongodb_database][settings.report_collection]
                repository = MongoReportRepository(collection)
                logger.info(f"Reading reports from {settings.mongodb_database}.{settings.report_collection}")

            app.state.report_service = SalesAndTrafficService(
                repository,
                CacheManager(maxsize=settings.cache_maxsize, ttl=settings.cache_ttl_seconds),
                demo_delay_seconds=settings.report_demo_delay_seconds,
            )

            yield

            if mongo_client is not None:
                mongo_client.close()
                logger.info("MongoDB client has been closed.")
        logger.info("Tortoise-ORM connections have been closed.")

    app = FastAPI(
        title="Sales and Traffic Stats API",
        description="Authenticated, cached statistics over sales and traffic reports.",
        version="0.1.0",
        exception_handlers=tortoise_exception_handlers(),
        lifespan=lifespan,
    )

    token_verifier = TokenVerifier(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        access_token_expire_minutes=settings.access_token_expire_minutes,
    )
    app.state.token_verifier = token_verifier

    # Last added runs first: authentication, then access control
    app.add_middleware(AccessControlMiddleware, public_paths=settings.public_paths)
    app.add_middleware(
        JwtAuthenticationMiddleware,
        token_verifier=token_verifier,
        user_lookup=auth_service.load_user_by_username,
    )

    app.include_router(auth_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")
    return app


app = create_app()
