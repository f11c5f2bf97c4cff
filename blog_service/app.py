import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blog_service.config import Settings
from blog_service.db_context import DatabaseManager
from blog_service.db_setup import create_pool, create_schema
from blog_service.errors import BlogError
from blog_service.post_repository import PostRepository
from blog_service.rpc import router
from blog_service.service import PostService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)


def _error(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": {"code": code, "message": message}}
    )


def create_app(
    settings: Settings | None = None, service: PostService | None = None
) -> FastAPI:
    """Build the application.

    The pool named ``settings.db_pool_name`` is opened (and the schema
    created) in the lifespan. When the app runs without a lifespan, as in
    tests, a pool with that name must already be registered.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pool = await create_pool(
            settings.database_url,
            settings.db_pool_name,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        await create_schema(pool)
        try:
            yield
        finally:
            await DatabaseManager.close_pool(settings.db_pool_name)

    app = FastAPI(title="Blog Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.post_service = service or PostService(
        PostRepository(),
        slug_policy=settings.slug_policy,
        db_name=settings.db_pool_name,
        slug_conflict_retries=settings.slug_conflict_retries,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.exception_handler(BlogError)
    async def blog_error_handler(request: Request, exc: BlogError):
        return _error(exc.code, exc.message, exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error in %s", request.url.path)
        return _error("INTERNAL_SERVER_ERROR", "Internal server error", 500)

    return app


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(
        "Blog RPC server listening on %s:%d", settings.server_host, settings.server_port
    )
    uvicorn.run(
        create_app(settings),
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )
