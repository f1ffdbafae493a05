# src/api/main.py

from fastapi import FastAPI
from contextlib import asynccontextmanager

from core.config.settings import settings
from core.containers.app_containers import AppContainer
from core.logging.logger import get_logger
from api.errors import register_error_handlers
from api.routes.github_router import router as github_router
from api.routes.health_router import router as health_router
from api.routes.stats_router import router as stats_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AppContainer = app.container

    logger.info(
        "GitHub client ready "
        f"(app token {'configured' if settings.GITHUB_TOKEN else 'not configured'})"
    )

    yield

    await container.github_client().aclose()
    logger.info("GitHub client closed")


def create_app() -> FastAPI:
    container = AppContainer()
    container.wire(modules=[
        "api.routes.github_router",
        "api.routes.stats_router",
        "api.routes.health_router",
    ])
    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan
    )

    app.container = container

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(github_router)
    app.include_router(stats_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
