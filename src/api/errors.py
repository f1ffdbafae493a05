# src/api/errors.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.logging.logger import get_logger
from discovery.github.errors import (
    GitHubApiError,
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)

logger = get_logger(__name__)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def rate_limit_handler(request: Request, exc: GitHubRateLimitError):
    logger.warning(f"{request.url.path}: {exc.message}")
    response = _failure(429, exc.message)
    if exc.reset_at:
        response.headers["X-RateLimit-Reset"] = str(int(exc.reset_at.timestamp()))
    return response


async def auth_handler(request: Request, exc: GitHubAuthError):
    logger.warning(f"{request.url.path}: {exc.message}")
    return _failure(401, exc.message)


async def not_found_handler(request: Request, exc: GitHubNotFoundError):
    return _failure(404, "Repository not found.")


async def api_error_handler(request: Request, exc: GitHubApiError):
    logger.error(f"{request.url.path}: GitHub API error ({exc.status}): {exc.message}")
    return _failure(502, exc.message)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.url.path}: unexpected error: {exc}", exc_info=exc)
    return _failure(500, "Internal server error")


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(GitHubRateLimitError, rate_limit_handler)
    app.add_exception_handler(GitHubAuthError, auth_handler)
    app.add_exception_handler(GitHubNotFoundError, not_found_handler)
    app.add_exception_handler(GitHubApiError, api_error_handler)
    app.add_exception_handler(GitHubError, unexpected_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
