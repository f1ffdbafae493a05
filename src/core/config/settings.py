from pydantic_settings import BaseSettings
from typing import Optional


class AppSettings(BaseSettings):
    APP_NAME: str = "SourceSeekr"
    DEBUG: bool = True

    HOST: str = "0.0.0.0"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # ===== GitHub =====
    # 로그인 사용자 토큰이 없을 때 사용하는 앱 토큰
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_API_VERSION: str = "2022-11-28"
    GITHUB_USER_AGENT: str = "SourceSeekr-App"

    # HTTP
    GITHUB_HTTP_TIMEOUT: float = 10.0
    GITHUB_HTTP_RETRIES: int = 2

    # Cache
    GITHUB_CACHE_TTL_SECONDS: int = 15 * 60
    GITHUB_CACHE_MAX_ENTRIES: int = 512

    # Rate limit
    GITHUB_RATE_LIMIT_REFRESH_SECONDS: int = 5 * 60
    GITHUB_RATE_LIMIT_LOW_WATER: int = 20
    GITHUB_RATE_LIMIT_FLOOR: int = 10

    # Listing
    GITHUB_REPOS_PER_PAGE: int = 10
    GITHUB_BATCH_MAX_COUNT: int = 5

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = AppSettings()
