# src/discovery/github/auth.py

from typing import Dict, Optional


class CredentialResolver:
    """
    Picks the bearer credential attached to outbound GitHub requests.

    Precedence: per-request user token > app fallback token > anonymous.
    """

    def __init__(
        self,
        app_token: Optional[str] = None,
        user_agent: str = "SourceSeekr-App",
        api_version: str = "2022-11-28",
    ):
        self._app_token = app_token or None
        self.user_agent = user_agent
        self.api_version = api_version

    def resolve_token(self, user_token: Optional[str] = None) -> Optional[str]:
        return user_token or self._app_token

    def has_token(self, user_token: Optional[str] = None) -> bool:
        return self.resolve_token(user_token) is not None

    def resolve_headers(self, user_token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.api_version,
            "User-Agent": self.user_agent,
        }

        token = self.resolve_token(user_token)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        return headers

    def __repr__(self) -> str:
        # 토큰 값은 절대 노출하지 않음
        return (
            f"CredentialResolver(app_token={'set' if self._app_token else 'unset'}, "
            f"user_agent={self.user_agent!r})"
        )
