# src/api/routes/health_router.py
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from core.containers.app_containers import AppContainer

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/")
@inject
async def health_check(client=Depends(Provide[AppContainer.github_client])):
    # 외부 호출 없이 로컬 추정치만 보고
    state = client.guard.state

    return {
        "status": "ok",
        "github": {
            "token": "configured" if client.credentials.has_token() else "anonymous",
            "quota_estimate": state.remaining,
            "quota_checked": state.checked_at is not None,
            "api_calls": client.stats.get_stats(),
        },
    }
