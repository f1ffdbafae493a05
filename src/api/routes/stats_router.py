# src/api/routes/stats_router.py

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from core.containers.app_containers import AppContainer
from discovery.github.service import GitHubRepositoryService

router = APIRouter(prefix="/api/github-stats", tags=["GitHub"])


@router.get("")
@inject
async def get_stats(
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    return service.get_usage_stats()


@router.post("")
@inject
async def reset_stats(
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    return service.reset_usage_stats()
