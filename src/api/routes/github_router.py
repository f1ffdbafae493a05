# src/api/routes/github_router.py

from datetime import datetime, timezone
from typing import List, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from api.dependencies import get_user_token
from core.containers.app_containers import AppContainer
from discovery.github.service import GitHubRepositoryService
from discovery.models import UserPreferences

router = APIRouter(prefix="/api/github", tags=["GitHub"])


@router.get("/repos")
@inject
async def get_repos(
    repo_type: str = Query("repository", alias="type"),
    owner: Optional[str] = None,
    name: Optional[str] = None,
    q: Optional[str] = None,
    query: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    language: Optional[str] = None,
    skill_level: Optional[str] = None,
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    query = query or q

    if repo_type == "repository" and owner and name:
        repo = await service.fetch_repository_by_full_name(owner, name, user_token)
        return {"success": True, "repository": repo, "data": repo}

    if (repo_type == "search" or q) and query:
        preferences = UserPreferences(
            preferred_languages=[language] if language else [],
            skill_level=skill_level,
        )
        repos = await service.search_repositories(query, page, limit, preferences, user_token)
        return {
            "success": True,
            "repositories": repos,
            "data": repos,
            "total_count": len(repos),
        }

    if repo_type == "trending":
        repos = await service.fetch_trending_repos(page, user_token)
        return {"success": True, "repositories": repos, "data": repos}

    if repo_type == "popular":
        repos = await service.fetch_quality_repos(page, user_token=user_token)
        return {"success": True, "repositories": repos, "data": repos}

    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request parameters"},
    )


@router.get("/rate-limit")
@inject
async def get_rate_limit(
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    has_quota = await service.check_quota(user_token)
    return {
        "success": True,
        "hasQuota": has_quota,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/contributors")
@inject
async def get_contributors(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    if not owner or not repo:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Owner and repo parameters are required"},
        )

    contributors = await service.fetch_contributors(owner, repo, limit, user_token)
    return {"success": True, "contributors": contributors, "data": contributors}


@router.get("/issues")
@inject
async def get_issues(
    owner: str,
    repo: str,
    limit: int = Query(5, ge=1, le=30),
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    issues = await service.fetch_repo_issues(owner, repo, limit, user_token)
    return {"success": True, "issues": issues, "data": issues}


@router.get("/similar")
@inject
async def get_similar(
    owner: str,
    name: str,
    language: Optional[str] = None,
    topics: List[str] = Query(default=[]),
    limit: int = Query(3, ge=1, le=20),
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    repos = await service.fetch_similar_repositories(language, topics, f"{owner}/{name}", limit, user_token)
    return {"success": True, "repositories": repos, "data": repos}


@router.get("/explore")
@inject
async def get_explore(
    page: int = Query(1, ge=1),
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    result = await service.get_explore_page_repositories(page, user_token)
    return {"success": True, "data": result}


@router.get("/validate-token")
@inject
async def validate_token(
    user_token: Optional[str] = Depends(get_user_token),
    service: GitHubRepositoryService = Depends(Provide[AppContainer.repository_service]),
):
    validation = await service.verify_token(user_token)
    return {"success": validation.valid, "data": validation}
