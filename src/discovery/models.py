# src/discovery/models.py

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Contributor(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    avatar_url: str = ""
    contributions: int = 0


class IssueSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    number: int
    html_url: str


class ProcessedRepository(BaseModel):
    """
    Display-ready repository record.

    Built once per aggregation and never mutated afterwards, so a cache hit
    hands out the same value until it expires.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    full_name: str
    description: Optional[str] = None

    # "1.2k" 형태의 표시용 값
    stars: str
    forks: str
    pull_requests: str = "0"
    issues_count: str = "0"
    issues: Tuple[IssueSummary, ...] = ()

    language: Optional[str] = None
    owner: str
    owner_avatar: str = ""
    contributors: Tuple[Contributor, ...] = ()
    topics: Tuple[str, ...] = ()
    homepage: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    license: Optional[str] = None
    size: int = 0
    readme: str = ""
    default_branch: str = "main"


class UserPreferences(BaseModel):
    preferred_languages: List[str] = Field(default_factory=list)
    skill_level: Optional[str] = None


class TokenValidation(BaseModel):
    valid: bool
    user: Optional[str] = None
    scopes: List[str] = Field(default_factory=list)
    error: Optional[str] = None
