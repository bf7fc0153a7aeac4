"""Pydantic models for GitHub data and API responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RepositoryMetadata(BaseModel):
    """Repository fields the preview card needs, parsed from GET /repos/{owner}/{repo}."""
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    description: str | None = None
    language: str | None = None
    stars: int = Field(..., ge=0)
    forks: int = Field(..., ge=0)
    open_issues: int = Field(..., ge=0)
    created_at: datetime
    updated_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, data: dict) -> "RepositoryMetadata":
        return cls(
            owner=data["owner"]["login"],
            name=data["name"],
            description=data.get("description") or None,
            language=data.get("language") or None,
            stars=data["stargazers_count"],
            forks=data["forks_count"],
            open_issues=data["open_issues_count"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )


class StarLookup(BaseModel):
    """Result of a star cache read.

    ``fresh`` is True when the value came straight from an unexpired cache
    entry, ``stale`` when a refresh failed and an older entry was served.
    """
    count: int
    fresh: bool
    stale: bool = False
    age_seconds: int = 0
    captured_at: float


class StarsResponse(BaseModel):
    stars: int
    cached: bool
    cacheAge: int | None = None
    timestamp: int | None = None
    error: str | None = None
