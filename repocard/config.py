"""Environment-derived configuration and request policy."""

import os

GH_API = "https://api.github.com"
USER_AGENT = "GitHub-Repo-Image-Generator"

# Fixed repository reported by /api/stars
STAR_REPO = os.environ.get("STAR_REPO", "LucasCur/github-bio")
STAR_OWNER, _, STAR_NAME = STAR_REPO.partition("/")

STAR_CACHE_TTL = 2 * 60 * 60  # 2 hours
STAR_FETCH_TIMEOUT = 5
REPO_FETCH_TIMEOUT = 10
MAX_STAR_COUNT = 1_000_000

RATE_LIMIT_WINDOW = 60
RATE_LIMIT_MAX_REQUESTS = 10

# Shared-cache lifetimes advertised on /api/stars
FRESH_MAX_AGE = 3600
STALE_MAX_AGE = 300

ENV = os.environ.get("ENV", "")


def allowed_origins() -> list[str]:
    """Origins the preview page is served from. Advisory only."""
    origins = []
    deployment = os.environ.get("VERCEL_URL") or os.environ.get("DEPLOYMENT_URL")
    if deployment:
        origins.append(f"https://{deployment}")
    site = os.environ.get("NEXT_PUBLIC_SITE_URL") or os.environ.get("SITE_URL")
    if site:
        origins.append(site)
    origins.append("https://githubbio.vercel.app")
    origins.append("http://localhost:3000")
    return origins
