import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from . import config
from .cache import StarCache
from .card import compose, rank_languages, render_png
from .connectors import GitHubClient
from .exceptions import DataValidationFailure, UpstreamUnavailable
from .models import StarsResponse
from .rate_limit import RateLimiter

logger = logging.getLogger("repocard")
logger.setLevel(logging.INFO)

_FRESH_HEADERS = {
    "Cache-Control": f"public, s-maxage={config.FRESH_MAX_AGE}",
    "CDN-Cache-Control": f"public, s-maxage={config.FRESH_MAX_AGE}",
}
_STALE_HEADERS = {"Cache-Control": f"public, s-maxage={config.STALE_MAX_AGE}"}


def client_key(request: Request) -> str:
    """Rate-limit bucket for a request: forwarded IP, else the literal "unknown"."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or request.headers.get("x-real-ip") or "unknown"


def check_origin(request: Request):
    """Warn about requests from outside the allow-list. Never blocks."""
    if config.ENV != "production":
        return
    origin = request.headers.get("origin")
    referer = request.headers.get("referer")
    if not (origin and referer):
        return
    allowed = config.allowed_origins()
    if not any(origin.startswith(a) for a in allowed):
        logger.warning("stars request from unlisted origin=%s", origin)


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status)


def create_app(github_client=None, star_cache: StarCache | None = None,
               rate_limiter: RateLimiter | None = None) -> FastAPI:
    """Build the API with its shared services.

    Services default to the production configuration; tests pass fakes.
    """
    if github_client is None:
        github_client = GitHubClient()
    if star_cache is None:
        star_cache = StarCache(github_client, config.STAR_OWNER, config.STAR_NAME)
    if rate_limiter is None:
        rate_limiter = RateLimiter(
            max_requests=config.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=config.RATE_LIMIT_WINDOW,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Attach to uvicorn's handler (available now that uvicorn is running)
        uvicorn_logger = logging.getLogger("uvicorn")
        for h in uvicorn_logger.handlers:
            if h not in logger.handlers:
                logger.addHandler(h)
        logger.info("repocard rate limit: %d req/%ds per client, star cache ttl=%ds for %s/%s",
                    rate_limiter.max_requests, rate_limiter.window,
                    star_cache.ttl, star_cache.owner, star_cache.repo)
        yield

    # Disable docs in production
    docs_url = "/docs" if config.ENV == "dev" else None
    redoc_url = "/redoc" if config.ENV == "dev" else None

    app = FastAPI(
        title="repocard", version="0.1.0",
        docs_url=docs_url, redoc_url=redoc_url, lifespan=lifespan,
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # -----------------------------------------------------------------------
    # Preview image
    # -----------------------------------------------------------------------

    @app.get("/api/repo")
    async def repo_card(username: str = Query(default=""), repo: str = Query(default="")):
        # Whitespace-only values count as missing
        username, repo = username.strip(), repo.strip()
        if not username or not repo:
            return PlainTextResponse("Missing username or repo parameter", status_code=400)

        metadata = await github_client.fetch_repository(username, repo)
        if metadata is None:
            return PlainTextResponse("Repository not found or rate limit exceeded", status_code=404)

        languages = await github_client.fetch_languages(username, repo)
        top_languages = rank_languages(languages, metadata.language)

        try:
            image = await asyncio.to_thread(compose, metadata, top_languages)
            body = await asyncio.to_thread(render_png, image)
        except Exception as e:
            logger.exception("repo COMPOSE_ERROR repo=%s/%s", username, repo)
            return PlainTextResponse(f"Failed to generate the image: {e}", status_code=500)

        return Response(content=body, media_type="image/png")

    # -----------------------------------------------------------------------
    # Star counter
    # -----------------------------------------------------------------------

    @app.get("/api/stars")
    async def stars(request: Request):
        key = client_key(request)
        if rate_limiter.is_rate_limited(key):
            logger.warning("stars RATE_LIMITED client=%s", key)
            return _error(429, "Rate limit exceeded. Please try again later.")

        check_origin(request)

        try:
            lookup = await star_cache.get_stars()
        except UpstreamUnavailable:
            return _error(503, "Failed to fetch star count")
        except DataValidationFailure:
            return _error(500, "Invalid data received")
        except Exception:
            logger.exception("stars INTERNAL_ERROR client=%s", key)
            return _error(500, "Internal server error")

        if lookup.stale:
            body = StarsResponse(stars=lookup.count, cached=True,
                                 error="Failed to fetch fresh data, using cached")
            headers = _STALE_HEADERS
        elif lookup.fresh:
            body = StarsResponse(stars=lookup.count, cached=True, cacheAge=lookup.age_seconds)
            headers = _FRESH_HEADERS
        else:
            body = StarsResponse(stars=lookup.count, cached=False,
                                 timestamp=int(lookup.captured_at * 1000))
            headers = _FRESH_HEADERS

        return JSONResponse(body.model_dump(exclude_none=True), headers=headers)

    @app.api_route("/api/stars", methods=["POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"])
    async def stars_method_not_allowed():
        return _error(405, "Method not allowed")

    return app


app = create_app()
