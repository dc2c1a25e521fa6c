from dataclasses import dataclass

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

try:
    from backend.app.config import Settings
    from backend.app.logging_config import get_logger, setup_logging
    from backend.app.services.locations import known_locations
    from backend.app.services.store import (
        CommentBoard,
        InMemoryStore,
        KeyValueStore,
        SessionStore,
        utc_now_iso,
    )
    from backend.app.services.youtube_client import (
        UpstreamUnavailableError,
        YouTubeClient,
        YouTubeQuotaExceededError,
    )
except ModuleNotFoundError:
    from app.config import Settings
    from app.logging_config import get_logger, setup_logging
    from app.services.locations import known_locations
    from app.services.store import CommentBoard, InMemoryStore, KeyValueStore, SessionStore, utc_now_iso
    from app.services.youtube_client import UpstreamUnavailableError, YouTubeClient, YouTubeQuotaExceededError


log = get_logger(__name__)

MAX_RESULTS_LIMIT = 50
DEFAULT_MAX_RESULTS = 10


# ---------------------------
# Models
# ---------------------------

class CommentRequest(BaseModel):
    name: str | None = None
    comment: str | None = None


@dataclass
class AppServices:
    settings: Settings
    youtube: YouTubeClient
    sessions: SessionStore
    comments: CommentBoard


def build_services(
    settings: Settings,
    store: KeyValueStore | None = None,
    youtube: YouTubeClient | None = None,
) -> AppServices:
    store = store if store is not None else InMemoryStore()
    if youtube is None:
        youtube = YouTubeClient(
            api_key=settings.youtube_api_key,
            base_url=settings.youtube_base_url,
            timeout=settings.youtube_timeout,
            fallback_policy=settings.fallback_policy,
        )
    return AppServices(
        settings=settings,
        youtube=youtube,
        sessions=SessionStore(
            store,
            default_region=settings.default_region,
            search_limit=settings.search_history_limit,
            watch_limit=settings.watch_history_limit,
        ),
        comments=CommentBoard(store),
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def parse_max_results(raw: str | int | None) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        value = DEFAULT_MAX_RESULTS
    return max(1, min(value, MAX_RESULTS_LIMIT))


# ---------------------------
# Routes
# ---------------------------

router = APIRouter(prefix="/api")


@router.get("/test")
def api_test(services: AppServices = Depends(get_services)):
    return {
        "message": "VideITO API is up",
        "timestamp": utc_now_iso(),
        "version": services.settings.version,
    }


@router.get("/videos")
def list_videos(
    location: str | None = None,
    search: str = "",
    max_results: str | None = Query(None, alias="maxResults"),
    session_id: str | None = Query(None, alias="sessionId"),
    services: AppServices = Depends(get_services),
):
    """
    Location-scoped search. The session remembers the last location asked
    for, so later calls without ?location= stay in the same place.
    """
    session = services.sessions.get_or_create(session_id)
    location = (location or "").strip() or session["currentRegion"]
    search = (search or "").strip()
    max_results = parse_max_results(max_results)

    session = services.sessions.set_region(session_id, location)
    log.info("api.videos", location=location, search=search, region=session["currentRegion"])

    videos = services.youtube.search_videos(location, search, max_results)
    if search:
        services.sessions.record_search(session_id, search, location)

    return {
        "success": True,
        "currentRegion": session["currentRegion"],
        "searchQuery": search,
        "videos": videos,
        "count": len(videos),
    }


@router.get("/video-info")
def video_info(
    v: str | None = None,
    session_id: str | None = Query(None, alias="sessionId"),
    services: AppServices = Depends(get_services),
):
    video_id = (v or "").strip()
    if not video_id:
        raise HTTPException(status_code=400, detail="v (video id) is required")

    details = services.youtube.get_video_details(video_id) or {}
    video = {
        "id": video_id,
        "title": details.get("title") or "YouTube video",
        "description": details.get("description") or "Description not available",
        "channelTitle": details.get("channelTitle") or "YouTube channel",
        "channelId": details.get("channelId"),
        "publishedAt": details.get("publishedAt") or utc_now_iso(),
        "viewCount": details.get("viewCount") or "0",
        "likeCount": details.get("likeCount") or "0",
        "thumbnail": details.get("thumbnail") or "",
    }

    if session_id:
        services.sessions.record_watch(session_id, video)

    return {"success": True, "video": video}


@router.get("/history")
def history(
    session_id: str | None = Query(None, alias="sessionId"),
    services: AppServices = Depends(get_services),
):
    return services.sessions.history(session_id)


@router.get("/comments")
def list_comments(services: AppServices = Depends(get_services)):
    return {"success": True, "comments": services.comments.entries()}


@router.post("/comments")
def create_comment(payload: CommentRequest, services: AppServices = Depends(get_services)):
    try:
        entry = services.comments.add(payload.name, payload.comment)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    log.info("api.comment_added", comment_id=entry["id"])
    return {"success": True, "comment": entry}


@router.get("/current-region")
def current_region(
    session_id: str | None = Query(None, alias="sessionId"),
    services: AppServices = Depends(get_services),
):
    session = services.sessions.get_or_create(session_id)
    return {"success": True, "region": session["currentRegion"]}


@router.get("/locations")
def locations():
    return {"success": True, "locations": known_locations()}


# ---------------------------
# App setup
# ---------------------------

async def http_exception_handler(_request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(part) for part in error.get("loc", ())[1:]) or "body" for error in exc.errors()})
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"Invalid request: {', '.join(fields)}"},
    )


async def upstream_unavailable_handler(_request: Request, exc: UpstreamUnavailableError):
    return JSONResponse(
        status_code=502,
        content={"success": False, "error": "YouTube is temporarily unavailable. Please try again.", "reason": str(exc)},
    )


async def youtube_quota_exceeded_handler(_request: Request, _exc: YouTubeQuotaExceededError):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "YouTube API quota is currently exhausted.",
            "error_code": "youtube_quota_exhausted",
        },
    )


def create_app(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    youtube: YouTubeClient | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.environment)

    app = FastAPI(title="VideITO API", version=settings.version)
    app.state.services = build_services(settings, store=store, youtube=youtube)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UpstreamUnavailableError, upstream_unavailable_handler)
    app.add_exception_handler(YouTubeQuotaExceededError, youtube_quota_exceeded_handler)
    app.include_router(router)

    services = app.state.services
    log.info(
        "app.configured",
        real_api=services.youtube.has_valid_api_key,
        fallback_policy=settings.fallback_policy.value,
        default_region=settings.default_region,
    )
    return app


app = create_app()
