from enum import Enum
from typing import Any

import requests

try:
    from backend.app.logging_config import get_logger
    from backend.app.services.locations import LocationEntry, resolve_location
    from backend.app.services.mock_videos import generate_mock_video, generate_mock_videos
except ModuleNotFoundError:
    from app.logging_config import get_logger
    from app.services.locations import LocationEntry, resolve_location
    from app.services.mock_videos import generate_mock_video, generate_mock_videos


log = get_logger(__name__)

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3"
PLACEHOLDER_API_KEYS = {
    "tu_api_key_de_youtube_aqui",
    "your_youtube_api_key_here",
    "changeme",
}
THUMBNAIL_PREFERENCE = ("maxres", "standard", "high", "medium", "default")


class FallbackPolicy(str, Enum):
    """What to hand back when real upstream data is unavailable."""

    NONE = "none"
    EMPTY = "empty"
    SYNTHETIC = "synthetic"

    @classmethod
    def parse(cls, value: str | None) -> "FallbackPolicy":
        raw = (value or "").strip().lower()
        if not raw:
            return cls.SYNTHETIC
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"FALLBACK_POLICY must be one of: {allowed}; got {value!r}")


class UpstreamError(Exception):
    pass


class UpstreamUnavailableError(UpstreamError):
    pass


class YouTubeQuotaExceededError(UpstreamError):
    pass


def best_thumbnail_url(thumbnails: dict) -> str | None:
    for key in THUMBNAIL_PREFERENCE:
        t = thumbnails.get(key)
        if t and "url" in t:
            return t["url"]
    return None


def build_search_params(
    location: LocationEntry,
    search_query: str,
    max_results: int,
    api_key: str | None,
    location_text: str | None = None,
) -> dict[str, Any]:
    """
    search.list parameters for one location.

    When the caller typed something we search only for that; the geo filter
    does the localizing. With no text we fall back to the entry's default
    term, or "vlog <place>".
    """
    q = (search_query or "").strip()
    if not q:
        q = location.default_query or f"vlog {(location_text or '').strip() or location.name}"

    params: dict[str, Any] = {
        "part": "snippet",
        "type": "video",
        "maxResults": max_results,
        "key": api_key,
        "q": q,
        "location": location.coordinates,
        "locationRadius": location.radius,
    }
    if location.language:
        params["relevanceLanguage"] = location.language
    if location.region_code:
        params["regionCode"] = location.region_code
    return params


def format_search_items(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    videos = []
    for item in items:
        video_id = (item.get("id") or {}).get("videoId")
        if not video_id:
            continue
        snippet = item.get("snippet") or {}
        videos.append(
            {
                "id": video_id,
                "title": snippet.get("title"),
                "description": snippet.get("description"),
                "channelTitle": snippet.get("channelTitle"),
                "channelId": snippet.get("channelId"),
                "publishedAt": snippet.get("publishedAt"),
                "thumbnail": best_thumbnail_url(snippet.get("thumbnails") or {}),
                "liveBroadcastContent": snippet.get("liveBroadcastContent"),
                # search.list carries no statistics
                "viewCount": None,
                "likeCount": None,
            }
        )
    return videos


def format_video_item(item: dict[str, Any]) -> dict[str, Any]:
    snippet = item.get("snippet") or {}
    statistics = item.get("statistics") or {}
    return {
        "id": item.get("id"),
        "title": snippet.get("title"),
        "description": snippet.get("description"),
        "channelTitle": snippet.get("channelTitle"),
        "channelId": snippet.get("channelId"),
        "publishedAt": snippet.get("publishedAt"),
        "thumbnail": best_thumbnail_url(snippet.get("thumbnails") or {}),
        "liveBroadcastContent": snippet.get("liveBroadcastContent"),
        "viewCount": statistics.get("viewCount"),
        "likeCount": statistics.get("likeCount"),
    }


class YouTubeClient:
    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        fallback_policy: FallbackPolicy = FallbackPolicy.SYNTHETIC,
        http: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.fallback_policy = fallback_policy
        self.http = http or requests.Session()

    @property
    def has_valid_api_key(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and key.lower() not in PLACEHOLDER_API_KEYS

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            response = self.http.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(f"YouTube request failed: {exc.__class__.__name__}") from exc

        if response.status_code == 200:
            try:
                payload = response.json()
            except ValueError as exc:
                raise UpstreamUnavailableError("YouTube returned a malformed body") from exc
            if not isinstance(payload, dict):
                raise UpstreamUnavailableError("YouTube returned a malformed body")
            return payload

        lowered = response.text.lower()
        if response.status_code in {403, 429} and (
            "quotaexceeded" in lowered or "quota exceeded" in lowered or "youtube.quota" in lowered
        ):
            raise YouTubeQuotaExceededError("YouTube API quota exceeded")

        raise UpstreamUnavailableError(f"YouTube responded with HTTP {response.status_code}")

    def search_videos(self, location: str, search_query: str = "", max_results: int = 10) -> list[dict[str, Any]]:
        if not self.has_valid_api_key:
            log.info("youtube.fallback", reason="missing_api_key", location=location, policy=self.fallback_policy.value)
            return self._search_fallback(location, search_query, max_results, "YouTube API key is not configured")

        entry = resolve_location(location)
        params = build_search_params(entry, search_query, max_results, self.api_key, location_text=location)
        try:
            payload = self._get("search", params)
        except UpstreamError as exc:
            log.warning("youtube.search_failed", error=str(exc), location=location, query=search_query)
            return self._search_fallback(location, search_query, max_results, str(exc), error=exc)

        videos = format_search_items(payload.get("items") or [])
        if not videos:
            log.info("youtube.fallback", reason="no_results", location=location, query=params["q"])
            return self._search_fallback(location, search_query, max_results, "YouTube returned no results")

        log.info("youtube.search_ok", location=location, query=params["q"], count=len(videos))
        return videos

    def get_video_details(self, video_id: str) -> dict[str, Any] | None:
        if not self.has_valid_api_key:
            log.info("youtube.fallback", reason="missing_api_key", video_id=video_id, policy=self.fallback_policy.value)
            return self._detail_fallback(video_id, "YouTube API key is not configured")

        try:
            payload = self._get(
                "videos",
                {"part": "snippet,statistics", "id": video_id, "key": self.api_key},
            )
        except UpstreamError as exc:
            log.warning("youtube.details_failed", error=str(exc), video_id=video_id)
            return self._detail_fallback(video_id, str(exc), error=exc)

        items = payload.get("items") or []
        if not items:
            log.info("youtube.fallback", reason="no_results", video_id=video_id)
            return self._detail_fallback(video_id, f"YouTube has no video {video_id}")
        return format_video_item(items[0])

    def _search_fallback(
        self,
        location: str,
        search_query: str,
        max_results: int,
        reason: str,
        error: UpstreamError | None = None,
    ) -> list[dict[str, Any]]:
        if self.fallback_policy is FallbackPolicy.SYNTHETIC:
            return generate_mock_videos(location, search_query, max_results)
        if self.fallback_policy is FallbackPolicy.EMPTY:
            return []
        raise error or UpstreamUnavailableError(reason)

    def _detail_fallback(self, video_id: str, reason: str, error: UpstreamError | None = None) -> dict[str, Any] | None:
        if self.fallback_policy is FallbackPolicy.SYNTHETIC:
            return generate_mock_video(video_id)
        if self.fallback_policy is FallbackPolicy.EMPTY:
            return None
        raise error or UpstreamUnavailableError(reason)
