import hashlib
import random
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import quote

PLACEHOLDER_COLORS = ["ff6b6b", "4ecdc4", "45b7d1", "f7b731", "5f27cd", "10ac84"]
PLACEHOLDER_URL = "https://via.placeholder.com/320x180/{color}/white?text={text}"


def _seed_for(*parts: Any) -> int:
    digest = hashlib.sha1("|".join(str(p) for p in parts).encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def _iso_z(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _mock_record(video_id: str, title: str, location: str, search_query: str, rng: random.Random) -> dict[str, Any]:
    published = datetime.now(timezone.utc) - timedelta(days=rng.randint(0, 365), minutes=rng.randint(0, 1439))
    return {
        "id": video_id,
        "title": title,
        "description": f"Demo video for {location}" + (f" about {search_query}" if search_query else ""),
        "channelTitle": f"{location} channel",
        "channelId": None,
        "publishedAt": _iso_z(published),
        "thumbnail": PLACEHOLDER_URL.format(color=rng.choice(PLACEHOLDER_COLORS), text=quote(location)),
        "liveBroadcastContent": "none",
        "viewCount": str(rng.randint(1_000, 1_000_000)),
        "likeCount": str(rng.randint(10, 50_000)),
        "isMock": True,
    }


def generate_mock_videos(location: str, search_query: str = "", max_results: int = 10) -> list[dict[str, Any]]:
    """
    Placeholder results for when real data is unavailable.

    Always returns exactly ``max_results`` records (none for n <= 0). Ids are
    unique within a call and the output is stable for the same arguments,
    apart from publish dates which are relative to now.
    """
    location = (location or "").strip() or "global"
    search_query = (search_query or "").strip()
    rng = random.Random(_seed_for(location.lower(), search_query.lower(), max_results))

    videos = []
    for index in range(max(0, max_results)):
        token = hashlib.sha1(f"{location}|{search_query}|{index}".encode("utf-8")).hexdigest()[:8]
        if index == 0:
            title = f"Demo video in {location}: {search_query or 'General'}"
        else:
            title = f"Demo video #{index + 1}"
        videos.append(_mock_record(f"demo_{index}_{token}", title, location, search_query, rng))
    return videos


def generate_mock_video(video_id: str, location: str = "global", search_query: str = "") -> dict[str, Any]:
    rng = random.Random(_seed_for("detail", video_id))
    return _mock_record(video_id, f"Demo video {video_id}", location, search_query, rng)
