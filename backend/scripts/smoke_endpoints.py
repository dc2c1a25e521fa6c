from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

from fastapi import HTTPException

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import backend.main as main_module
from backend.app.config import Settings
from backend.app.services.store import InMemoryStore
from backend.app.services.youtube_client import YouTubeClient


def make_services(api_key: str | None = None) -> main_module.AppServices:
    youtube = YouTubeClient(api_key=api_key)
    return main_module.build_services(Settings(youtube_api_key=api_key), store=InMemoryStore(), youtube=youtube)


def assert_true(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def test_liveness() -> None:
    payload = main_module.api_test(services=make_services())
    assert_true(bool(payload.get("message")), "/api/test should return a message")


def test_videos_offline() -> None:
    services = make_services()
    with patch.object(services.youtube.http, "get", side_effect=AssertionError("network used")):
        payload = main_module.list_videos(
            location="Japón", search="ramen", max_results=5, session_id="smoke", services=services
        )
    assert_true(payload["count"] == 5, "/api/videos should fill maxResults with placeholders")
    assert_true(payload["currentRegion"] == "Japón", "/api/videos should move the session region")


def test_history_and_region() -> None:
    services = make_services()
    for location in main_module.locations()["locations"][:3]:
        main_module.list_videos(location=location, search=f"in {location}", max_results=1, session_id="smoke", services=services)
    history = main_module.history(session_id="smoke", services=services)
    region = main_module.current_region(session_id="smoke", services=services)
    assert_true(len(history["searches"]) == 3, "/api/history should list every search")
    assert_true(history["searches"][0]["location"] == region["region"], "latest search should match region")


def test_video_info_validation() -> None:
    services = make_services()
    try:
        main_module.video_info(v=None, session_id="smoke", services=services)
    except HTTPException as exc:
        assert_true(exc.status_code == 400, "/api/video-info without v should be a 400")
    else:
        raise AssertionError("/api/video-info without v should fail")


def test_comments() -> None:
    services = make_services()
    main_module.create_comment(main_module.CommentRequest(name="smoke", comment="hello"), services=services)
    try:
        main_module.create_comment(main_module.CommentRequest(name="", comment="hello"), services=services)
    except HTTPException:
        pass
    comments = main_module.list_comments(services=services)["comments"]
    assert_true(len(comments) == 1, "blank comments must not be stored")


def run() -> int:
    checks = [
        ("liveness", test_liveness),
        ("videos offline fallback", test_videos_offline),
        ("history + current region", test_history_and_region),
        ("video-info validation", test_video_info_validation),
        ("comments", test_comments),
    ]
    failures = []

    for check_name, check_fn in checks:
        try:
            check_fn()
            print(f"[PASS] {check_name}")
        except Exception as exc:  # pragma: no cover - smoke script output path
            failures.append((check_name, str(exc)))
            print(f"[FAIL] {check_name}: {exc}")

    if failures:
        print(f"\nSmoke checks failed: {len(failures)}")
        for check_name, message in failures:
            print(f"- {check_name}: {message}")
        return 1

    print("\nAll smoke checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
