import threading

import pytest

from backend.app.services.store import CommentBoard, InMemoryStore, SessionStore


def test_in_memory_store_copies_values():
    store = InMemoryStore()
    value = {"items": [1]}
    store.set("k", value)
    value["items"].append(2)
    assert store.get("k") == {"items": [1]}

    fetched = store.get("k")
    fetched["items"].append(3)
    assert store.get("k") == {"items": [1]}

    assert store.get("missing", "fallback") == "fallback"
    store.delete("k")
    assert store.keys() == []


def test_session_created_lazily_with_default_region():
    sessions = SessionStore(InMemoryStore(), default_region="oaxaca")
    assert sessions.get("s1") is None
    session = sessions.get_or_create("s1")
    assert session == {"currentRegion": "oaxaca", "searchHistory": [], "watchHistory": []}
    assert sessions.get("s1") == session


def test_blank_session_id_maps_to_default():
    store = InMemoryStore()
    sessions = SessionStore(store)
    sessions.set_region(None, "china")
    assert sessions.get_or_create("  ")["currentRegion"] == "china"
    assert store.keys("session:") == ["session:default"]


def test_search_history_is_capped_most_recent_first():
    sessions = SessionStore(InMemoryStore(), search_limit=3)
    for i in range(7):
        sessions.record_search("s1", f"query {i}", "oaxaca")

    searches = sessions.history("s1")["searches"]
    assert len(searches) == 3
    assert [s["query"] for s in searches] == ["query 6", "query 5", "query 4"]


def test_watch_history_is_capped_most_recent_first():
    sessions = SessionStore(InMemoryStore(), watch_limit=2)
    for i in range(4):
        sessions.record_watch("s1", {"id": f"v{i}", "title": f"T{i}", "channelTitle": "C"})

    videos = sessions.history("s1")["videos"]
    assert [v["id"] for v in videos] == ["v3", "v2"]
    assert videos[0]["channel"] == "C"
    assert videos[0]["thumbnail"] == ""


def test_sessions_are_isolated():
    sessions = SessionStore(InMemoryStore())
    sessions.record_search("a", "x", "oaxaca")
    assert sessions.history("b") == {"searches": [], "videos": []}


def test_comment_board_newest_first():
    board = CommentBoard(InMemoryStore())
    first = board.add("Ana", "Hola")
    second = board.add(" Luis ", " Great site ")

    assert second["name"] == "Luis"
    assert second["comment"] == "Great site"
    assert second["likes"] == 0
    assert [c["id"] for c in board.entries()] == [second["id"], first["id"]]


@pytest.mark.parametrize("name, comment", [("", "text"), ("Ana", ""), ("  ", "text"), (None, None)])
def test_comment_board_rejects_blank_fields(name, comment):
    board = CommentBoard(InMemoryStore())
    with pytest.raises(ValueError):
        board.add(name, comment)
    assert board.entries() == []


def test_update_applies_under_the_lock():
    store = InMemoryStore()
    assert store.update("n", lambda value: (value or 0) + 1) == 1
    assert store.update("n", lambda value: value + 1) == 2
    assert store.get("n") == 2


def test_concurrent_comments_are_not_lost():
    board = CommentBoard(InMemoryStore())
    for i in range(200):
        board.add("seed", f"comment {i}")

    def post_many(worker):
        for i in range(20):
            board.add(f"user {worker}", f"hello {i}")

    threads = [threading.Thread(target=post_many, args=(n,)) for n in range(32)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    entries = board.entries()
    assert len(entries) == 200 + 32 * 20
    assert len({entry["id"] for entry in entries}) == len(entries)


def test_concurrent_searches_are_not_lost():
    sessions = SessionStore(InMemoryStore(), search_limit=50)

    def search_many(worker):
        for i in range(10):
            sessions.record_search("shared", f"w{worker} q{i}", "oaxaca")

    threads = [threading.Thread(target=search_many, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(sessions.history("shared")["searches"]) == 40
