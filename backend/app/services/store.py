import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Protocol


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...

    def update(self, key: str, fn: Callable[[Any], Any]) -> Any: ...


class InMemoryStore:
    """
    Process-local store. Values are copied in and out so callers never share
    mutable state with the store; nothing survives a restart.
    """

    def __init__(self):
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return [key for key in self._data if key.startswith(prefix)]

    def update(self, key: str, fn: Callable[[Any], Any]) -> Any:
        """Read-modify-write under the lock; fn gets a copy (None when absent) and returns the new value."""
        with self._lock:
            current = copy.deepcopy(self._data.get(key))
            value = fn(current)
            self._data[key] = copy.deepcopy(value)
            return copy.deepcopy(value)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


DEFAULT_SESSION_ID = "default"


class SessionStore:
    def __init__(
        self,
        store: KeyValueStore,
        default_region: str = "oaxaca",
        search_limit: int = 10,
        watch_limit: int = 20,
    ):
        self.store = store
        self.default_region = default_region
        self.search_limit = search_limit
        self.watch_limit = watch_limit

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}"

    @staticmethod
    def normalize_id(session_id: str | None) -> str:
        return (session_id or "").strip() or DEFAULT_SESSION_ID

    def _new_session(self) -> dict[str, Any]:
        return {
            "currentRegion": self.default_region,
            "searchHistory": [],
            "watchHistory": [],
        }

    def _update(self, session_id: str | None, fn: Callable[[dict[str, Any]], dict[str, Any]]) -> dict[str, Any]:
        def apply(session):
            return fn(session if session is not None else self._new_session())

        return self.store.update(self._key(self.normalize_id(session_id)), apply)

    def get(self, session_id: str | None) -> dict[str, Any] | None:
        return self.store.get(self._key(self.normalize_id(session_id)))

    def get_or_create(self, session_id: str | None) -> dict[str, Any]:
        return self._update(session_id, lambda session: session)

    def set_region(self, session_id: str | None, region: str) -> dict[str, Any]:
        def apply(session):
            if region:
                session["currentRegion"] = region
            return session

        return self._update(session_id, apply)

    def record_search(self, session_id: str | None, query: str, location: str) -> dict[str, Any]:
        entry = {"query": query, "location": location, "timestamp": utc_now_iso()}

        def apply(session):
            session["searchHistory"] = [entry, *session["searchHistory"]][: self.search_limit]
            return session

        return self._update(session_id, apply)

    def record_watch(self, session_id: str | None, video: dict[str, Any]) -> dict[str, Any]:
        entry = {
            "id": video.get("id"),
            "title": video.get("title"),
            "channel": video.get("channelTitle"),
            "watchedAt": utc_now_iso(),
            "thumbnail": video.get("thumbnail") or "",
        }

        def apply(session):
            session["watchHistory"] = [entry, *session["watchHistory"]][: self.watch_limit]
            return session

        return self._update(session_id, apply)

    def history(self, session_id: str | None) -> dict[str, list[dict[str, Any]]]:
        session = self.get_or_create(session_id)
        return {
            "searches": session.get("searchHistory") or [],
            "videos": session.get("watchHistory") or [],
        }


class CommentBoard:
    KEY = "comments"

    def __init__(self, store: KeyValueStore):
        self.store = store

    def entries(self) -> list[dict[str, Any]]:
        return self.store.get(self.KEY) or []

    def add(self, name: str | None, comment: str | None) -> dict[str, Any]:
        name = (name or "").strip()
        comment = (comment or "").strip()
        if not name or not comment:
            raise ValueError("name and comment are required")

        entry = {
            "id": uuid.uuid4().hex[:12],
            "name": name,
            "comment": comment,
            "timestamp": utc_now_iso(),
            "likes": 0,
        }
        self.store.update(self.KEY, lambda comments: [entry, *(comments or [])])
        return entry
