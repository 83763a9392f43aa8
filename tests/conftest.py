"""Pytest configuration and fixtures."""

import asyncio
import copy
import os
import uuid
from datetime import UTC, datetime
from typing import Any
from urllib.parse import parse_qsl

# Set test environment variables BEFORE importing anything that loads settings
os.environ["LASTFM_API_KEY"] = "test-api-key"
os.environ["LASTFM_API_SECRET"] = "test-secret"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["TELEMETRY_APP_INSIGHTS_CONNECTION_STRING"] = ""

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Force reload of settings with test environment
import moodtrack_api.config as config_module

config_module.settings = config_module.Settings()

assert config_module.settings.lastfm_api_key == "test-api-key", (
    "Test setup failed: Last.fm API key should come from the test environment"
)

from moodtrack_api.core import LastFMClient  # noqa: E402
from moodtrack_api.core.signer import sign_request  # noqa: E402
from moodtrack_api.errors import StoreError  # noqa: E402

TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "test-secret"
TEST_API_URL = "https://lastfm.test/2.0/"


class FakeDatabase:
    """In-memory stand-in for ``moodtrack_api.storage.Database``.

    Mirrors the public methods and return shapes. Operation names added to
    ``fail_on`` raise ``StoreError`` the way the real store does.
    """

    def __init__(self):
        self.users: dict[str, dict[str, Any]] = {}
        self.emotions: dict[str, dict[str, Any]] = {}
        self.playlists: dict[str, dict[str, Any]] = {}
        self.fail_on: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(f"Database operation '{operation}' failed")

    @staticmethod
    def _public(row: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in row.items() if k != "user_key"}

    def _new_user(self, user_key: str) -> dict[str, Any]:
        now = datetime.now(UTC)
        return {"user_key": user_key, "data": {}, "created_at": now, "last_login": now}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def get_user(self, user_key: str) -> dict[str, Any] | None:
        self._check("get_user")
        return copy.deepcopy(self.users.get(user_key))

    async def upsert_user(self, user_key: str, fields: dict[str, Any]) -> None:
        self._check("upsert_user")
        doc = self.users.setdefault(user_key, self._new_user(user_key))
        doc["data"].update(copy.deepcopy(fields))
        doc["last_login"] = max(doc["last_login"], datetime.now(UTC))

    async def ensure_user(self, user_key: str) -> bool:
        self._check("ensure_user")
        if user_key in self.users:
            return False
        self.users[user_key] = self._new_user(user_key)
        return True

    async def merge_user_info(self, user_key: str, realname: str | None) -> None:
        self._check("merge_user_info")
        doc = self.users.setdefault(user_key, self._new_user(user_key))
        user_info = doc["data"].setdefault("userInfo", {})
        user_info.update({"realname": realname, "createdAt": datetime.now(UTC).isoformat()})

    async def delete_user(self, user_key: str) -> dict[str, int]:
        self._check("delete_user")
        emotions = [k for k, row in self.emotions.items() if row["user_key"] == user_key]
        playlists = [k for k, row in self.playlists.items() if row["user_key"] == user_key]
        for key in emotions:
            del self.emotions[key]
        for key in playlists:
            del self.playlists[key]
        users = 1 if self.users.pop(user_key, None) is not None else 0
        return {"users": users, "emotions": len(emotions), "playlists": len(playlists)}

    async def upsert_emotion(
        self,
        user_key: str,
        track_id: str,
        track_title: str,
        artist: str,
        emotion: str,
        group: str | None,
        broadgroup: str | None,
        timestamp: int,
    ) -> dict[str, Any]:
        self._check("upsert_emotion")
        existing = next(
            (
                row
                for row in self.emotions.values()
                if row["user_key"] == user_key and row["track_id"] == track_id
            ),
            None,
        )
        row = existing or {"id": str(uuid.uuid4()), "user_key": user_key, "track_id": track_id}
        row.update(
            {
                "track_title": track_title,
                "artist": artist,
                "emotion": emotion,
                "group": group,
                "broadgroup": broadgroup,
                "timestamp": timestamp,
            }
        )
        self.emotions[row["id"]] = row
        return self._public(row)

    def _ordered(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        rows = sorted(rows, key=lambda row: row["id"])
        rows.sort(key=lambda row: row["timestamp"], reverse=True)
        return [self._public(row) for row in rows]

    async def list_emotions(self, user_key: str) -> list[dict[str, Any]]:
        self._check("list_emotions")
        return self._ordered([r for r in self.emotions.values() if r["user_key"] == user_key])

    async def find_emotions_by_groups(
        self, user_key: str, groups: list[str]
    ) -> list[dict[str, Any]]:
        self._check("find_emotions_by_groups")
        return self._ordered(
            [
                r
                for r in self.emotions.values()
                if r["user_key"] == user_key and r["group"] in groups
            ]
        )

    async def delete_emotion(self, user_key: str, emotion_id: str) -> bool:
        self._check("delete_emotion")
        row = self.emotions.get(emotion_id)
        if row is None or row["user_key"] != user_key:
            return False
        del self.emotions[emotion_id]
        return True

    async def delete_emotions(self, user_key: str) -> int:
        self._check("delete_emotions")
        keys = [k for k, row in self.emotions.items() if row["user_key"] == user_key]
        for key in keys:
            del self.emotions[key]
        return len(keys)

    async def create_playlist(
        self,
        user_key: str,
        name: str,
        group: str,
        emotions: list[str],
        songs: list[dict[str, Any]],
        created_at: int,
    ) -> str:
        self._check("create_playlist")
        playlist_id = str(uuid.uuid4())
        self.playlists[playlist_id] = {
            "id": playlist_id,
            "user_key": user_key,
            "name": name,
            "group": group,
            "emotions": list(emotions),
            "songs": copy.deepcopy(songs),
            "created_at": created_at,
        }
        return playlist_id

    async def list_playlists(self, user_key: str) -> list[dict[str, Any]]:
        self._check("list_playlists")
        rows = [r for r in self.playlists.values() if r["user_key"] == user_key]
        rows.sort(key=lambda row: row["created_at"], reverse=True)
        return [self._public(row) for row in rows]


def _error(status: int, code: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": code, "message": message})


class FakeLastFM:
    """Stub of the Last.fm 2.0 API served through ``httpx.MockTransport``.

    Signed calls are verified against the shared secret the same way Last.fm does.
    """

    def __init__(self, secret: str = TEST_API_SECRET):
        self.secret = secret
        self.accounts = {"alice": ("wonderland", "SK1")}
        self.profiles = {"SK1": {"name": "alice", "realname": "Alice Liddell"}}
        self.recent_tracks = [
            {"name": "Teardrop", "artist": {"#text": "Massive Attack"}, "mbid": ""},
            {"name": "Roads", "artist": {"#text": "Portishead"}, "mbid": ""},
        ]
        self.search_matches: list[dict[str, Any]] | dict[str, Any] = []
        self.track_info: dict[tuple[str, str], dict[str, Any]] = {}
        self.broken_tracks: set[tuple[str, str]] = set()
        self.requests: list[tuple[str, str, dict[str, str]]] = []
        self.delay = 0.0
        self.inflight = 0
        self.max_inflight = 0

    def calls(self, method: str) -> list[dict[str, str]]:
        """Parameters of every recorded call to ``method``."""
        return [params for name, _, params in self.requests if name == method]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            params = dict(parse_qsl(request.content.decode("utf-8")))
        else:
            params = dict(request.url.params)

        method = params.get("method", "")
        self.requests.append((method, request.method, params))

        if params.get("api_key") != TEST_API_KEY:
            return _error(403, 10, "Invalid API key - You must be granted a valid key by last.fm")

        if method == "auth.getMobileSession":
            return self._mobile_session(request, params)
        if method == "user.getInfo":
            return self._user_info(params)
        if method == "user.getRecentTracks":
            return self._recent_tracks(params)
        if method == "track.search":
            return self._search(params)
        if method == "track.getInfo":
            return await self._track_info(params)
        return _error(400, 3, "Invalid Method - No method with that name in this package")

    def _mobile_session(self, request: httpx.Request, params: dict[str, str]) -> httpx.Response:
        if request.method != "POST":
            return _error(400, 6, "auth.getMobileSession must be called with POST")

        signed = {k: v for k, v in params.items() if k not in ("api_sig", "format")}
        if params.get("api_sig") != sign_request(signed, self.secret):
            return _error(403, 13, "Invalid method signature supplied")

        account = self.accounts.get(params.get("username", ""))
        if account is None or account[0] != params.get("password"):
            return _error(
                403, 4, "Authentication Failed - You do not have permissions to access the service"
            )

        return httpx.Response(
            200, json={"session": {"name": params["username"], "key": account[1], "subscriber": 0}}
        )

    def _user_info(self, params: dict[str, str]) -> httpx.Response:
        profile = self.profiles.get(params.get("sk", ""))
        if profile is None:
            return _error(403, 9, "Invalid session key - Please re-authenticate")
        return httpx.Response(200, json={"user": dict(profile)})

    def _recent_tracks(self, params: dict[str, str]) -> httpx.Response:
        if params.get("sk", "") not in self.profiles:
            return _error(403, 9, "Invalid session key - Please re-authenticate")
        return httpx.Response(
            200,
            json={
                "recenttracks": {
                    "track": self.recent_tracks,
                    "@attr": {
                        "page": params.get("page"),
                        "perPage": params.get("limit"),
                        "total": str(len(self.recent_tracks)),
                    },
                }
            },
        )

    def _search(self, params: dict[str, str]) -> httpx.Response:
        matches = self.search_matches
        count = len(matches) if isinstance(matches, list) else 1
        return httpx.Response(
            200,
            json={
                "results": {
                    "opensearch:Query": {"searchTerms": params.get("track")},
                    "opensearch:totalResults": str(count),
                    "trackmatches": {"track": matches},
                }
            },
        )

    async def _track_info(self, params: dict[str, str]) -> httpx.Response:
        key = (params.get("artist", ""), params.get("track", ""))

        self.inflight += 1
        self.max_inflight = max(self.max_inflight, self.inflight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.inflight -= 1

        if key in self.broken_tracks:
            return _error(400, 6, "Track not found")
        info = self.track_info.get(key, {"name": key[1], "artist": {"name": key[0]}})
        return httpx.Response(200, json={"track": info})


def album_images(prefix: str) -> list[dict[str, str]]:
    """Album image list in Last.fm's shape."""
    return [
        {"#text": f"https://img.test/{prefix}/s.png", "size": "small"},
        {"#text": f"https://img.test/{prefix}/l.png", "size": "large"},
    ]


@pytest.fixture
def anyio_backend():
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def fake_db():
    """In-memory document store."""
    return FakeDatabase()


@pytest.fixture
def fake_lastfm():
    """Last.fm stub with one account: alice / wonderland -> SK1."""
    return FakeLastFM()


@pytest_asyncio.fixture(scope="function")
async def lastfm_client(fake_lastfm):
    """Last.fm client wired to the stub."""
    client = LastFMClient(
        api_key=TEST_API_KEY,
        api_secret=TEST_API_SECRET,
        base_url=TEST_API_URL,
        timeout=5.0,
        enrichment_concurrency=3,
        transport=httpx.MockTransport(fake_lastfm.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def counter_clock():
    """Deterministic millisecond clock that advances on every read."""
    ticks = iter(range(1_700_000_000_000, 1_800_000_000_000, 1000))
    return lambda: next(ticks)


@pytest.fixture
def test_app(fake_db, lastfm_client):
    """Service app with the store and Last.fm replaced by fakes."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from moodtrack_api.api import (
        emotions_router,
        health_router,
        lastfm_router,
        playlists_router,
        users_router,
    )
    from moodtrack_api.api.dependencies import get_lastfm_client
    from moodtrack_api.api.errors import moodtrack_error_handler, request_validation_handler
    from moodtrack_api.errors import MoodtrackError
    from moodtrack_api.storage import get_db
    from moodtrack_api.telemetry import TelemetryMiddleware

    app = FastAPI(title="Test App")
    app.add_middleware(TelemetryMiddleware)
    app.add_exception_handler(MoodtrackError, moodtrack_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health_router)
    app.include_router(lastfm_router)
    app.include_router(users_router)
    app.include_router(emotions_router)
    app.include_router(playlists_router)

    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_lastfm_client] = lambda: lastfm_client

    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(test_app):
    """Create test client for the service app."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        timeout=5.0,
    ) as test_client:
        yield test_client
