"""Last.fm HTTP client built on httpx."""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..errors import UpstreamAuthFailedError, UpstreamError, UpstreamProtocolError
from ..models import (
    EnrichmentStatus,
    SearchTrack,
    TrackImage,
    TrackSearchResult,
    UserInfo,
    UserSession,
)
from .signer import sign_request

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://ws.audioscrobbler.com/2.0/"


class LastFMClient:
    """Async client for the Last.fm 2.0 API.

    Every response is checked for the ``{error, message}`` envelope before any field
    is read. Transport failures and timeouts surface as ``UpstreamError``; bodies that
    are not JSON objects, or success envelopes missing expected fields, as
    ``UpstreamProtocolError``.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        enrichment_concurrency: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Last.fm API key
            api_secret: Shared secret used for signed calls
            base_url: API root
            timeout: Timeout in seconds for each call
            enrichment_concurrency: Maximum concurrent track.getInfo lookups during search
            transport: Optional httpx transport (tests pass an httpx.MockTransport)
        """
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url
        self.timeout = timeout
        self.enrichment_concurrency = max(1, enrichment_concurrency)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _call(
        self,
        method: str,
        params: dict[str, Any],
        *,
        http_method: str = "GET",
        signed: bool = False,
        error_cls: type[UpstreamError] = UpstreamError,
        default_message: str = "Last.fm request failed",
    ) -> dict[str, Any]:
        """Call one API method and return the decoded success payload."""
        call_params = {"method": method, "api_key": self.api_key, **params}
        if signed:
            call_params["api_sig"] = sign_request(
                {name: str(value) for name, value in call_params.items()}, self.api_secret
            )
        call_params["format"] = "json"

        client = await self._get_client()
        try:
            if http_method == "POST":
                response = await client.post(self.base_url, data=call_params)
            else:
                response = await client.get(self.base_url, params=call_params)
        except httpx.TimeoutException as e:
            logger.error(f"Last.fm {method} timed out after {self.timeout}s")
            raise UpstreamError(f"Last.fm {method} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Last.fm {method} transport error: {e}")
            raise UpstreamError(f"Last.fm {method} could not be reached") from e

        try:
            payload = response.json()
        except ValueError as e:
            body = response.text[:500]
            logger.error(f"Last.fm {method} returned non-JSON body: {body!r}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=body) from e

        if not isinstance(payload, dict):
            logger.error(f"Last.fm {method} returned unexpected payload: {payload!r}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload)

        # Last.fm pairs error envelopes with 4xx statuses, so check the envelope first
        if "error" in payload:
            logger.error(f"Last.fm {method} error: {payload}")
            raise error_cls(payload.get("message") or default_message, payload=payload)

        if response.status_code >= 400:
            logger.error(f"Last.fm {method} returned HTTP {response.status_code}")
            raise UpstreamError(f"Last.fm returned HTTP {response.status_code}", payload=payload)

        return payload

    async def get_mobile_session(self, username: str, password: str) -> UserSession:
        """Exchange credentials for a session key via auth.getMobileSession."""
        payload = await self._call(
            "auth.getMobileSession",
            {"username": username, "password": password},
            http_method="POST",
            signed=True,
            error_cls=UpstreamAuthFailedError,
            default_message="Authentication failed",
        )

        session = payload.get("session")
        if not isinstance(session, dict) or not session.get("key"):
            logger.error(f"Invalid auth.getMobileSession response: {payload}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload)

        return UserSession(session_key=session["key"], username=session.get("name") or username)

    async def get_user_info(self, session_key: str) -> UserInfo:
        """Fetch the profile behind a session key via user.getInfo."""
        payload = await self._call(
            "user.getInfo",
            {"sk": session_key},
            default_message="Failed to fetch user info",
        )

        user = payload.get("user")
        if not isinstance(user, dict):
            logger.error(f"Invalid user.getInfo response: {payload}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload)

        return UserInfo(username=user.get("name") or None, realname=user.get("realname") or None)

    async def get_recent_tracks(
        self, session_key: str, page: int = 1, limit: int = 20
    ) -> dict[str, Any]:
        """Fetch one page of recently scrobbled tracks via user.getRecentTracks."""
        payload = await self._call(
            "user.getRecentTracks",
            {"sk": session_key, "page": page, "limit": limit},
            default_message="Failed to fetch recent tracks",
        )

        recent = payload.get("recenttracks")
        if not isinstance(recent, dict) or "track" not in recent:
            logger.error(f"Invalid user.getRecentTracks response: {payload}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload)

        return recent

    async def get_track_info(self, artist: str, track: str) -> dict[str, Any]:
        """Fetch track details via track.getInfo with autocorrection."""
        payload = await self._call(
            "track.getInfo",
            {"artist": artist, "track": track, "autocorrect": 1},
            default_message="Failed to fetch track info",
        )

        info = payload.get("track")
        if not isinstance(info, dict):
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload)
        return info

    async def search_tracks(self, query: str) -> TrackSearchResult:
        """Search tracks and attach album artwork to each match.

        Artwork lookups run concurrently, bounded by ``enrichment_concurrency``. A failed
        lookup marks only its own track as ``unavailable``; result order is upstream order.
        """
        payload = await self._call(
            "track.search",
            {"track": query},
            default_message="Failed to search tracks",
        )

        results = payload.get("results")
        matches = results.get("trackmatches") if isinstance(results, dict) else None
        if not isinstance(matches, dict) or "track" not in matches:
            logger.error(f"Invalid track.search response: {payload}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload)

        tracks = matches["track"]
        if isinstance(tracks, dict):
            # A single match comes back as an object rather than a list
            tracks = [tracks]

        semaphore = asyncio.Semaphore(self.enrichment_concurrency)
        try:
            enriched = await asyncio.gather(*(self._enrich_track(t, semaphore) for t in tracks))
        except ValidationError as e:
            logger.error(f"Malformed track in track.search response: {e}")
            raise UpstreamProtocolError("Invalid response from Last.fm", payload=payload) from e

        total = results.get("opensearch:totalResults")
        return TrackSearchResult(
            query=query,
            total_results=int(total) if str(total).isdigit() else None,
            tracks=list(enriched),
        )

    async def _enrich_track(
        self, track: dict[str, Any], semaphore: asyncio.Semaphore
    ) -> SearchTrack:
        name = str(track.get("name", ""))
        artist = track.get("artist", "")
        if isinstance(artist, dict):
            artist = artist.get("name") or artist.get("#text") or ""

        fields = {
            "name": name,
            "artist": str(artist),
            "url": track.get("url"),
            "listeners": track.get("listeners"),
            "mbid": track.get("mbid") or None,
            "image": _images(track.get("image")),
        }

        try:
            async with semaphore:
                info = await self.get_track_info(fields["artist"], name)
            album = info.get("album")
            artwork = _images(album.get("image")) if isinstance(album, dict) else []
        except (UpstreamError, ValidationError) as e:
            logger.warning(f"Artwork lookup failed for '{name}' by '{artist}': {e}")
            return SearchTrack(**fields, enrichment=EnrichmentStatus.UNAVAILABLE)

        if not any(image.url for image in artwork):
            return SearchTrack(**fields, enrichment=EnrichmentStatus.NO_ARTWORK)

        fields["image"] = artwork
        return SearchTrack(**fields, enrichment=EnrichmentStatus.OK)


def _images(raw: Any) -> list[TrackImage]:
    if not isinstance(raw, list):
        return []
    return [TrackImage.model_validate(entry) for entry in raw if isinstance(entry, dict)]
