"""Data models for the moodtrack service."""

from .emotion import EmotionRecord
from .lastfm import EnrichmentStatus, SearchTrack, TrackImage, TrackSearchResult
from .playlist import Playlist, PlaylistSong, PlaylistSummary
from .requests import (
    AuthRequest,
    CreatePlaylistRequest,
    DeleteEmotionRequest,
    FirstLoginRequest,
    RecentTracksRequest,
    SearchRequest,
    SessionKeyRequest,
    StoreEmotionRequest,
)
from .responses import (
    DeleteHistoryResponse,
    EmotionListResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    PlaylistCreateResponse,
    PlaylistListResponse,
    ProfileResponse,
    RealnameResponse,
    RecentTracksResponse,
    SuccessResponse,
    VersionResponse,
)
from .session import ProfileStatus, UserInfo, UserSession

__all__ = [
    # Session models
    "UserSession",
    "UserInfo",
    "ProfileStatus",
    # Emotion models
    "EmotionRecord",
    # Playlist models
    "Playlist",
    "PlaylistSong",
    "PlaylistSummary",
    # Last.fm models
    "EnrichmentStatus",
    "SearchTrack",
    "TrackImage",
    "TrackSearchResult",
    # Request models
    "AuthRequest",
    "SessionKeyRequest",
    "RecentTracksRequest",
    "SearchRequest",
    "FirstLoginRequest",
    "StoreEmotionRequest",
    "DeleteEmotionRequest",
    "CreatePlaylistRequest",
    # Response models
    "SuccessResponse",
    "ProfileResponse",
    "RealnameResponse",
    "EmotionListResponse",
    "DeleteHistoryResponse",
    "PlaylistCreateResponse",
    "PlaylistListResponse",
    "RecentTracksResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "VersionResponse",
]
