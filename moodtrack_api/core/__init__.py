"""Core logic: request signing, Last.fm access, sessions, emotions and playlists."""

from .account_manager import AccountManager
from .emotion_manager import EmotionManager
from .lastfm_client import LastFMClient
from .playlist_builder import PlaylistBuilder
from .session_manager import SessionManager
from .signer import sign_request
from .track_catalog import TrackCatalog

__all__ = [
    "LastFMClient",
    "SessionManager",
    "AccountManager",
    "EmotionManager",
    "PlaylistBuilder",
    "TrackCatalog",
    "sign_request",
]
