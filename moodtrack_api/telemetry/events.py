"""
Telemetry Event Names

Event name constants following the convention {entity}_{action}.
"""


class TelemetryEvents:
    """Centralized telemetry event names."""

    # Request lifecycle
    REQUEST_RECEIVED = "request_received"
    REQUEST_COMPLETED = "request_completed"
    REQUEST_FAILED = "request_failed"

    # Sessions and profiles
    USER_AUTHENTICATED = "user_authenticated"
    USER_INFO_REFRESHED = "user_info_refreshed"
    PROFILE_ENRICHED = "profile_enriched"
    ACCOUNT_DELETED = "account_deleted"

    # Emotion records
    EMOTION_STORED = "emotion_stored"
    EMOTION_DELETED = "emotion_deleted"
    EMOTION_HISTORY_DELETED = "emotion_history_deleted"
    USER_MATERIALIZED = "user_materialized"

    # Playlists
    PLAYLIST_CREATED = "playlist_created"

    # Last.fm
    TRACK_SEARCH_COMPLETED = "track_search_completed"
    TRACK_ENRICHMENT_FAILED = "track_enrichment_failed"

    # Errors
    OPERATION_FAILED = "operation_failed"

    # Application lifecycle
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"
