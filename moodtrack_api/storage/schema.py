"""PostgreSQL schema definitions for the moodtrack service."""

# Helper function for auto-updating timestamps
CREATE_UPDATED_AT_TRIGGER = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

# Users table - one document per Last.fm session key (or client uid)
CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    user_key TEXT PRIMARY KEY,
    data JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    last_login TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

DROP TRIGGER IF EXISTS update_users_updated_at ON users;
CREATE TRIGGER update_users_updated_at
    BEFORE UPDATE ON users
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""

# Emotions table - at most one record per (user_key, track_id)
CREATE_EMOTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS emotions (
    emotion_id TEXT PRIMARY KEY,
    user_key TEXT NOT NULL,
    track_id TEXT NOT NULL,
    track_title TEXT NOT NULL,
    artist TEXT NOT NULL,
    emotion TEXT NOT NULL,
    emotion_group TEXT,
    broadgroup TEXT,
    timestamp BIGINT NOT NULL,
    CONSTRAINT uq_emotions_user_track UNIQUE (user_key, track_id)
);

CREATE INDEX IF NOT EXISTS idx_emotions_user_timestamp ON emotions(user_key, timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_emotions_user_group ON emotions(user_key, emotion_group);
"""

# Playlists table - songs are a snapshot taken at build time
CREATE_PLAYLISTS_TABLE = """
CREATE TABLE IF NOT EXISTS playlists (
    playlist_id TEXT PRIMARY KEY,
    user_key TEXT NOT NULL,
    name TEXT NOT NULL,
    playlist_group TEXT NOT NULL,
    emotions JSONB NOT NULL DEFAULT '[]'::jsonb,
    songs JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at BIGINT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_playlists_user ON playlists(user_key, created_at DESC);
"""

INIT_SCHEMA = "\n".join(
    [
        CREATE_UPDATED_AT_TRIGGER,
        CREATE_USERS_TABLE,
        CREATE_EMOTIONS_TABLE,
        CREATE_PLAYLISTS_TABLE,
    ]
)
