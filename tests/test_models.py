"""Tests for data models and the camelCase wire format."""

import pytest
from pydantic import ValidationError

from moodtrack_api.models import (
    CreatePlaylistRequest,
    EmotionRecord,
    EnrichmentStatus,
    Playlist,
    PlaylistSong,
    RecentTracksRequest,
    SearchTrack,
    StoreEmotionRequest,
    TrackImage,
    UserSession,
)


class TestCamelCase:
    """Test alias handling shared by the wire models."""

    def test_request_accepts_camel_case(self):
        """Test requests parse the client's camelCase keys."""
        request = StoreEmotionRequest.model_validate(
            {"sessionKey": "SK1", "trackId": "t1", "trackTitle": "Roads", "emotion": "sad"}
        )
        assert request.session_key == "SK1"
        assert request.track_id == "t1"
        assert request.artist is None

    def test_request_accepts_field_names(self):
        """Test snake_case names are accepted too."""
        request = CreatePlaylistRequest(session_key="SK1", group="g", emotions=["a"])
        assert request.name is None
        assert request.emotions == ["a"]

    def test_dump_by_alias(self):
        """Test serialization uses camelCase keys."""
        session = UserSession(session_key="SK1", username="alice")
        assert session.model_dump(by_alias=True) == {"sessionKey": "SK1", "username": "alice"}

    def test_emotion_record_defaults(self):
        """Test optional labels default to None."""
        record = EmotionRecord(
            id="e1",
            track_id="t1",
            track_title="Roads",
            artist="Portishead",
            emotion="sad",
            timestamp=1,
        )
        assert record.group is None
        assert record.broadgroup is None
        assert record.model_dump(by_alias=True)["trackTitle"] == "Roads"

    def test_emotion_record_requires_timestamp(self):
        """Test a record without timestamp is invalid."""
        with pytest.raises(ValidationError):
            EmotionRecord(id="e1", track_id="t1", track_title="x", artist="y", emotion="z")


class TestRequestValidation:
    """Test bounds on request fields."""

    def test_recent_tracks_defaults(self):
        request = RecentTracksRequest(sessionKey="SK1")
        assert (request.page, request.limit) == (1, 20)

    @pytest.mark.parametrize("field,value", [("page", 0), ("limit", 0), ("limit", 201)])
    def test_recent_tracks_bounds(self, field, value):
        with pytest.raises(ValidationError):
            RecentTracksRequest(sessionKey="SK1", **{field: value})


class TestPlaylistModels:
    """Test playlist models."""

    def test_playlist_round_trip_from_store(self):
        """Test a stored playlist row validates back into the model."""
        playlist = Playlist.model_validate(
            {
                "id": "p1",
                "name": "Mix",
                "group": "Joy",
                "emotions": ["joyful"],
                "songs": [{"trackId": "t1", "trackTitle": "Roads", "artist": "Portishead"}],
                "createdAt": 5,
            }
        )
        assert playlist.created_at == 5
        assert playlist.songs == [
            PlaylistSong(track_id="t1", track_title="Roads", artist="Portishead")
        ]


class TestLastFMModels:
    """Test Last.fm payload models."""

    def test_image_alias(self):
        """Test Last.fm's '#text' key maps to url."""
        image = TrackImage.model_validate({"#text": "https://img.test/a.png", "size": "small"})
        assert image.url == "https://img.test/a.png"
        assert image.model_dump(by_alias=True) == {
            "#text": "https://img.test/a.png",
            "size": "small",
        }

    def test_image_null_url(self):
        """Test a null '#text' reads as an empty url."""
        image = TrackImage.model_validate({"#text": None, "size": "small"})
        assert image.url == ""

    def test_enrichment_stored_as_value(self):
        """Test the enrichment status serializes as its string value."""
        track = SearchTrack(name="Roads", artist="Portishead", enrichment=EnrichmentStatus.OK)
        assert track.enrichment == "ok"
        assert track.model_dump()["enrichment"] == "ok"

    def test_enrichment_defaults_to_unavailable(self):
        track = SearchTrack(name="Roads", artist="Portishead")
        assert track.enrichment == EnrichmentStatus.UNAVAILABLE
        assert track.image == []
