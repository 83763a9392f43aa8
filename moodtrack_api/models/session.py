"""User session data models."""

from pydantic import Field

from .base import CamelModel


class UserSession(CamelModel):
    """Result of a successful Last.fm mobile session handshake."""

    session_key: str = Field(..., description="Session key issued by Last.fm")
    username: str = Field(..., description="Canonical Last.fm username")


class UserInfo(CamelModel):
    """Profile fields refreshed from Last.fm user.getInfo."""

    username: str | None = None
    realname: str | None = Field(
        default=None, description="Real name on file at Last.fm, if the user provided one"
    )


class ProfileStatus(CamelModel):
    """Outcome of first-login profile enrichment."""

    already_exists: bool
    realname: str | None = None
