"""Backend handlers bridging the mood-tracking client to Last.fm and the document store."""

__version__ = "0.4.0"
