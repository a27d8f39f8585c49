"""Exceptions raised by the Maven resolver.

"Not found" has no exception of its own: a repository or cache that does not
hold a file returns ``None`` and the caller moves on to the next source.
"""
from __future__ import annotations

from typing import Optional


class MavenResolutionError(Exception):
    """Base class for all resolver failures."""


class TransportError(MavenResolutionError):
    """A repository could not be contacted or answered with an unexpected status."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ArtifactResolutionError(MavenResolutionError):
    """An artifact could be found neither directly nor through snapshot metadata."""


class MalformedPomError(MavenResolutionError):
    """A POM violates the structure the resolver relies on."""


class ResolutionDepthError(MalformedPomError):
    """The dependency walk nested deeper than the configured bound."""


class CacheWriteError(MavenResolutionError):
    """A fetched file could not be persisted into the cache directory."""
