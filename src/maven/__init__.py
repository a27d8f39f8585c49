"""Maven artifact resolution: repositories, caching, POM parsing and the transitive walker."""

from maven.errors import (
    ArtifactResolutionError,
    CacheWriteError,
    MalformedPomError,
    MavenResolutionError,
    ResolutionDepthError,
    TransportError,
)
from maven.models import DependencyScope, JavaJarDependency, MavenId, ResolvedFile, VersionlessMavenId
from maven.repository import HttpMavenRepository, LocalMavenRepository, MavenRepository
from maven.resolver import MavenResolver

__all__ = [
    "ArtifactResolutionError",
    "CacheWriteError",
    "DependencyScope",
    "HttpMavenRepository",
    "JavaJarDependency",
    "LocalMavenRepository",
    "MalformedPomError",
    "MavenId",
    "MavenRepository",
    "MavenResolutionError",
    "MavenResolver",
    "ResolutionDepthError",
    "ResolvedFile",
    "TransportError",
    "VersionlessMavenId",
]
