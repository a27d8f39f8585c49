"""Data models for Maven coordinates, fetched files and resolution output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set


class DependencyScope(Enum):
    """Scope stamped on every JavaJarDependency a resolver produces."""
    COMPILE = "compile"
    COMPILE_ONLY = "compileOnly"
    RUNTIME = "runtime"
    PROVIDED = "provided"
    TEST = "test"


@dataclass(frozen=True)
class VersionlessMavenId:
    """group:artifact key used for version conflict resolution."""
    group_id: str
    artifact_id: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


@dataclass(frozen=True)
class MavenId:
    """Fully versioned artifact coordinate."""
    group_id: str
    artifact_id: str
    version: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @classmethod
    def parse(cls, coordinate: str) -> "MavenId":
        """Parse a ``group:artifact:version`` string."""
        parts = [p.strip() for p in coordinate.strip().split(":")]
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Invalid Maven coordinate '{coordinate}', expected group:artifact:version")
        return cls(parts[0], parts[1], parts[2])

    def versionless(self) -> VersionlessMavenId:
        return VersionlessMavenId(self.group_id, self.artifact_id)

    @property
    def folder(self) -> str:
        """Repository-relative folder, always ending in '/'."""
        return f"{self.group_id.replace('.', '/')}/{self.artifact_id}/{self.version}/"

    def filename(self, classifier: Optional[str], extension: str, version: Optional[str] = None) -> str:
        """File name inside ``folder``; ``version`` overrides the timestamped snapshot value."""
        ver = version or self.version
        if classifier:
            return f"{self.artifact_id}-{ver}-{classifier}.{extension}"
        return f"{self.artifact_id}-{ver}.{extension}"


class ResolvedFile:
    """Contents of a repository file plus the on-disk location once cached.

    Either ``data`` or ``cache_path`` must be given. When only the path is
    known the bytes are read on first access.
    """

    def __init__(self, data: Optional[bytes] = None, cache_path: Optional[Path] = None):
        if data is None and cache_path is None:
            raise ValueError("ResolvedFile needs data or a cache path")
        self._data = data
        self.cache_path = cache_path

    @property
    def data(self) -> bytes:
        if self._data is None:
            assert self.cache_path is not None
            self._data = self.cache_path.read_bytes()
        return self._data

    def __repr__(self) -> str:
        return f"ResolvedFile(cache_path={self.cache_path!r})"


@dataclass(frozen=True)
class JavaJarDependency:
    """A materialized artifact ready to be put on a classpath."""
    jar: Path
    sources: Optional[Path]
    maven_id: MavenId
    scope: DependencyScope = DependencyScope.COMPILE_ONLY
    annotations: Optional[Path] = None


@dataclass(frozen=True)
class PomDependency:
    """One ``<dependency>`` entry after placeholder substitution."""
    group_id: str
    artifact_id: str
    version: Optional[str]
    scope: Optional[str] = None
    optional: bool = False

    def versionless(self) -> VersionlessMavenId:
        return VersionlessMavenId(self.group_id, self.artifact_id)


@dataclass
class PomModel:
    """The parts of a POM the resolver needs."""
    maven_id: MavenId
    properties: Dict[str, str]
    dependencies: List[PomDependency]
    parent: Optional[MavenId] = None
    managed_versions: Dict[VersionlessMavenId, str] = field(default_factory=dict)


@dataclass
class ResolutionResult:
    """Outcome of a version walk: the version table and keys left without a version."""
    versions: Dict[VersionlessMavenId, MavenId]
    unknown_versions: Set[VersionlessMavenId]
