"""Transitive Maven dependency resolution.

A MavenResolver walks the POM graph from a root artifact depth-first,
keeps the highest version seen for every group:artifact (see
``maven.versions.is_newer``) and finally downloads the jar, sources jar and
annotations archive of each surviving artifact through a FileCache.

A resolver instance is not safe to share between threads: the version table
of a walk is mutated without synchronization.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from maven.cache import FileCache
from maven.errors import (
    ArtifactResolutionError,
    ResolutionDepthError,
    TransportError,
)
from maven.models import (
    DependencyScope,
    JavaJarDependency,
    MavenId,
    PomDependency,
    ResolutionResult,
    ResolvedFile,
    VersionlessMavenId,
)
from maven.pom import PomResolver
from maven.repository import MavenRepository
from maven.versions import is_newer

logger = logging.getLogger(__name__)


class MavenResolver:
    """Resolve artifacts and their transitive dependencies against repositories.

    Repositories are queried in the order they were added, and only when the
    cache has neither the file nor a negative marker for it.
    """

    def __init__(
        self,
        cache_root: Union[str, Path],
        repositories: Iterable[MavenRepository] = (),
        default_scope: DependencyScope = DependencyScope.COMPILE_ONLY,
        resolve_test_dependencies: bool = False,
        resolve_provided_dependencies: bool = False,
        blacklist: Iterable[Union[MavenId, VersionlessMavenId]] = (),
        max_depth: int = Constants.MAX_RESOLUTION_DEPTH,
    ):
        self.cache = FileCache(cache_root, repositories)
        self.default_scope = default_scope
        self.resolve_test_dependencies = resolve_test_dependencies
        self.resolve_provided_dependencies = resolve_provided_dependencies
        self.max_depth = max_depth
        self.blacklisted_artifacts: Set[VersionlessMavenId] = set()
        self.prevent_transitive_resolution(blacklist)

    # -- configuration (chainable) --

    def add_repository(self, repository: MavenRepository) -> "MavenResolver":
        self.cache.add_repository(repository)
        return self

    def add_repositories(self, repositories: Iterable[MavenRepository]) -> "MavenResolver":
        """Append repositories; they are consulted after the ones already registered."""
        self.cache.add_repositories(repositories)
        return self

    def set_default_scope(self, scope: DependencyScope) -> "MavenResolver":
        if scope is None:
            raise ValueError("scope may not be None")
        self.default_scope = scope
        return self

    def set_resolve_test_dependencies(self, enabled: bool) -> "MavenResolver":
        self.resolve_test_dependencies = enabled
        return self

    def set_resolve_provided_dependencies(self, enabled: bool) -> "MavenResolver":
        self.resolve_provided_dependencies = enabled
        return self

    def prevent_transitive_resolution(
        self, artifacts: Iterable[Union[MavenId, VersionlessMavenId]]
    ) -> "MavenResolver":
        """Never expand the given artifacts (any version) during a transitive walk.

        They can still be fetched directly with get_jar_depend().
        """
        for artifact in artifacts:
            self.blacklisted_artifacts.add(VersionlessMavenId(artifact.group_id, artifact.artifact_id))
        return self

    # -- single artifacts --

    def resolve_artifact_location_cached(
        self, artifact: MavenId, classifier: Optional[str], extension: str
    ) -> Optional[Path]:
        """Path of the artifact file if it is already cached; no network access."""
        return self.cache.cached_path(artifact.folder, artifact.filename(classifier, extension))

    def find_artifact(
        self, artifact: MavenId, classifier: Optional[str], extension: str
    ) -> Optional[ResolvedFile]:
        """Fetch an artifact file, falling back to maven-metadata.xml for snapshots.

        Returns None when the file is absent everywhere and the metadata, if
        any, has no timestamped entry for this classifier and extension.

        Raises:
            ArtifactResolutionError: the metadata names a file that does not exist.
        """
        folder = artifact.folder
        direct = self.cache.resolve_file_contents(folder, artifact.filename(classifier, extension))
        if direct is not None:
            return direct

        metadata = self.cache.resolve_file_contents(folder, Constants.METADATA_FILE)
        if metadata is None:
            return None
        snapshot_version = self.last_snapshot_version(metadata, classifier, extension)
        if snapshot_version is None:
            logger.debug(
                "No %s entry for %s (%s, %s)", Constants.METADATA_FILE, artifact, classifier or "-", extension
            )
            return None
        name = artifact.filename(classifier, extension, version=snapshot_version)
        resolved = self.cache.resolve_file_contents(folder, name)
        if resolved is None:
            raise ArtifactResolutionError(
                f"Unable to resolve artifact: {folder}{name}"
                f" despite it being defined in the {Constants.METADATA_FILE} file!"
            )
        return resolved

    def resolve_artifact(self, artifact: MavenId, classifier: Optional[str], extension: str) -> ResolvedFile:
        """Like find_artifact(), but absence is an ArtifactResolutionError."""
        resolved = self.find_artifact(artifact, classifier, extension)
        if resolved is None:
            raise ArtifactResolutionError(
                f"Unable to resolve artifact {artifact} ({classifier or 'no classifier'}, {extension}):"
                f" it could not be fetched directly and {Constants.METADATA_FILE} does not name it."
            )
        return resolved

    @staticmethod
    def last_snapshot_version(
        metadata: ResolvedFile, classifier: Optional[str], extension: str
    ) -> Optional[str]:
        """Timestamped version ("value") for a classifier/extension pair.

        An empty or None classifier only matches entries without one.
        """
        try:
            root = ET.fromstring(metadata.data)
        except ET.ParseError as exc:
            raise ArtifactResolutionError(f"Unable to parse {Constants.METADATA_FILE}: {exc}") from exc

        snapshot_versions = root.find("versioning/snapshotVersions")
        if snapshot_versions is None:
            return None
        for entry in snapshot_versions.findall("snapshotVersion"):
            if (entry.findtext("extension") or "").strip() != extension:
                continue
            entry_classifier = entry.findtext("classifier")
            if classifier:
                if entry_classifier is None or entry_classifier.strip() != classifier:
                    continue
            elif entry_classifier is not None:
                continue
            value = entry.findtext("value")
            return value.strip() if value else None
        return None

    def get_jar_depend(self, artifact: MavenId) -> Optional[JavaJarDependency]:
        """Download the jar of a single artifact plus optional sources and annotations.

        Returns None (with a warning) when the jar itself cannot be obtained.
        Missing sources or annotations only leave the matching field unset.
        """
        sources = self._optional_artifact(artifact, Constants.SOURCES_CLASSIFIER, Constants.JAR_EXTENSION)
        annotations = self._optional_artifact(
            artifact, Constants.ANNOTATIONS_CLASSIFIER, Constants.ANNOTATIONS_EXTENSION
        )
        jar = self._optional_artifact(artifact, None, Constants.JAR_EXTENSION)
        if jar is None or jar.cache_path is None:
            logger.warning(
                "Jar of %s could not be resolved; skipping it",
                artifact,
                extra=extra_context(event="materialize", component="resolver", outcome="missing_jar"),
            )
            return None
        return JavaJarDependency(
            jar=jar.cache_path,
            sources=sources.cache_path if sources is not None else None,
            maven_id=artifact,
            scope=self.default_scope,
            annotations=annotations.cache_path if annotations is not None else None,
        )

    def _optional_artifact(
        self, artifact: MavenId, classifier: Optional[str], extension: str
    ) -> Optional[ResolvedFile]:
        try:
            return self.find_artifact(artifact, classifier, extension)
        except (TransportError, ArtifactResolutionError) as exc:
            logger.warning("Could not fetch %s (%s, %s): %s", artifact, classifier or "jar", extension, exc)
            return None

    # -- transitive resolution --

    def get_transitive_dependencies(self, artifact: MavenId) -> List[JavaJarDependency]:
        """Resolve ``artifact`` and everything it depends on.

        Artifacts whose jar cannot be fetched are left out of the result, so
        callers that need completeness must check it themselves.
        """
        with Timer() as timer:
            result = self.resolve_versions(artifact)
            for key in sorted(result.unknown_versions, key=str):
                logger.warning(
                    'The artifact "%s" was required by a dependency, but the version was left unspecified!'
                    " It was thus not resolved",
                    key,
                    extra=extra_context(event="unknown_version", component="resolver", root=str(artifact)),
                )
            dependencies: List[JavaJarDependency] = []
            for maven_id in result.versions.values():
                resolved = self.get_jar_depend(maven_id)
                if resolved is not None:
                    dependencies.append(resolved)
        logger.info(
            "Resolved %d of %d artifacts for %s",
            len(dependencies),
            len(result.versions),
            artifact,
            extra=extra_context(
                event="resolve", component="resolver", action="get_transitive_dependencies",
                outcome="success", duration_ms=timer.duration_ms(),
            ),
        )
        return dependencies

    def resolve_versions(self, artifact: MavenId) -> ResolutionResult:
        """Walk the dependency graph of ``artifact`` without downloading jars.

        Parsed POMs are kept only for the duration of this call.
        """
        result = ResolutionResult(versions={}, unknown_versions=set())
        self._walk(artifact, result, PomResolver(self._fetch_pom), depth=0)
        return result

    def _walk(self, artifact: MavenId, result: ResolutionResult, poms: PomResolver, depth: int) -> None:
        key = artifact.versionless()
        current = result.versions.get(key)
        if current is not None and not is_newer(current.version, artifact.version):
            return
        if depth > self.max_depth:
            raise ResolutionDepthError(
                f"Dependency graph below {artifact} is deeper than {self.max_depth} levels;"
                " the group:artifact graph is probably cyclic"
            )
        result.versions[key] = artifact
        result.unknown_versions.discard(key)
        if is_debug_enabled(logger):
            logger.debug(
                "Accepted version",
                extra=extra_context(
                    event="version_accepted", component="resolver", action="walk",
                    artifact=str(artifact), replaced=str(current) if current else None, depth=depth,
                )
            )

        try:
            model = poms.load(artifact)
        except ArtifactResolutionError as exc:
            logger.warning("Dependencies of %s are not resolved: %s", artifact, exc)
            return
        if model is None:
            logger.debug("No pom for %s; treating it as having no dependencies", artifact)
            return

        for dependency in model.dependencies:
            if not self._retain(dependency):
                continue
            dep_key = dependency.versionless()
            if dependency.version is None:
                if dep_key not in result.versions:
                    logger.info("Version of %s required by %s is unknown", dep_key, artifact)
                    result.unknown_versions.add(dep_key)
                continue
            self._walk(
                MavenId(dependency.group_id, dependency.artifact_id, dependency.version),
                result,
                poms,
                depth + 1,
            )

    def _retain(self, dependency: PomDependency) -> bool:
        if dependency.scope == "test" and not self.resolve_test_dependencies:
            return False
        if dependency.scope == "provided" and not self.resolve_provided_dependencies:
            return False
        return dependency.versionless() not in self.blacklisted_artifacts

    def _fetch_pom(self, artifact: MavenId) -> Optional[ResolvedFile]:
        return self.find_artifact(artifact, None, Constants.POM_EXTENSION)

