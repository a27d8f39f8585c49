"""POM parsing: dependencies, properties, parent inheritance and placeholders.

Only the subset of the POM model needed for transitive resolution is read:
the ``<dependencies>`` block, ``<properties>``, ``<parent>`` and the
versions declared in ``<dependencyManagement>``. Profiles, exclusions and
imported BOMs are not interpreted.
"""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Callable, Dict, List, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from maven.errors import ArtifactResolutionError, MalformedPomError
from maven.models import MavenId, PomDependency, PomModel, ResolvedFile, VersionlessMavenId

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{[^}]+\}")

# (groupId, artifactId, version) exactly as written in <dependencyManagement>
RawManagedEntry = Tuple[str, str, str]


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, name: str) -> List[ET.Element]:
    return [c for c in elem if isinstance(c.tag, str) and _local(c.tag) == name]


def _child_text(elem: ET.Element, name: str) -> Optional[str]:
    found = _children(elem, name)
    if not found:
        return None
    return (found[0].text or "").strip()


def apply_placeholders(value: str, maven_id: MavenId, properties: Dict[str, str]) -> str:
    """Expand ``${...}`` tokens in ``value``.

    ``${pom.x}`` and ``${project.x}`` are treated as ``${x}``; groupId,
    artifactId and version refer to ``maven_id``; anything else is looked up
    in ``properties`` (keys include the ``${}`` wrapper). Expansion repeats
    until no placeholder is left.

    Raises:
        MalformedPomError: a placeholder is undefined or the expansion does
            not settle.
    """
    for _ in range(Constants.MAX_PLACEHOLDER_PASSES):
        if "${" not in value:
            return value
        expanded = (
            value.replace("${pom.", "${")
            .replace("${project.", "${")
            .replace("${groupId}", maven_id.group_id)
            .replace("${artifactId}", maven_id.artifact_id)
            .replace("${version}", maven_id.version)
        )
        expanded = _PLACEHOLDER.sub(lambda m: properties.get(m.group(0), m.group(0)), expanded)
        if expanded == value:
            raise MalformedPomError(
                f'Cannot simplify placeholders of string "{value}" further.'
                f" Placeholder used in: {maven_id}"
            )
        value = expanded
    raise MalformedPomError(f'Placeholder expansion of "{value}" does not terminate in {maven_id}')


def collapse_version_range(version: str) -> str:
    """Reduce a bracketed range to its lower bound.

    ``[1.0,)`` and ``[1.0, 2.0)`` both give ``1.0``. This is an
    approximation; no candidate list is consulted.
    """
    if not version.startswith("["):
        return version
    inner = version[1:]
    for terminator in (",", "]", ")"):
        idx = inner.find(terminator)
        if idx != -1:
            inner = inner[:idx]
    return inner.strip()


class PomResolver:
    """Build PomModel objects, fetching POM bytes through ``fetch_pom``.

    Args:
        fetch_pom: returns the POM of an artifact, or None when it does not exist.
        max_parent_depth: longest accepted ``<parent>`` chain.
    """

    def __init__(
        self,
        fetch_pom: Callable[[MavenId], Optional[ResolvedFile]],
        max_parent_depth: int = Constants.MAX_PARENT_DEPTH,
    ):
        self._fetch_pom = fetch_pom
        self._max_parent_depth = max_parent_depth
        self._documents: Dict[MavenId, ET.Element] = {}

    def load(self, maven_id: MavenId) -> Optional[PomModel]:
        """Parse the POM of ``maven_id``; None when the artifact has no POM."""
        project = self._document(maven_id)
        if project is None:
            return None

        properties: Dict[str, str] = {}
        raw_managed: Dict[Tuple[str, str], str] = {}
        parent = self._collect_inherited(project, maven_id, properties, raw_managed, depth=0)

        managed: Dict[VersionlessMavenId, str] = {}
        for (group, artifact), version in raw_managed.items():
            key = VersionlessMavenId(
                apply_placeholders(group, maven_id, properties),
                apply_placeholders(artifact, maven_id, properties),
            )
            managed.setdefault(key, version)

        dependencies = self._parse_dependencies(project, maven_id, properties, managed)
        return PomModel(
            maven_id=maven_id,
            properties=properties,
            dependencies=dependencies,
            parent=parent,
            managed_versions=managed,
        )

    def _document(self, maven_id: MavenId) -> Optional[ET.Element]:
        if maven_id in self._documents:
            return self._documents[maven_id]
        resolved = self._fetch_pom(maven_id)
        if resolved is None:
            return None
        try:
            project = ET.fromstring(resolved.data)
        except ET.ParseError as exc:
            raise MalformedPomError(f"Cannot parse maven pom of artifact {maven_id}: {exc}") from exc
        self._documents[maven_id] = project
        return project

    def _collect_inherited(
        self,
        project: ET.Element,
        maven_id: MavenId,
        properties: Dict[str, str],
        raw_managed: Dict[Tuple[str, str], str],
        depth: int,
    ) -> Optional[MavenId]:
        """Merge properties and managed versions of ``project`` and its ancestors.

        Values already present are never overwritten, so the closest POM
        wins. Returns the direct parent of ``project``, if any.
        """
        for block in _children(project, "properties"):
            for prop in block:
                if isinstance(prop.tag, str):
                    properties.setdefault("${" + _local(prop.tag) + "}", (prop.text or "").strip())

        for management in _children(project, "dependencyManagement"):
            for deps in _children(management, "dependencies"):
                for dep in _children(deps, "dependency"):
                    group = _child_text(dep, "groupId")
                    artifact = _child_text(dep, "artifactId")
                    version = _child_text(dep, "version")
                    if _child_text(dep, "scope") == "import":
                        continue
                    if group and artifact and version:
                        raw_managed.setdefault((group, artifact), version)

        parent_blocks = _children(project, "parent")
        if not parent_blocks:
            return None
        parent_id = self._parent_id(parent_blocks[0], maven_id)
        for key, value in (
            ("${parent.groupId}", parent_id.group_id),
            ("${parent.artifactId}", parent_id.artifact_id),
            ("${parent.version}", parent_id.version),
        ):
            properties.setdefault(key, value)

        if depth >= self._max_parent_depth:
            raise MalformedPomError(
                f"Parent chain of {maven_id} is deeper than {self._max_parent_depth} POMs"
            )
        if is_debug_enabled(logger):
            logger.debug(
                "Resolving parent POM",
                extra=extra_context(
                    event="pom_parent", component="pom", action="collect_inherited",
                    artifact=str(maven_id), target=str(parent_id),
                )
            )
        parent_project = self._document(parent_id)
        if parent_project is None:
            raise ArtifactResolutionError(
                f"Cannot resolve pom of artifact {parent_id}, which is the parent module of {maven_id}"
            )
        self._collect_inherited(parent_project, parent_id, properties, raw_managed, depth + 1)
        return parent_id

    @staticmethod
    def _parent_id(parent: ET.Element, maven_id: MavenId) -> MavenId:
        values = []
        for field in ("groupId", "artifactId", "version"):
            found = _children(parent, field)
            if len(found) != 1 or not (found[0].text or "").strip():
                raise MalformedPomError(
                    f"Pom of artifact {maven_id} does not specify the {field} of its parent correctly."
                )
            values.append(found[0].text.strip())
        return MavenId(*values)

    def _parse_dependencies(
        self,
        project: ET.Element,
        maven_id: MavenId,
        properties: Dict[str, str],
        managed: Dict[VersionlessMavenId, str],
    ) -> List[PomDependency]:
        blocks = [b for b in _children(project, "dependencies") if len(b)]
        if len(blocks) > 1:
            raise MalformedPomError(f"Pom for artifact {maven_id} contains multiple dependencies blocks.")
        if not blocks:
            return []

        dependencies: List[PomDependency] = []
        for dep in _children(blocks[0], "dependency"):
            group = _child_text(dep, "groupId")
            artifact = _child_text(dep, "artifactId")
            if not group or not artifact:
                raise MalformedPomError(f"Pom for artifact {maven_id} declares a dependency without groupId/artifactId")
            group = apply_placeholders(group, maven_id, properties)
            artifact = apply_placeholders(artifact, maven_id, properties)

            version = _child_text(dep, "version")
            if not version:
                version = managed.get(VersionlessMavenId(group, artifact))
            if version:
                version = collapse_version_range(apply_placeholders(version, maven_id, properties))

            dependencies.append(PomDependency(
                group_id=group,
                artifact_id=artifact,
                version=version or None,
                scope=_child_text(dep, "scope"),
                optional=_child_text(dep, "optional") == "true",
            ))
        return dependencies
