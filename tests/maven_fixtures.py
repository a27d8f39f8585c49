"""Builders for POM documents and an in-memory repository used across tests."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from maven.models import MavenId, ResolvedFile
from maven.repository import MavenRepository

POM_NS = "http://maven.apache.org/POM/4.0.0"


def dep_xml(group: str, artifact: str, version: Optional[str] = None, scope: Optional[str] = None,
            optional: bool = False) -> str:
    parts = [f"<groupId>{group}</groupId>", f"<artifactId>{artifact}</artifactId>"]
    if version is not None:
        parts.append(f"<version>{version}</version>")
    if scope is not None:
        parts.append(f"<scope>{scope}</scope>")
    if optional:
        parts.append("<optional>true</optional>")
    return "<dependency>" + "".join(parts) + "</dependency>"


def pom_xml(maven_id: MavenId, dependencies: Tuple[str, ...] = (), properties: Optional[Dict[str, str]] = None,
            parent: Optional[MavenId] = None, managed: Tuple[str, ...] = (), extra: str = "") -> str:
    body = [
        "<modelVersion>4.0.0</modelVersion>",
        f"<groupId>{maven_id.group_id}</groupId>",
        f"<artifactId>{maven_id.artifact_id}</artifactId>",
        f"<version>{maven_id.version}</version>",
    ]
    if parent is not None:
        body.append(
            "<parent>"
            f"<groupId>{parent.group_id}</groupId>"
            f"<artifactId>{parent.artifact_id}</artifactId>"
            f"<version>{parent.version}</version>"
            "</parent>"
        )
    if properties:
        body.append("<properties>" + "".join(f"<{k}>{v}</{k}>" for k, v in properties.items()) + "</properties>")
    if managed:
        body.append("<dependencyManagement><dependencies>" + "".join(managed) + "</dependencies></dependencyManagement>")
    if dependencies:
        body.append("<dependencies>" + "".join(dependencies) + "</dependencies>")
    body.append(extra)
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<project xmlns="{POM_NS}">' + "".join(body) + "</project>"


class CountingRepository(MavenRepository):
    """Serves files from a dict and records every lookup."""

    def __init__(self, files: Optional[Dict[Tuple[str, str], bytes]] = None):
        self.files: Dict[Tuple[str, str], bytes] = dict(files or {})
        self.calls: List[Tuple[str, str]] = []

    def put(self, folder: str, file: str, data: bytes) -> None:
        self.files[(folder, file)] = data

    def publish(self, maven_id: MavenId, pom: Optional[str] = None, jar: bool = True,
                sources: bool = False, annotations: bool = False) -> None:
        folder = maven_id.folder
        if pom is not None:
            self.put(folder, maven_id.filename(None, "pom"), pom.encode("utf-8"))
        if jar:
            self.put(folder, maven_id.filename(None, "jar"), f"jar:{maven_id}".encode("utf-8"))
        if sources:
            self.put(folder, maven_id.filename("sources", "jar"), f"src:{maven_id}".encode("utf-8"))
        if annotations:
            self.put(folder, maven_id.filename("annotations", "zip"), f"ann:{maven_id}".encode("utf-8"))

    def resolve(self, folder: str, file: str) -> Optional[ResolvedFile]:
        self.calls.append((folder, file))
        data = self.files.get((folder, file))
        if data is None:
            return None
        return ResolvedFile(data=data)
