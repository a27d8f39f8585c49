"""Resolver configuration: YAML file, environment overrides and CLI overrides.

Precedence, lowest to highest: built-in defaults, the YAML config file,
MVNRESOLVE_* environment variables, command-line arguments.

Example file::

    resolver:
      cache_dir: ~/.cache/mvnresolve
      repositories:
        - ~/.m2/repository
        - https://repo.maven.apache.org/maven2/
      resolve_test: false
      resolve_provided: false
      scope: compileOnly
      blacklist:
        - org.ow2.asm:asm
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants
from maven.models import DependencyScope, VersionlessMavenId
from maven.repository import HttpMavenRepository, LocalMavenRepository, MavenRepository
from maven.resolver import MavenResolver

logger = logging.getLogger(__name__)


@dataclass
class ResolverConfig:
    """Everything needed to build a MavenResolver."""
    repositories: List[str] = field(default_factory=lambda: [Constants.MAVEN_CENTRAL])
    cache_dir: Path = Constants.DEFAULT_CACHE_DIR
    resolve_test: bool = False
    resolve_provided: bool = False
    scope: DependencyScope = DependencyScope.COMPILE_ONLY
    blacklist: List[str] = field(default_factory=list)
    max_depth: int = Constants.MAX_RESOLUTION_DEPTH
    request_timeout: int = Constants.REQUEST_TIMEOUT


def parse_scope(value: str) -> DependencyScope:
    """Accept either the enum value ("compileOnly") or its name ("COMPILE_ONLY")."""
    for scope in DependencyScope:
        if value in (scope.value, scope.name) or value.lower() == scope.value.lower():
            return scope
    raise ValueError(f"Unknown dependency scope '{value}'")


def parse_versionless(value: str) -> VersionlessMavenId:
    parts = [p.strip() for p in value.split(":")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid group:artifact '{value}'")
    return VersionlessMavenId(parts[0], parts[1])


def _apply_mapping(config: ResolverConfig, data: Dict[str, Any]) -> None:
    if "repositories" in data:
        repos = data["repositories"] or []
        if not isinstance(repos, list):
            raise ValueError("'repositories' must be a list")
        config.repositories = [str(r) for r in repos]
    if data.get("cache_dir"):
        config.cache_dir = Path(str(data["cache_dir"])).expanduser()
    if "resolve_test" in data:
        config.resolve_test = bool(data["resolve_test"])
    if "resolve_provided" in data:
        config.resolve_provided = bool(data["resolve_provided"])
    if data.get("scope"):
        config.scope = parse_scope(str(data["scope"]))
    if "blacklist" in data:
        config.blacklist = [str(b) for b in (data["blacklist"] or [])]
    if data.get("max_depth") is not None:
        config.max_depth = int(data["max_depth"])
    if data.get("request_timeout") is not None:
        config.request_timeout = int(data["request_timeout"])


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> ResolverConfig:
    """Build a ResolverConfig from defaults, an optional YAML file and the environment.

    A missing file is logged and ignored; unparsable YAML raises ValueError.
    """
    config = ResolverConfig()
    if path:
        if not os.path.isfile(path):
            logger.warning("Config file not found: %s", path)
        else:
            with open(path, "r", encoding="utf-8") as fh:
                try:
                    data = yaml.safe_load(fh) or {}
                except yaml.YAMLError as exc:
                    raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            section = data.get("resolver", data)
            if not isinstance(section, dict):
                raise ValueError(f"'resolver' section of {path} must be a mapping")
            _apply_mapping(config, section)
            logger.debug("Loaded config file %s", path)

    env = os.environ if environ is None else environ
    if env.get(Constants.ENV_CACHE_DIR):
        config.cache_dir = Path(env[Constants.ENV_CACHE_DIR]).expanduser()
    if env.get(Constants.ENV_REPOSITORIES):
        config.repositories = [r.strip() for r in env[Constants.ENV_REPOSITORIES].split(",") if r.strip()]
    return config


def apply_cli_overrides(config: ResolverConfig, args: Any) -> ResolverConfig:
    """Apply parsed CLI arguments on top of ``config``; returns the same object."""
    if getattr(args, "CACHE_DIR", None):
        config.cache_dir = Path(args.CACHE_DIR).expanduser()
    if getattr(args, "REPOSITORIES", None):
        config.repositories = list(args.REPOSITORIES)
    if getattr(args, "INCLUDE_TEST", False):
        config.resolve_test = True
    if getattr(args, "INCLUDE_PROVIDED", False):
        config.resolve_provided = True
    if getattr(args, "SCOPE", None):
        config.scope = parse_scope(args.SCOPE)
    if getattr(args, "BLACKLIST", None):
        config.blacklist = config.blacklist + list(args.BLACKLIST)
    return config


def make_repository(location: str, timeout: int = Constants.REQUEST_TIMEOUT) -> MavenRepository:
    """http(s) URLs become remote repositories, anything else a local directory."""
    if location.startswith(("http://", "https://")):
        return HttpMavenRepository(location, timeout=timeout)
    return LocalMavenRepository(location)


def build_resolver(config: ResolverConfig) -> MavenResolver:
    return MavenResolver(
        config.cache_dir,
        repositories=[make_repository(r, config.request_timeout) for r in config.repositories],
        default_scope=config.scope,
        resolve_test_dependencies=config.resolve_test,
        resolve_provided_dependencies=config.resolve_provided,
        blacklist=[parse_versionless(b) for b in config.blacklist],
        max_depth=config.max_depth,
    )
