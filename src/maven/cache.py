"""On-disk cache in front of an ordered list of repositories.

Layout mirrors a Maven repository: ``<cache_root>/<folder>/<file>``. A file
that no repository could provide is remembered with an empty sibling marker
``<file>.nolookup`` so later runs do not ask the network again.

There is no locking: two resolvers sharing a cache directory can race when
creating the same entry, in which case one of them fails with CacheWriteError.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from maven.errors import CacheWriteError
from maven.models import ResolvedFile
from maven.repository import MavenRepository

logger = logging.getLogger(__name__)


class FileCache:
    """Resolve repository files through a persistent cache directory."""

    def __init__(self, cache_root: Union[str, Path], repositories: Iterable[MavenRepository] = ()):
        self.cache_root = Path(cache_root).expanduser()
        self.repositories: List[MavenRepository] = list(repositories)

    def add_repository(self, repository: MavenRepository) -> None:
        self.repositories.append(repository)

    def add_repositories(self, repositories: Iterable[MavenRepository]) -> None:
        self.repositories.extend(repositories)

    def cached_path(self, folder: str, file: str) -> Optional[Path]:
        """Return the cached file path if present; never contacts a repository."""
        path = self.cache_root / folder / file
        return path if path.exists() else None

    def resolve_file_contents(self, folder: str, file: str) -> Optional[ResolvedFile]:
        """Return the file from the cache or the first repository that has it.

        Returns None when every repository reported the file as absent, now or
        in an earlier run.
        """
        cache_dir = self.cache_root / folder
        cache_file = cache_dir / file
        nolookup_file = cache_dir / (file + Constants.NOLOOKUP_SUFFIX)
        if cache_dir.exists():
            if cache_file.exists():
                return ResolvedFile(cache_path=cache_file)
            if nolookup_file.exists():
                if is_debug_enabled(logger):
                    logger.debug(
                        "Negative cache hit",
                        extra=extra_context(
                            event="cache_hit", component="cache", action="resolve",
                            outcome="nolookup", target=folder + file,
                        )
                    )
                return None
            if cache_file.is_symlink():
                # exists() follows links, so this is a link whose target is gone
                logger.info("Deleting outdated symlink: %s", cache_file.absolute())
                try:
                    cache_file.unlink()
                except OSError as exc:
                    raise CacheWriteError(f"Unable to remove stale symlink {cache_file}") from exc

        for repository in self.repositories:
            resolved = repository.resolve(folder, file)
            if resolved is None:
                continue
            self._persist(cache_file, resolved)
            if is_debug_enabled(logger):
                logger.debug(
                    "Fetched into cache",
                    extra=extra_context(
                        event="cache_store", component="cache", action="resolve",
                        outcome="stored", target=folder + file, repository=repr(repository),
                    )
                )
            return resolved

        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            nolookup_file.touch()
        except OSError as exc:
            raise CacheWriteError(f"Unable to write negative marker {nolookup_file}") from exc
        return None

    def _persist(self, cache_file: Path, resolved: ResolvedFile) -> None:
        """Link or copy ``resolved`` to ``cache_file``."""
        symlink_error: Optional[OSError] = None
        if resolved.cache_path is not None:
            try:
                cache_file.parent.mkdir(parents=True, exist_ok=True)
                cache_file.symlink_to(resolved.cache_path)
                return
            except OSError as exc:
                symlink_error = exc
                logger.debug("Cannot symlink %s, copying instead: %s", cache_file, exc)
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(cache_file, "xb") as fh:
                fh.write(resolved.data)
        except OSError as exc:
            message = f"Unable to write to cache: {cache_file}"
            if symlink_error is not None:
                message += f" (symlink also failed: {symlink_error})"
            raise CacheWriteError(message) from exc
        resolved.cache_path = cache_file
