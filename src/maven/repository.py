"""Repositories the resolver can fetch raw artifact files from."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from constants import Constants
from maven.errors import TransportError
from maven.models import ResolvedFile

logger = logging.getLogger(__name__)


class MavenRepository(ABC):
    """Read-only provider of repository files."""

    @abstractmethod
    def resolve(self, folder: str, file: str) -> Optional[ResolvedFile]:
        """Fetch ``folder + file``.

        Returns None when the file does not exist in this repository. Transport
        failures raise TransportError.
        """


class LocalMavenRepository(MavenRepository):
    """A repository laid out on disk, such as ~/.m2/repository or a mirror.

    Resolved files carry their path inside the repository so the cache can
    symlink to them instead of copying.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser()

    def resolve(self, folder: str, file: str) -> Optional[ResolvedFile]:
        path = self.root / folder / file
        if not path.is_file():
            return None
        return ResolvedFile(cache_path=path.resolve())

    def __repr__(self) -> str:
        return f"LocalMavenRepository({str(self.root)!r})"


class HttpMavenRepository(MavenRepository):
    """A remote repository reached over HTTP(S)."""

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: int = Constants.REQUEST_TIMEOUT,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.headers = dict(headers or {})
        self.timeout = timeout

    def resolve(self, folder: str, file: str) -> Optional[ResolvedFile]:
        url = self.base_url + folder + file
        res = http_client.safe_get(
            url, context="maven", headers=self.headers, timeout=self.timeout
        )
        if 200 <= res.status_code < 300:
            return ResolvedFile(data=res.content)
        if res.status_code == 404:
            if is_debug_enabled(logger):
                logger.debug(
                    "Not found in repository",
                    extra=extra_context(
                        event="http_response",
                        component="repository",
                        action="resolve",
                        outcome="not_found",
                        target=safe_url(url),
                    )
                )
            return None
        logger.warning(
            "HTTP non-2xx from repository",
            extra=extra_context(
                event="http_response",
                component="repository",
                action="resolve",
                outcome="unexpected_status",
                status_code=res.status_code,
                target=safe_url(url),
            )
        )
        raise TransportError(
            f"Unexpected HTTP {res.status_code} fetching {safe_url(url)}",
            url=safe_url(url),
            status_code=res.status_code,
        )

    def __repr__(self) -> str:
        return f"HttpMavenRepository({safe_url(self.base_url)!r})"
