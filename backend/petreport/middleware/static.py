"""
PetReport Backend — Public Static Read Path
=============================================

What:  Serves files from the public directory before any business route.
How:   For GET/HEAD, the request path is looked up under `public_dir` with
       Starlette's StaticFiles. A regular file is streamed back immediately;
       anything else (missing file, directory, other methods) falls through
       to the rest of the chain.
When:  Inside the parsing stage, before client identification, so public
       assets never count against the per-IP rate limit.

Unrepresentable paths:
    A path segment over the filesystem name limit or a NUL byte makes the
    OS lookup raise. ReadOnlyStaticFiles treats such paths as missing, so
    they fall through here and get a 404 from the /uploads mount.
"""

import logging
import os
import stat
from typing import Optional, Tuple

import anyio
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

READ_METHODS = {"GET", "HEAD"}


class ReadOnlyStaticFiles(StaticFiles):
    """StaticFiles whose lookups report unrepresentable paths as not found."""

    def lookup_path(self, path: str) -> Tuple[str, Optional[os.stat_result]]:
        try:
            return super().lookup_path(path)
        except (OSError, ValueError) as e:
            logger.debug("Static lookup skipped for %r: %s", path[:64], e)
            return "", None


class PublicStaticMiddleware:
    """Serves `directory` at the site root without shadowing other routes."""

    def __init__(self, app: ASGIApp, directory: str):
        self.app = app
        self.static = ReadOnlyStaticFiles(directory=directory, check_dir=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in READ_METHODS:
            await self.app(scope, receive, send)
            return

        relative = scope["path"].lstrip("/")
        if relative:
            full_path, stat_result = await anyio.to_thread.run_sync(
                self.static.lookup_path, relative
            )
            if stat_result is not None and stat.S_ISREG(stat_result.st_mode):
                logger.debug("Serving public file %s", full_path)
                response = self.static.file_response(full_path, stat_result, scope)
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)
