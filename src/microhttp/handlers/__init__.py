"""
=============================================================================
REQUEST HANDLERS
=============================================================================

The application routes served by this server.

    GET  /                → index        200, empty
    GET  /echo/{echo}     → echo         the parameter as text/plain
    GET  /user-agent      → user_agent   the User-Agent header as text/plain
    GET  /files/{file}    → FileStore.download
    POST /files/{file}    → FileStore.upload

Every handler follows the same contract: take an HTTPRequest, return an
HTTPResponse, raise on failure. Handlers set their own Content-Type and
Content-Length; gzip is applied by the connection handler afterwards.

=============================================================================
"""

from pathlib import Path
from typing import Optional, Union

from ..http.router import Router
from .basic import echo, index, user_agent
from .files import FileStore


def register_routes(router: Router, directory: Optional[Union[str, Path]] = None) -> Router:
    """Register the five standard routes on `router`."""
    files = FileStore(directory)

    router.get("/")(index)
    router.get("/echo/{echo}")(echo)
    router.get("/user-agent")(user_agent)
    router.get("/files/{file}")(files.download)
    router.post("/files/{file}")(files.upload)
    return router


__all__ = [
    "index",
    "echo",
    "user_agent",
    "FileStore",
    "register_routes",
]
