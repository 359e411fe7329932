"""
=============================================================================
FILE HANDLERS
=============================================================================

Serve and store files in one configured base directory.

    GET  /files/{file}   → 200 + file bytes (application/octet-stream)
                           404 if missing, not a regular file, or unreadable
    POST /files/{file}   → body written to the file (created or truncated)
                           201 on success, 404 if it cannot be opened

The directory comes from ServerConfig and is bound when the routes are
registered, not looked up per request.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

{file} is a single path segment, so it can't contain "/". It CAN be
"..", which would point at the parent of the base directory. Every name
is resolved and checked to still be inside the base directory:

    /files/notes.txt  → <base>/notes.txt       ✓
    /files/..         → <parent of base>       ✗ 404, logged

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, created, not_found, octet_stream


logger = logging.getLogger(__name__)


class FileStore:
    """
    GET/POST handlers bound to one base directory.

    Usage:
        files = FileStore("/tmp/data")
        router.get("/files/{file}")(files.download)
        router.post("/files/{file}")(files.upload)

    With directory=None both handlers answer 404.
    """

    PARAM = "file"

    def __init__(self, directory: Optional[Union[str, Path]]):
        self.root = Path(directory).resolve() if directory is not None else None

    def _resolve(self, request: HTTPRequest) -> Optional[Path]:
        """Map the {file} parameter to a path inside root, or None."""
        if self.root is None:
            return None

        name = request.params.get(self.PARAM, "")
        path = (self.root / name).resolve()
        try:
            path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name!r}")
            return None
        if path == self.root:
            return None
        return path

    def download(self, request: HTTPRequest) -> HTTPResponse:
        path = self._resolve(request)
        if path is None or not path.is_file():
            return not_found()

        try:
            content = path.read_bytes()
        except OSError as e:
            logger.warning(f"Cannot read {path}: {e}")
            return not_found()
        return octet_stream(content)

    def upload(self, request: HTTPRequest) -> HTTPResponse:
        path = self._resolve(request)
        if path is None:
            return not_found()

        try:
            path.write_bytes(request.body or b"")
        except OSError as e:
            logger.warning(f"Cannot write {path}: {e}")
            return not_found()

        logger.debug(f"Stored {len(request.body or b'')} bytes in {path}")
        return created()
