from __future__ import annotations

import os
import secrets
import time
from pathlib import Path
from typing import IO, Protocol

from werkzeug.utils import secure_filename

from ..core.exceptions import UpstreamError
from .model import StoredFile


class UploadedFile(Protocol):
    """The subset of werkzeug's FileStorage the document workflow relies on."""

    filename: str | None
    mimetype: str
    stream: IO[bytes]


class FileStorage(Protocol):
    def save(self, upload: UploadedFile, *, size: int) -> StoredFile:
        raise NotImplementedError

    def delete(self, filename: str) -> None:
        raise NotImplementedError


def measure_size(upload: UploadedFile) -> int:
    stream = upload.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


class DiskFileStorage(FileStorage):
    """Stores uploads under a folder as ``<epoch-ms>-<random hex>-<secure original name>``."""

    def __init__(self, folder: str | Path):
        self._folder = Path(folder)

    def save(self, upload: UploadedFile, *, size: int) -> StoredFile:
        original = secure_filename(upload.filename or "") or "document"
        filename = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{original}"
        try:
            self._folder.mkdir(parents=True, exist_ok=True)
            with open(self._folder / filename, "xb") as fh:
                upload.stream.seek(0)
                while True:
                    chunk = upload.stream.read(64 * 1024)
                    if not chunk:
                        break
                    fh.write(chunk)
        except OSError as e:
            raise UpstreamError(f"Storing the uploaded file failed: {e}")

        return StoredFile(filename=filename, mimetype=upload.mimetype, size=int(size))

    def delete(self, filename: str) -> None:
        (self._folder / filename).unlink(missing_ok=True)
