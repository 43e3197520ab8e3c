"""Receipt file storage.

Receipt bytes are never interpreted here: files are written under a base
directory with a generated name and handed back as a readable stream.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

import structlog
from werkzeug.utils import secure_filename

logger = structlog.get_logger(__name__)


class ReceiptStorage(Protocol):
    def save(self, stream: BinaryIO, filename: str) -> str:
        """Store the bytes and return an opaque reference."""

        raise NotImplementedError

    def open(self, ref: str) -> Optional[BinaryIO]:
        raise NotImplementedError

    def delete(self, ref: str) -> None:
        raise NotImplementedError


class LocalReceiptStorage(ReceiptStorage):
    """Local filesystem storage (development and single-host deployments)."""

    def __init__(self, base_dir: str | Path = "var/uploads"):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, ref: str) -> Optional[Path]:
        # References are flat generated names; anything else is rejected.
        if not ref or secure_filename(ref) != ref:
            return None
        return self.base_dir / ref

    def save(self, stream: BinaryIO, filename: str) -> str:
        _, ext = os.path.splitext(secure_filename(filename or ""))
        ref = f"receipt-{uuid.uuid4().hex}{ext.lower()}"
        path = self.base_dir / ref
        with open(path, "wb") as f:
            while True:
                chunk = stream.read(64 * 1024)
                if not chunk:
                    break
                f.write(chunk)
        logger.info("receipt_saved", ref=ref, size=path.stat().st_size)
        return ref

    def open(self, ref: str) -> Optional[BinaryIO]:
        path = self._get_path(ref)
        if path is None or not path.is_file():
            return None
        return open(path, "rb")

    def delete(self, ref: str) -> None:
        path = self._get_path(ref)
        if path is not None and path.is_file():
            path.unlink()
            logger.info("receipt_deleted", ref=ref)
