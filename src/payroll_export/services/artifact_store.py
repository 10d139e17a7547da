"""Write-once storage for export artifacts with signed download URLs."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
import time
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)


class ArtifactWriteError(Exception):
    """Raised when an artifact cannot be persisted."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write artifact '{path}': {reason}")


class ArtifactNotFoundError(Exception):
    """Raised when a stored artifact does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Artifact '{path}' not found")


class InvalidSignatureError(Exception):
    """Raised when a signed URL is tampered with or expired."""

    def __init__(self, path: str, reason: str = "invalid signature"):
        self.path = path
        self.reason = reason
        super().__init__(f"Rejected download of '{path}': {reason}")


class ArtifactStore(Protocol):
    """Blob store for export files."""

    async def write_artifact(self, path: str, data: bytes) -> str:
        """Persist ``data`` at ``path`` exactly once and return the stored path."""
        ...

    async def read_artifact(self, path: str) -> bytes:
        ...

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        ...

    def verify_signature(self, path: str, expires: int, signature: str) -> None:
        ...


class LocalArtifactStore:
    """Artifact store on the local filesystem.

    Files are created with exclusive mode, so an artifact can never be
    overwritten once written. Download URLs carry an HMAC-SHA256 signature
    over the path and expiry timestamp.
    """

    def __init__(self, root: Path | str, base_url: str, signing_secret: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self._secret = signing_secret.encode()

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Artifact path must be relative and normalised: {path!r}")
        return self.root.joinpath(*relative.parts)

    async def write_artifact(self, path: str, data: bytes) -> str:
        """Persist ``data`` at ``path``; fails if the path already exists."""
        target = self._resolve(path)
        try:
            await asyncio.to_thread(self._write_exclusive, target, data)
        except FileExistsError:
            raise ArtifactWriteError(path, "artifact already exists") from None
        except OSError as exc:
            raise ArtifactWriteError(path, str(exc)) from exc
        logger.info("Wrote artifact %s (%d bytes)", path, len(data))
        return path

    @staticmethod
    def _write_exclusive(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "xb") as fh:
            fh.write(data)

    async def read_artifact(self, path: str) -> bytes:
        """Read a stored artifact."""
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError:
            raise ArtifactNotFoundError(path) from None

    def signed_url(self, path: str, ttl_seconds: int, now: float | None = None) -> str:
        """Build a download URL valid for ``ttl_seconds``."""
        expires = int((now if now is not None else time.time()) + ttl_seconds)
        query = urlencode({"expires": expires, "signature": self._sign(path, expires)})
        return f"{self.base_url}/{quote(path)}?{query}"

    def verify_signature(
        self,
        path: str,
        expires: int,
        signature: str,
        now: float | None = None,
    ) -> None:
        """Raise InvalidSignatureError unless the signature is valid and unexpired."""
        if not hmac.compare_digest(self._sign(path, expires), signature):
            raise InvalidSignatureError(path)
        if (now if now is not None else time.time()) > expires:
            raise InvalidSignatureError(path, "link expired")

    def _sign(self, path: str, expires: int) -> str:
        message = f"{path}:{expires}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()
