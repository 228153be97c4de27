"""Transient handles to in-memory blobs."""

import uuid
from typing import Dict, Iterable

from heic_converter.core.constants import RESOURCE_URL_ORIGIN, RESOURCE_URL_SCHEME
from heic_converter.core.exceptions import ResourceHandleError
from heic_converter.models.conversion import ResourceHandle
from heic_converter.utils.logging import get_logger

logger = get_logger(__name__)


class ResourceHandleManager:
    """Creates, resolves and revokes process-local blob handles.

    Every handle returned by ``create`` must be passed to ``revoke`` exactly
    once. Revoking an unknown or already revoked handle raises
    ``ResourceHandleError`` instead of being silently ignored, so accounting
    bugs surface in tests.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self.created_count = 0
        self.revoked_count = 0

    def create(self, blob: bytes, media_type: str = "") -> ResourceHandle:
        """Register a blob and return a handle to it."""
        url = f"{RESOURCE_URL_SCHEME}:{RESOURCE_URL_ORIGIN}/{uuid.uuid4()}"
        self._blobs[url] = blob
        self.created_count += 1
        logger.debug("Resource handle created", url=url, size=len(blob))
        return ResourceHandle(url=url, media_type=media_type, size=len(blob))

    def revoke(self, handle: ResourceHandle) -> None:
        """Release the blob behind a handle."""
        if self._blobs.pop(handle.url, None) is None:
            raise ResourceHandleError(
                "Resource handle is not live",
                details={"url": handle.url, "reason": "unknown or already revoked"},
            )
        self.revoked_count += 1
        logger.debug("Resource handle revoked", url=handle.url)

    def revoke_many(self, handles: Iterable[ResourceHandle]) -> int:
        """Revoke each handle once; returns the number revoked."""
        count = 0
        for handle in handles:
            self.revoke(handle)
            count += 1
        return count

    def revoke_all(self) -> int:
        """Revoke every outstanding handle (process teardown)."""
        urls = list(self._blobs)
        self._blobs.clear()
        self.revoked_count += len(urls)
        if urls:
            logger.info("Revoked outstanding resource handles", count=len(urls))
        return len(urls)

    def resolve(self, handle: ResourceHandle) -> bytes:
        """Return the blob a live handle refers to."""
        try:
            return self._blobs[handle.url]
        except KeyError:
            raise ResourceHandleError(
                "Resource handle is not live",
                details={"url": handle.url, "reason": "unknown or already revoked"},
            ) from None

    def is_live(self, handle: ResourceHandle) -> bool:
        return handle.url in self._blobs

    @property
    def outstanding(self) -> int:
        """Number of handles created but not yet revoked."""
        return len(self._blobs)
