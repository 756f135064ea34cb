"""Locally-scoped, revocable storage for downloadable chart bytes."""

import uuid

from graphify.core.errors import ArtifactRevokedError
from graphify.core.models import ArtifactHandle
from graphify.infra.logging import get_logger

logger = get_logger(__name__)


class ArtifactStore:
    """Holds artifact bytes behind revocable handles.

    A handle stays resolvable until it is revoked. Revoking releases the
    bytes, so a store whose owner revokes superseded handles stays bounded
    across repeated generations.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    @property
    def live_count(self) -> int:
        """Number of handles that still resolve."""
        return len(self._blobs)

    def create(self, content: bytes, extension: str, media_type: str = "application/octet-stream") -> ArtifactHandle:
        """Store bytes and issue a new handle for them."""
        handle = ArtifactHandle(
            handle_id=f"artifact:{uuid.uuid4().hex}",
            extension=extension,
            media_type=media_type,
            size=len(content),
        )
        self._blobs[handle.handle_id] = content
        logger.debug("Artifact created", handle_id=handle.handle_id, size=handle.size, media_type=media_type)
        return handle

    def is_live(self, handle: ArtifactHandle) -> bool:
        """Whether the handle still resolves."""
        return handle.handle_id in self._blobs

    def read(self, handle: ArtifactHandle) -> bytes:
        """Resolve a handle to its bytes.

        Raises:
            ArtifactRevokedError: If the handle was revoked or never issued here
        """
        try:
            return self._blobs[handle.handle_id]
        except KeyError:
            raise ArtifactRevokedError(handle.handle_id) from None

    def revoke(self, handle: ArtifactHandle) -> bool:
        """Release a handle's bytes. Returns False if it was not live."""
        released = self._blobs.pop(handle.handle_id, None) is not None
        if released:
            logger.debug("Artifact revoked", handle_id=handle.handle_id)
        return released

    def revoke_all(self) -> int:
        """Release every live handle and return how many were released."""
        count = len(self._blobs)
        self._blobs.clear()
        if count:
            logger.debug("All artifacts revoked", count=count)
        return count
