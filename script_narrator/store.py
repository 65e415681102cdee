"""In-memory audio blobs held for the lifetime of a session."""

import logging
import uuid

logger = logging.getLogger(__name__)


class AudioStore:
    """Holds generated audio containers behind opaque `blob:` handles.

    Blobs stay alive until released; callers release a handle when the line
    that owned it is regenerated or dropped, and everything on close.
    """

    def __init__(self):
        self._blobs: dict[str, bytes] = {}

    def __contains__(self, ref: str) -> bool:
        return ref in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)

    def put(self, data: bytes) -> str:
        ref = f"blob:{uuid.uuid4().hex}"
        self._blobs[ref] = data
        return ref

    def get(self, ref: str) -> bytes:
        return self._blobs[ref]

    def release(self, ref: str | None) -> bool:
        """Drop a blob. Returns False if the handle was unknown."""
        if ref is None or ref not in self._blobs:
            return False
        del self._blobs[ref]
        logger.debug("Released %s", ref)
        return True

    def release_all(self) -> int:
        count = len(self._blobs)
        self._blobs.clear()
        return count
