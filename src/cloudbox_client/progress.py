"""
Byte-level progress for a single in-flight upload.

`ProgressBody` is handed to `requests` as the request body. Because it is
iterable and has a length, `requests` sends it with a fixed Content-Length,
pulling one chunk at a time, and each chunk is reported to the tracker.
"""

import logging
from typing import Callable, Iterator, List, Optional

logger = logging.getLogger(__name__)

ProgressListener = Callable[[int], None]


class UploadProgressTracker:
    """Percentage (0-100) of one upload, or None before the first byte is sent."""

    def __init__(self, filename: str = ""):
        self.filename = filename
        self.percent: Optional[int] = None
        self.bytes_sent = 0
        self.total_bytes = 0
        self.abandoned = False
        self.finished = False
        self._listeners: List[ProgressListener] = []

    @property
    def active(self) -> bool:
        return not (self.abandoned or self.finished)

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def update(self, bytes_sent: int, total_bytes: int) -> None:
        if not self.active:
            return
        self.bytes_sent = bytes_sent
        self.total_bytes = total_bytes
        percent = 100 if total_bytes <= 0 else min(100, round(bytes_sent * 100 / total_bytes))
        if percent == self.percent:
            return
        self.percent = percent
        for listener in self._listeners:
            listener(percent)

    def abandon(self) -> None:
        """Stop reporting. The request itself is not cancelled server-side."""
        if self.active:
            logger.info(f"Upload of '{self.filename}' abandoned at {self.percent or 0}%")
        self.abandoned = True
        self._listeners.clear()

    def finish(self) -> None:
        self.finished = True
        self._listeners.clear()


class ProgressBody:
    """Chunked, length-aware request body that reports to a tracker."""

    def __init__(self, payload: bytes, tracker: Optional[UploadProgressTracker] = None, chunk_size: int = 64 * 1024):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.payload = payload
        self.tracker = tracker
        self.chunk_size = chunk_size

    def __len__(self) -> int:
        return len(self.payload)

    def __iter__(self) -> Iterator[bytes]:
        total = len(self.payload)
        if self.tracker is not None:
            self.tracker.update(0, total)
        for offset in range(0, total, self.chunk_size):
            chunk = self.payload[offset:offset + self.chunk_size]
            yield chunk
            if self.tracker is not None:
                self.tracker.update(offset + len(chunk), total)
