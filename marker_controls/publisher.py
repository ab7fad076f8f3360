"""
Transform publishing channel.

TransformPublisher is the interface the controller and broadcaster publish
through: fire-and-forget, no acknowledgment. TransformBuffer is the
in-process implementation, keeping the latest record per child frame for
inspection.
"""

import threading
import logging
from typing import Dict, Optional, Protocol

from marker_controls.core.transforms import TransformRecord

logger = logging.getLogger(__name__)


class TransformPublisher(Protocol):
    """Anything that accepts transform records."""

    def send_transform(self, record: TransformRecord) -> None:
        ...


class TransformBuffer:
    """
    In-process transform channel.

    Thread-safe: the broadcaster timer thread and command threads may publish
    concurrently.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._latest: Dict[str, TransformRecord] = {}
        self._sent_count: int = 0

    @property
    def sent_count(self) -> int:
        """Total records published through this buffer."""
        with self._lock:
            return self._sent_count

    def send_transform(self, record: TransformRecord) -> None:
        """Publish a record to downstream consumers."""
        with self._lock:
            self._latest[record.child_frame_id] = record
            self._sent_count += 1

    def lookup(self, child_frame_id: str) -> Optional[TransformRecord]:
        """Latest record published for a child frame."""
        with self._lock:
            return self._latest.get(child_frame_id)

    def frames(self) -> Dict[str, str]:
        """Known frames as {child: parent}."""
        with self._lock:
            return {child: rec.parent_frame_id for child, rec in self._latest.items()}
