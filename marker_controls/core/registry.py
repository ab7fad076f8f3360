"""
Marker registry.

Holds named marker descriptions with a two-phase update protocol: insert and
erase are staged, and commit() applies the staged batch atomically. Lookups
and listings only ever see committed state.
"""

import threading
import logging
from typing import Callable, Dict, List, Optional

from marker_controls.core.marker import MarkerSpec

logger = logging.getLogger(__name__)

# (updated names, erased names)
CommitCallback = Callable[[List[str], List[str]], None]


class MarkerRegistry:
    """
    Server-side store of interactive markers.

    Architecture:
        MarkerRegistry
        ├── committed: Dict[name, MarkerSpec]   (visible to observers)
        └── pending:   Dict[name, MarkerSpec | None]   (None = staged erase)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._markers: Dict[str, MarkerSpec] = {}
        self._pending: Dict[str, Optional[MarkerSpec]] = {}
        self._revision: int = 0
        self._subscribers: List[CommitCallback] = []

    @property
    def revision(self) -> int:
        """Number of commits that changed something."""
        with self._lock:
            return self._revision

    @property
    def pending_count(self) -> int:
        """Number of staged, uncommitted operations."""
        with self._lock:
            return len(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._markers)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._markers

    # --- Staged mutations ---

    def insert(self, marker: MarkerSpec) -> None:
        """Stage insertion of a marker. Replaces any marker with the same name."""
        with self._lock:
            # Re-staging moves the name to the end so commit order follows call order
            self._pending.pop(marker.name, None)
            self._pending[marker.name] = marker

    def erase(self, name: str) -> bool:
        """
        Stage removal of a marker.

        Returns:
            True if the marker is committed or staged for insertion,
            False if not found (nothing staged)
        """
        with self._lock:
            staged = self._pending.get(name)
            if name not in self._markers and staged is None:
                return False
            self._pending.pop(name, None)
            self._pending[name] = None
            return True

    def clear(self) -> None:
        """Stage removal of every committed marker and drop staged inserts."""
        with self._lock:
            self._pending = {name: None for name in self._markers}

    def commit(self) -> int:
        """
        Apply all staged operations atomically and notify subscribers.

        Returns:
            Registry revision after the commit
        """
        with self._lock:
            if not self._pending:
                return self._revision

            updated: List[str] = []
            erased: List[str] = []
            for name, marker in self._pending.items():
                if marker is None:
                    if self._markers.pop(name, None) is not None:
                        erased.append(name)
                else:
                    self._markers[name] = marker
                    updated.append(name)

            self._pending.clear()
            self._revision += 1
            revision = self._revision
            subscribers = list(self._subscribers)

        logger.debug(f"Commit r{revision}: {len(updated)} updated, {len(erased)} erased")
        for callback in subscribers:
            callback(updated, erased)
        return revision

    # --- Committed view ---

    def get(self, name: str) -> Optional[MarkerSpec]:
        """Get a committed marker by name."""
        with self._lock:
            return self._markers.get(name)

    def list_markers(self) -> List[str]:
        """List committed marker names."""
        with self._lock:
            return list(self._markers.keys())

    def get_markers_snapshot(self) -> Dict[str, MarkerSpec]:
        """Shallow copy of committed markers for safe iteration."""
        with self._lock:
            return dict(self._markers)

    def to_dict(self) -> dict:
        """Committed markers as a serializable dictionary."""
        with self._lock:
            return {
                'revision': self._revision,
                'markers': {name: m.to_dict() for name, m in self._markers.items()},
            }

    # --- Observers ---

    def subscribe(self, callback: CommitCallback) -> None:
        """Call callback(updated_names, erased_names) after each effective commit."""
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: CommitCallback) -> bool:
        """Remove a subscriber. Returns False if it was not subscribed."""
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
                return True
            return False
