"""
Configuration for the marker controls server.

Loaded from YAML; every key is optional and falls back to the defaults below.

Example:
    server:
      socket_host: 0.0.0.0
      socket_port: 9998
    grid:
      rows: 5
      cols: 5
      spacing: 2.0
    markers:
      frame_id: base_link
      scale: 1.0
    broadcaster:
      base_frame: base_link
      period_ms: 10
      enabled: true
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from marker_controls.core.marker import DEFAULT_FRAME_ID, DEFAULT_MARKER_SCALE

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_SOCKET_PORT = 9998
DEFAULT_SOCKET_HOST = "0.0.0.0"
DEFAULT_GRID_ROWS = 5
DEFAULT_GRID_COLS = 5
DEFAULT_GRID_SPACING = 2.0
DEFAULT_TICK_PERIOD_MS = 10


@dataclass
class ServerSettings:
    socket_host: str = DEFAULT_SOCKET_HOST
    socket_port: int = DEFAULT_SOCKET_PORT


@dataclass
class GridSettings:
    """Grid spawned by create_grid when no parameters are given."""
    rows: int = DEFAULT_GRID_ROWS
    cols: int = DEFAULT_GRID_COLS
    spacing: float = DEFAULT_GRID_SPACING


@dataclass
class MarkerSettings:
    frame_id: str = DEFAULT_FRAME_ID
    scale: float = DEFAULT_MARKER_SCALE


@dataclass
class BroadcasterSettings:
    base_frame: str = DEFAULT_FRAME_ID
    period_ms: int = DEFAULT_TICK_PERIOD_MS
    enabled: bool = True

    @property
    def period(self) -> float:
        """Tick period in seconds."""
        return self.period_ms / 1000.0


@dataclass
class ControllerConfig:
    """Complete server configuration."""
    server: ServerSettings = field(default_factory=ServerSettings)
    grid: GridSettings = field(default_factory=GridSettings)
    markers: MarkerSettings = field(default_factory=MarkerSettings)
    broadcaster: BroadcasterSettings = field(default_factory=BroadcasterSettings)

    def validate(self) -> None:
        """
        Raises:
            ValueError: On out-of-range values
        """
        if not (1 <= self.server.socket_port <= 65535):
            raise ValueError(f"Invalid port {self.server.socket_port}: must be between 1 and 65535")
        if self.grid.rows < 0 or self.grid.cols < 0:
            raise ValueError("Grid rows and cols must be non-negative")
        if self.markers.scale <= 0:
            raise ValueError(f"Marker scale must be positive, got {self.markers.scale}")
        if self.broadcaster.period_ms <= 0:
            raise ValueError(f"Broadcast period must be positive, got {self.broadcaster.period_ms} ms")
        if not self.markers.frame_id or not self.broadcaster.base_frame:
            raise ValueError("Frame ids must not be empty")

    def to_dict(self) -> dict:
        return {
            'server': {
                'socket_host': self.server.socket_host,
                'socket_port': self.server.socket_port,
            },
            'grid': {
                'rows': self.grid.rows,
                'cols': self.grid.cols,
                'spacing': self.grid.spacing,
            },
            'markers': {
                'frame_id': self.markers.frame_id,
                'scale': self.markers.scale,
            },
            'broadcaster': {
                'base_frame': self.broadcaster.base_frame,
                'period_ms': self.broadcaster.period_ms,
                'enabled': self.broadcaster.enabled,
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ControllerConfig":
        data = data or {}
        server = data.get('server') or {}
        grid = data.get('grid') or {}
        markers = data.get('markers') or {}
        broadcaster = data.get('broadcaster') or {}

        config = cls(
            server=ServerSettings(
                socket_host=server.get('socket_host', DEFAULT_SOCKET_HOST),
                socket_port=int(server.get('socket_port', DEFAULT_SOCKET_PORT)),
            ),
            grid=GridSettings(
                rows=int(grid.get('rows', DEFAULT_GRID_ROWS)),
                cols=int(grid.get('cols', DEFAULT_GRID_COLS)),
                spacing=float(grid.get('spacing', DEFAULT_GRID_SPACING)),
            ),
            markers=MarkerSettings(
                frame_id=markers.get('frame_id', DEFAULT_FRAME_ID),
                scale=float(markers.get('scale', DEFAULT_MARKER_SCALE)),
            ),
            broadcaster=BroadcasterSettings(
                base_frame=broadcaster.get('base_frame', DEFAULT_FRAME_ID),
                period_ms=int(broadcaster.get('period_ms', DEFAULT_TICK_PERIOD_MS)),
                enabled=bool(broadcaster.get('enabled', True)),
            ),
        )
        config.validate()
        return config

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ControllerConfig":
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the content is invalid
        """
        config_file = Path(path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(config_file, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}")

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        config = cls.from_dict(data)
        logger.info(f"Config loaded from {path}")
        return config

    def dump(self, path: Union[str, Path]) -> None:
        """Write configuration to a YAML file."""
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
