#!/usr/bin/env python3
"""
Client for the marker controls server.

Provides a simple Python API for the operator actions: spawning the marker
grid, publishing frames, and forwarding marker clicks.
"""

import json
import socket
import logging
from typing import Dict, Any, Optional, Sequence

from marker_controls.config import DEFAULT_SOCKET_PORT

logger = logging.getLogger(__name__)


class MarkerClient:
    """
    Socket client for the marker controls server.

    Usage:
        client = MarkerClient("localhost")
        client.connect()
        client.create_grid()
        client.disconnect()

        # Context manager
        with MarkerClient("localhost") as client:
            client.publish_frame("tool", "base_link")
    """

    def __init__(self, host: str, port: int = DEFAULT_SOCKET_PORT, timeout: float = 5.0):
        """
        Args:
            host: Server address
            port: Server port
            timeout: Socket timeout in seconds
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket: Optional[socket.socket] = None
        self._connected = False
        self._recv_buffer = ""

    def connect(self) -> bool:
        """
        Connect to the server.

        Returns:
            True if connection successful
        """
        self._close_socket()

        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            self._connected = True
            self._recv_buffer = ""
            logger.info(f"Connected to marker controls server at {self.host}:{self.port}")
            return True
        except OSError as e:
            logger.error(f"Failed to connect to marker controls server: {e}")
            self._close_socket()
            return False

    def _close_socket(self):
        """Close socket and reset state."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None
        self._connected = False
        self._recv_buffer = ""

    def disconnect(self):
        """Disconnect from the server."""
        self._close_socket()
        logger.info("Disconnected from marker controls server")

    @property
    def is_connected(self) -> bool:
        return self._connected

    def __enter__(self) -> "MarkerClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    def _send_command(self, cmd: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Send command to the server and get response.

        Returns:
            Response dictionary or None on error
        """
        if not self._connected:
            logger.warning("Not connected to marker controls server")
            return None

        try:
            self.socket.sendall((json.dumps(cmd) + '\n').encode('utf-8'))

            # Buffer until a full response line arrives
            while "\n" not in self._recv_buffer:
                data = self.socket.recv(4096)
                if not data:
                    raise ConnectionError("Server closed connection")
                self._recv_buffer += data.decode('utf-8')

            line, self._recv_buffer = self._recv_buffer.split("\n", 1)
            return json.loads(line.strip())

        except (OSError, ValueError) as e:
            logger.error(f"Command failed: {e}")
            self._close_socket()
            return None

    # --- Marker Commands ---

    def create_grid(self, rows: int = None, cols: int = None,
                    spacing: float = None) -> Optional[Dict]:
        """Spawn the marker grid. Omitted parameters use the server config."""
        cmd = {"action": "create_grid"}
        if rows is not None:
            cmd["rows"] = rows
        if cols is not None:
            cmd["cols"] = cols
        if spacing is not None:
            cmd["spacing"] = spacing
        return self._send_command(cmd)

    def click_marker(self, marker_name: str, position: Sequence[float],
                     orientation: Sequence[float] = None) -> Optional[Dict]:
        """Forward a button click on a marker at the reported pose."""
        cmd = {
            "action": "marker_feedback",
            "marker_name": marker_name,
            "event_type": "button_click",
            "position": list(position),
        }
        if orientation is not None:
            cmd["orientation"] = list(orientation)
        return self._send_command(cmd)

    def get_marker(self, name: str) -> Optional[Dict]:
        return self._send_command({"action": "get_marker", "name": name})

    def list_markers(self) -> Optional[Dict]:
        return self._send_command({"action": "list_markers"})

    # --- Frame Commands ---

    def publish_frame(self, frame_id: str, parent_frame_id: str) -> Optional[Dict]:
        """
        Publish an identity transform between two frames.

        Empty names are rejected locally without contacting the server.
        """
        if not frame_id or not parent_frame_id:
            logger.warning("Frame names are empty.")
            return {
                "status": "error",
                "message": "Frame name and parent frame name must both be non-empty",
                "code": "INVALID_INPUT",
            }
        return self._send_command({
            "action": "publish_frame",
            "frame_id": frame_id,
            "parent_frame_id": parent_frame_id,
        })

    def get_transform(self, child_frame_id: str) -> Optional[Dict]:
        return self._send_command({"action": "get_transform", "child_frame_id": child_frame_id})

    def status(self) -> Optional[Dict]:
        return self._send_command({"action": "status"})
