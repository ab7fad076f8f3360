#!/usr/bin/env python3
"""
Marker Controls Server - interactive marker grid and frame broadcaster.

This server provides:
1. A registry of interactive markers with batched commits
2. A fixed-rate broadcaster for the moving and rotating frames
3. JSON/TCP command interface for operator actions
4. YAML configuration
"""

import sys
import time
import signal
import json
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
import argparse
from typing import Dict, Any, Optional

from marker_controls.broadcaster import FrameBroadcaster, WallTimer
from marker_controls.commands import get_registry
from marker_controls.config import ControllerConfig
from marker_controls.controller import MarkerController
from marker_controls.core.registry import MarkerRegistry
from marker_controls.publisher import TransformBuffer
from marker_controls.utils.logging import setup_logging, get_logger


class MarkerControlServer:
    """
    Process host for the marker controller.

    Architecture:
        Server (single instance)
        ├── MarkerRegistry
        ├── FrameBroadcaster ── TransformBuffer (created on first tick)
        │   └── WallTimer (fixed period)
        ├── MarkerController
        └── Socket command server
    """

    def __init__(self, config_path: Optional[str] = None,
                 config: Optional[ControllerConfig] = None,
                 verbose: bool = False):
        """
        Initialize the server.

        Args:
            config_path: Path to configuration YAML
            config: Pre-built configuration (takes precedence over config_path)
            verbose: Enable verbose logging
        """
        self.config_path = config_path
        self.config = config or ControllerConfig()
        self._config_given = config is not None
        self.verbose = verbose

        # Core components
        self.registry = MarkerRegistry()
        self.broadcaster = FrameBroadcaster(publisher_factory=TransformBuffer,
                                            base_frame=self.config.broadcaster.base_frame)
        self.controller = MarkerController(self.registry, self.broadcaster, self.config)
        self.timer: Optional[WallTimer] = None

        self._running = threading.Event()
        self._running.set()

        # Networking
        self.server_socket: Optional[socket.socket] = None
        self.socket_thread: Optional[threading.Thread] = None
        self._client_executor: Optional[ThreadPoolExecutor] = None

        self.logger = get_logger(__name__)
        self.registry.subscribe(self._on_markers_committed)

    def _on_markers_committed(self, updated, erased):
        """Log each effective registry commit."""
        self.logger.info(f"Markers committed (r{self.registry.revision}): "
                         f"{len(updated)} updated, {len(erased)} erased")

    @property
    def running(self) -> bool:
        """Check if server is running (thread-safe)."""
        return self._running.is_set()

    @running.setter
    def running(self, value: bool):
        """Set running state (thread-safe)."""
        if value:
            self._running.set()
        else:
            self._running.clear()

    def install_signal_handlers(self):
        """Route SIGTERM/SIGINT to a clean shutdown. Main thread only."""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals. Second signal forces immediate exit."""
        signal_names = {signal.SIGTERM: "SIGTERM", signal.SIGINT: "SIGINT (Ctrl+C)"}
        signal_name = signal_names.get(signum, f"signal {signum}")

        if not self._running.is_set():
            self.logger.info(f"Force exit: Received {signal_name} during shutdown")
            import os
            os._exit(1)

        self.logger.info(f"Shutdown initiated: Received {signal_name}")
        self._running.clear()

    def load_config(self) -> bool:
        """
        Load configuration from YAML file.

        Returns:
            True if successful
        """
        if self._config_given:
            return True
        if not self.config_path:
            self.logger.info("No config file specified, using defaults")
            return True

        try:
            self.config = ControllerConfig.load(self.config_path)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to load config: {e}")
            return False

        self.controller.config = self.config
        self.broadcaster.base_frame = self.config.broadcaster.base_frame
        self.logger.info(f"Config loaded: socket={self.config.server.socket_host}:"
                         f"{self.config.server.socket_port}, "
                         f"broadcast period={self.config.broadcaster.period_ms}ms")
        return True

    def start_broadcaster(self):
        """Start the periodic frame broadcaster if enabled."""
        if not self.config.broadcaster.enabled:
            self.logger.info("Frame broadcaster disabled by config")
            return
        self.timer = WallTimer(self.config.broadcaster.period, self.broadcaster.on_tick,
                               name="frame-broadcaster")
        self.timer.start()

    def start_socket_server(self):
        """Start the socket server in a separate thread."""
        self._client_executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="client")
        self.socket_thread = threading.Thread(target=self._socket_server_loop, daemon=True)
        self.socket_thread.start()
        self.logger.info(f"Socket server started on {self.config.server.socket_host}:"
                         f"{self.config.server.socket_port}")

    def _socket_server_loop(self):
        """Main socket server loop."""
        try:
            self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.server_socket.bind((self.config.server.socket_host, self.config.server.socket_port))
            self.server_socket.listen(5)
            self.server_socket.settimeout(1.0)

            while self.running:
                try:
                    client_socket, addr = self.server_socket.accept()
                    self.logger.info(f"Client connected from {addr}")
                    self._client_executor.submit(self._handle_client, client_socket, addr)
                except socket.timeout:
                    continue
                except OSError as e:
                    if self.running:
                        self.logger.error(f"Socket accept error: {e}")

        except OSError as e:
            self.logger.error(f"Socket server error: {e}")
        finally:
            if self.server_socket:
                self.server_socket.close()

    def _handle_client(self, client_socket: socket.socket, addr):
        """Handle individual client connections with message buffering."""
        # Raw bytes: a multibyte character may straddle two recv chunks
        buffer = b""
        try:
            client_socket.settimeout(5.0)
            while self.running:
                try:
                    data = client_socket.recv(4096)
                    if not data:
                        break

                    buffer += data

                    while b"\n" in buffer:
                        raw, buffer = buffer.split(b"\n", 1)
                        try:
                            line = raw.decode("utf-8").strip()
                        except UnicodeDecodeError as e:
                            self.logger.warning(f"Invalid UTF-8 from {addr}: {e}")
                            response = {"status": "error", "message": f"Invalid UTF-8: {e}"}
                        else:
                            if not line:
                                continue
                            response = self.handle_line(line)
                        client_socket.sendall((json.dumps(response) + "\n").encode("utf-8"))

                except socket.timeout:
                    continue
                except OSError as e:
                    if self.running:
                        self.logger.error(f"Client handling error: {e}")
                    break

        finally:
            client_socket.close()
            self.logger.info(f"Client disconnected from {addr}")

    def handle_line(self, line: str) -> Dict[str, Any]:
        """Decode one JSON command line and process it."""
        try:
            cmd = json.loads(line)
        except json.JSONDecodeError as e:
            return {"status": "error", "message": f"Invalid JSON: {e}"}
        if not isinstance(cmd, dict):
            return {"status": "error", "message": "Command must be a JSON object"}
        return self._process_command(cmd)

    def _process_command(self, cmd: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a command and return response.

        Command format: {"action": "command_name", "param1": value1, ...}

        Never crashes on bad commands - returns error response instead.
        """
        try:
            action = cmd.get("action", cmd.get("cmd", ""))
            if not action:
                return {"status": "error", "message": "Missing 'action' field"}

            params = {k: v for k, v in cmd.items() if k not in ("action", "cmd")}

            registry = get_registry()
            result = registry.execute(action, self.controller, **params)

            if self.verbose:
                self.logger.debug(f"Command: {action}, Result: {result.get('status')}")

            return result

        except Exception as e:
            # Log but don't crash
            self.logger.error(f"Command error: {e}")
            return {"status": "error", "message": str(e)}

    def run(self):
        """Block until shutdown is requested."""
        self.logger.info("Marker controls server running")
        try:
            while self.running:
                time.sleep(0.1)
        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.shutdown()

    def shutdown(self):
        """Clean shutdown."""
        self.logger.info("Shutting down...")
        self._running.clear()

        if self.timer:
            self.timer.stop()

        if self.server_socket:
            try:
                self.server_socket.close()
            except OSError:
                pass

        if self._client_executor:
            self._client_executor.shutdown(wait=False)

        self.logger.info("Shutdown complete")


def main():
    """Entry point for the marker controls server."""
    parser = argparse.ArgumentParser(
        description="Marker Controls Server - interactive marker grid and frame broadcaster"
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to server configuration YAML"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        help="Socket port (default from config)"
    )
    parser.add_argument(
        "--host",
        help="Socket host (default from config)"
    )
    parser.add_argument(
        "--no-broadcast",
        action="store_true",
        help="Do not start the periodic frame broadcaster"
    )
    parser.add_argument(
        "--spawn-grid",
        action="store_true",
        help="Spawn the configured marker grid at startup"
    )
    parser.add_argument(
        "--log-ticks",
        action="store_true",
        help="With -v, also log every broadcaster tick"
    )

    args = parser.parse_args()

    setup_logging(verbose=args.verbose, log_ticks=args.log_ticks)
    logger = get_logger(__name__)

    server = MarkerControlServer(config_path=args.config, verbose=args.verbose)

    if not server.load_config():
        sys.exit(1)

    # Override with command line args
    if args.port:
        server.config.server.socket_port = args.port
    if args.host:
        server.config.server.socket_host = args.host
    if args.no_broadcast:
        server.config.broadcaster.enabled = False

    server.install_signal_handlers()

    if args.spawn_grid:
        server.controller.spawn_grid()
        logger.info("Startup grid spawned")

    server.start_broadcaster()
    server.start_socket_server()

    server.run()


if __name__ == "__main__":
    main()
