import json
import logging
import socket
import threading
import time

import pytest

from marker_controls.commands import get_registry
from marker_controls.config import ControllerConfig
from marker_controls.core.builder import marker_name
from marker_controls.server import MarkerControlServer


@pytest.fixture
def server():
    return MarkerControlServer(config=ControllerConfig())


def send(server, **cmd):
    return server.handle_line(json.dumps(cmd))


def test_prebuilt_commands_are_registered() -> None:
    commands = set(get_registry().list_commands())

    assert {
        "create_grid", "add_marker", "marker_feedback", "get_marker", "list_markers",
        "clear_markers", "status", "publish_frame", "get_transform", "list_frames",
    } <= commands


def test_create_grid_without_params_uses_defaults(server) -> None:
    response = send(server, action="create_grid")

    assert response["status"] == "success"
    assert response["count"] == 25
    assert send(server, action="list_markers")["count"] == 25


def test_create_grid_with_params(server) -> None:
    response = send(server, action="create_grid", rows=2, cols=1, spacing=3.0)

    assert response["names"] == [marker_name((0.0, 0.0, 0.0)), marker_name((3.0, 0.0, 0.0))]


def test_click_replaces_marker(server) -> None:
    send(server, action="create_grid", rows=1, cols=1)
    old = marker_name((0.0, 0.0, 0.0))

    response = send(server, action="marker_feedback", marker_name=old,
                    event_type="button_click", position=[4.0, 5.0, 6.0])

    assert response["status"] == "success"
    assert response["erased"] == old
    marker = send(server, action="get_marker", name=response["name"])["marker"]
    assert marker["pose"]["position"] == [4.0, 5.0, 6.0]
    assert marker["controls"][0]["interaction_mode"] == "move_3d"
    assert send(server, action="get_marker", name=old)["code"] == "MARKER_NOT_FOUND"


def test_click_on_unknown_marker(server) -> None:
    response = send(server, action="marker_feedback", marker_name="X", event_type=3)

    assert response["status"] == "error"
    assert response["code"] == "MARKER_NOT_FOUND"
    assert response["state"] == "rejected"


def test_feedback_with_bad_event_type(server) -> None:
    response = send(server, action="marker_feedback", marker_name="X", event_type="wiggle")

    assert response["status"] == "error"
    assert "wiggle" in response["message"]


def test_publish_frame_and_lookup(server) -> None:
    response = send(server, action="publish_frame", frame_id="tool", parent_frame_id="base_link")

    assert response["status"] == "success"
    assert response["transform"]["translation"] == [0.0, 0.0, 0.0]
    assert response["transform"]["rotation"] == [0.0, 0.0, 0.0, 1.0]

    looked_up = send(server, action="get_transform", child_frame_id="tool")
    assert looked_up["transform"]["parent_frame_id"] == "base_link"
    assert send(server, action="list_frames")["frames"] == {"tool": "base_link"}


def test_publish_frame_with_empty_name_is_rejected(server) -> None:
    response = send(server, action="publish_frame", frame_id="", parent_frame_id="base_link")

    assert response["status"] == "error"
    assert response["code"] == "INVALID_INPUT"
    assert server.broadcaster.initialized is False


def test_publish_frame_missing_param(server) -> None:
    response = send(server, action="publish_frame", frame_id="tool")

    assert response["status"] == "error"
    assert "Invalid parameters" in response["message"]


def test_add_marker_and_clear(server) -> None:
    response = send(server, action="add_marker", position=[1.0, 1.0, 0.0], mode="rotate_3d")
    assert response["status"] == "success"

    bad = send(server, action="add_marker", position=[0.0, 0.0, 0.0], mode="spin")
    assert bad["code"] == "INVALID_INPUT"

    cleared = send(server, action="clear_markers")
    assert cleared["erased"] == 1
    assert send(server, action="list_markers")["markers"] == []


def test_status_reports_counts(server) -> None:
    send(server, action="create_grid", rows=1, cols=2)
    server.broadcaster.on_tick()

    response = send(server, action="status")

    assert response["markers"] == 2
    assert response["revision"] == 1
    assert response["broadcaster_initialized"] is True
    assert response["tick_counter"] == 1


def test_unknown_action_and_bad_json(server) -> None:
    unknown = send(server, action="explode")
    assert unknown["status"] == "error"
    assert "create_grid" in unknown["available_commands"]

    assert send(server)["message"] == "Missing 'action' field"
    assert server.handle_line("{not json")["status"] == "error"
    assert server.handle_line("[1, 2]")["status"] == "error"


# --- Socket connection handling ---

def read_line(sock: socket.socket) -> dict:
    data = b""
    while not data.endswith(b"\n"):
        chunk = sock.recv(65536)
        if not chunk:
            break
        data += chunk
    return json.loads(data.decode("utf-8"))


@pytest.fixture
def connection(server):
    client_sock, server_sock = socket.socketpair()
    client_sock.settimeout(5.0)
    handler = threading.Thread(target=server._handle_client,
                               args=(server_sock, "socketpair"), daemon=True)
    handler.start()
    yield client_sock
    client_sock.close()
    handler.join(timeout=5.0)
    assert not handler.is_alive()


def test_multibyte_character_split_across_chunks(connection) -> None:
    payload = json.dumps({"action": "publish_frame", "frame_id": "café",
                          "parent_frame_id": "base_link"}, ensure_ascii=False).encode("utf-8") + b"\n"
    split = payload.index("é".encode("utf-8")) + 1

    connection.sendall(payload[:split])
    time.sleep(0.05)
    connection.sendall(payload[split:])

    response = read_line(connection)
    assert response["status"] == "success"
    assert response["transform"]["child_frame_id"] == "café"


def test_invalid_utf8_gets_error_and_connection_stays_open(connection, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="marker_controls.server")

    connection.sendall(b'{"action": "status", "x": "\xff"}\n')
    error = read_line(connection)
    assert error["status"] == "error"
    assert "Invalid UTF-8" in error["message"]
    assert "Invalid UTF-8" in caplog.text

    connection.sendall(b'{"action": "status"}\n')
    assert read_line(connection)["status"] == "success"


def test_large_response_is_sent_whole(connection) -> None:
    connection.sendall(json.dumps({"action": "create_grid", "rows": 60, "cols": 60}).encode("utf-8") + b"\n")

    response = read_line(connection)

    assert response["count"] == 3600
    assert len(response["names"]) == 3600


def test_registry_commits_are_logged(server, caplog) -> None:
    caplog.set_level(logging.INFO, logger="marker_controls.server")

    send(server, action="create_grid", rows=1, cols=2)

    assert "Markers committed (r1): 2 updated, 0 erased" in caplog.text
