"""
Marker commands for the marker controls server.

Commands for spawning, clicking, and inspecting interactive markers.
"""

from marker_controls.commands.base import register_command
from marker_controls.core.feedback import FeedbackEvent
from marker_controls.core.marker import InteractionMode


@register_command
def create_grid(controller, rows: int = None, cols: int = None,
                spacing: float = None) -> dict:
    """
    Spawn a grid of six-axis markers.

    Args:
        controller: MarkerController instance
        rows: Number of rows (default from config)
        cols: Number of columns (default from config)
        spacing: Distance between markers (default from config)

    Returns:
        Response with the created marker names
    """
    names = controller.spawn_grid(rows=rows, cols=cols, spacing=spacing)
    return {
        "status": "success",
        "names": names,
        "count": len(names),
    }


@register_command
def add_marker(controller, position: list, mode: str = "full_6dof") -> dict:
    """
    Create a single marker.

    Args:
        controller: MarkerController instance
        position: [x, y, z] in the marker frame
        mode: "move_3d", "rotate_3d" or "full_6dof"

    Returns:
        Response with the marker name
    """
    try:
        interaction_mode = InteractionMode(mode)
    except ValueError:
        return {
            "status": "error",
            "message": f"Unknown interaction mode: {mode}",
            "code": "INVALID_INPUT",
        }

    marker = controller.add_marker(position, interaction_mode)
    return {"status": "success", "name": marker.name}


@register_command
def marker_feedback(controller, marker_name: str, event_type, position: list = None,
                    orientation: list = None, control_name: str = "",
                    client_id: str = "") -> dict:
    """
    Forward an operator feedback event.

    Args:
        controller: MarkerController instance
        marker_name: Name of the marker the event refers to
        event_type: Event kind, integer code or name ("button_click")
        position: Reported [x, y, z]
        orientation: Reported [x, y, z, w]

    Returns:
        Response with the replacement marker name, or an error
    """
    data = {
        "event_type": event_type,
        "marker_name": marker_name,
        "control_name": control_name,
        "client_id": client_id,
    }
    if position is not None:
        data["position"] = position
    if orientation is not None:
        data["orientation"] = orientation

    event = FeedbackEvent.from_dict(data)
    return controller.process_feedback(event).to_response()


@register_command
def get_marker(controller, name: str) -> dict:
    """
    Get committed marker state for inspection.

    Returns:
        Response with marker data
    """
    marker = controller.registry.get(name) if controller.registry is not None else None
    if marker is None:
        return {
            "status": "error",
            "message": f"Marker '{name}' not found",
            "code": "MARKER_NOT_FOUND",
        }

    return {"status": "success", "marker": marker.to_dict()}


@register_command
def list_markers(controller) -> dict:
    """
    List committed marker names.

    Returns:
        Response with list of names
    """
    names = controller.registry.list_markers() if controller.registry is not None else []
    return {
        "status": "success",
        "markers": names,
        "count": len(names),
    }


@register_command
def clear_markers(controller) -> dict:
    """Erase every marker and commit."""
    registry = controller.registry
    if registry is None:
        return {
            "status": "error",
            "message": "Interactive marker registry is not initialized",
            "code": "UNINITIALIZED_COLLABORATOR",
        }
    count = len(registry)
    registry.clear()
    registry.commit()
    return {"status": "success", "erased": count}


@register_command
def status(controller) -> dict:
    """
    Summarize registry and broadcaster state.

    Returns:
        Response with counts and the next tick counter
    """
    registry = controller.registry
    broadcaster = controller.broadcaster
    return {
        "status": "success",
        "markers": len(registry) if registry is not None else 0,
        "revision": registry.revision if registry is not None else 0,
        "broadcaster_initialized": broadcaster is not None and broadcaster.initialized,
        "tick_counter": broadcaster.counter if broadcaster is not None else None,
    }
