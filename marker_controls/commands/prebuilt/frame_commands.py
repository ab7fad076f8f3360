"""
Frame commands for the marker controls server.

Commands for publishing and inspecting coordinate-frame transforms.
"""

from marker_controls.commands.base import register_command


def _get_buffer(controller):
    """
    Get the inspectable transform channel.

    Returns:
        (buffer, error_response) - error_response is None on success
    """
    broadcaster = controller.broadcaster
    if broadcaster is None:
        return None, {
            "status": "error",
            "message": "Transform broadcaster is not initialized",
            "code": "UNINITIALIZED_COLLABORATOR",
        }

    channel = broadcaster.channel
    if not hasattr(channel, "lookup"):
        return None, {
            "status": "error",
            "message": "Transform channel does not support lookup",
        }
    return channel, None


@register_command
def publish_frame(controller, frame_id: str, parent_frame_id: str) -> dict:
    """
    Publish an identity transform between two frames.

    Args:
        controller: MarkerController instance
        frame_id: Child frame name (non-empty)
        parent_frame_id: Parent frame name (non-empty)

    Returns:
        Response with the published transform
    """
    record = controller.publish_frame(frame_id, parent_frame_id)
    return {"status": "success", "transform": record.to_dict()}


@register_command
def get_transform(controller, child_frame_id: str) -> dict:
    """
    Get the latest transform published for a child frame.

    Returns:
        Response with transform data
    """
    buffer, error = _get_buffer(controller)
    if error:
        return error

    record = buffer.lookup(child_frame_id)
    if record is None:
        return {
            "status": "error",
            "message": f"No transform published for frame '{child_frame_id}'",
        }
    return {"status": "success", "transform": record.to_dict()}


@register_command
def list_frames(controller) -> dict:
    """
    List frames seen on the transform channel.

    Returns:
        Response with {child: parent} mapping
    """
    buffer, error = _get_buffer(controller)
    if error:
        return error

    return {"status": "success", "frames": buffer.frames()}
