"""
Prebuilt commands for the marker controls server.

These are the operator-facing actions: spawning markers, forwarding clicks,
and publishing frames.
"""

# Import all command modules to trigger registration
from marker_controls.commands.prebuilt import marker_commands
from marker_controls.commands.prebuilt import frame_commands

__all__ = [
    "marker_commands",
    "frame_commands",
]
