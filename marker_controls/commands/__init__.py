"""
Command system for the marker controls server.

Commands are registered using the @register_command decorator and auto-discovered
from the prebuilt/ submodule on import.
"""

from marker_controls.commands.base import (
    CommandRegistry,
    register_command,
    get_registry,
)

# Auto-import prebuilt commands to register them
from marker_controls.commands import prebuilt

__all__ = [
    "CommandRegistry",
    "register_command",
    "get_registry",
]
