"""
Command registry and decorator for the marker controls server.

Minimal decorator pattern - decorator only handles registration, no hidden behavior.
"""

from typing import Dict, Callable, Any, Optional
import functools
import logging

from marker_controls.errors import MarkerControlError

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Registry for command handlers.

    Commands are registered using the @register_command decorator.
    Each command handler receives a MarkerController instance and returns a
    response dict.
    """

    def __init__(self):
        self._commands: Dict[str, Callable] = {}

    def register(self, name: str, handler: Callable) -> None:
        """
        Register a command handler.

        Args:
            name: Command name (used as "action" in JSON commands)
            handler: Function that handles the command
        """
        if name in self._commands:
            logger.warning(f"Command '{name}' is being re-registered")
        self._commands[name] = handler
        logger.debug(f"Registered command: {name}")

    def get(self, name: str) -> Optional[Callable]:
        """Get a command handler by name."""
        return self._commands.get(name)

    def execute(self, action: str, controller: Any, **params) -> Dict[str, Any]:
        """
        Execute a command.

        Args:
            action: Command name/action
            controller: MarkerController instance
            **params: Command parameters

        Returns:
            Response dictionary with 'status' key
        """
        handler = self._commands.get(action)
        if handler is None:
            return {
                "status": "error",
                "message": f"Unknown command: {action}",
                "available_commands": list(self._commands.keys())
            }

        try:
            result = handler(controller, **params)
            if result is None:
                result = {"status": "success"}
            elif "status" not in result:
                result["status"] = "success"
            return result
        except MarkerControlError as e:
            # Already logged where it was raised
            return e.to_response()
        except TypeError as e:
            # Likely missing or wrong parameters
            return {
                "status": "error",
                "message": f"Invalid parameters for '{action}': {str(e)}"
            }
        except ValueError as e:
            # Validation error
            return {
                "status": "error",
                "message": str(e)
            }

    def list_commands(self) -> list:
        """List all registered command names."""
        return list(self._commands.keys())


# Global registry instance
_registry = CommandRegistry()


def get_registry() -> CommandRegistry:
    """Get the global command registry."""
    return _registry


def register_command(func: Callable = None, *, name: str = None) -> Callable:
    """
    Decorator to register a command handler.

    Usage:
        @register_command
        def publish_frame(controller, frame_id: str, parent_frame_id: str):
            '''Publish an identity transform between two frames.'''
            record = controller.publish_frame(frame_id, parent_frame_id)
            return {"status": "success", "transform": record.to_dict()}

        @register_command(name="frames")
        def list_frames_alias(controller):
            ...

    The decorator only registers the function - no hidden behavior.
    Command name defaults to the function name.
    """
    def decorator(fn: Callable) -> Callable:
        cmd_name = name if name is not None else fn.__name__
        _registry.register(cmd_name, fn)

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            return fn(*args, **kwargs)

        return wrapper

    if func is not None:
        # Called without parentheses: @register_command
        return decorator(func)
    else:
        # Called with parentheses: @register_command(name="...")
        return decorator
