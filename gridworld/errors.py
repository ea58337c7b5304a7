import gridworld


class GridworldError(Exception):
    """Base class for all gridworld-specific exceptions.
    It automatically appends the gridworld version to help with debugging reports.
    """

    def __init__(self, message: str):
        self.gridworld_version = getattr(gridworld, "__version__", "unknown")
        # Store the original message cleanly for programmatic access
        self.original_message = message
        full_message = f"[gridworld {self.gridworld_version}] {message}"
        super().__init__(full_message)


class ConfigurationError(GridworldError):
    """Raised when map or pathfinding configuration values are invalid."""

    def __init__(self, param_name: str = None, reason: str = None):
        # Allow flexible usage: raise ConfigurationError("Generic message")
        # OR: raise ConfigurationError("default_movement_cost", "must be positive")
        if param_name and reason:
            message = f"Invalid configuration for '{param_name}': {reason}"
            self.param_name = param_name
        else:
            message = param_name if param_name else "Invalid configuration"
            self.param_name = None

        super().__init__(message)


class PositionParseError(GridworldError, ValueError):
    """Raised when a string cannot be decoded into a Position."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid position string: {text!r}")


# Space Errors
class SpaceError(GridworldError):
    """Generic errors related to maps, cells, or movement."""


class GridDimensionError(SpaceError, ValueError):
    """Raised when map dimensions are invalid.
    Examples: Negative width/height or non-integer dimensions.
    """

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(
            f"Map dimensions must be positive integers, got width={width!r}, height={height!r}."
        )


class PropertyLayerNotFoundError(SpaceError, KeyError):
    """Raised when attempting to access a property layer that does not exist."""

    def __init__(self, layer_name):
        self.layer_name = layer_name
        message = f"Property layer '{layer_name}' does not exist."
        super().__init__(message)

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]
