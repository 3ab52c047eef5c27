"""Error types raised by the grid world learner."""


class GridWorldError(Exception):
    """Base class for all grid world errors."""


class ConfigurationError(GridWorldError, ValueError):
    """Invalid construction-time configuration. Fatal to the instance, never retried."""


class InvariantViolationError(GridWorldError, RuntimeError):
    """A programming defect, e.g. a direction outside the fixed action set."""
