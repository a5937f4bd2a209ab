"""Exception types raised by the maintenance engine."""


class MaintenanceError(Exception):
    """Base class for engine errors."""


class ConfigurationError(MaintenanceError, ValueError):
    """A schedule's recurrence or trigger configuration is invalid."""


class GenerationError(MaintenanceError):
    """The work-order generation collaborator failed for a cycle."""
