"""Exception hierarchy for linkmirror.

Per-item filesystem failures are never raised; they are reported as
results and recorded in the action log. Only conditions that must stop
a run before any mutation are exceptions.
"""


class MirrorError(Exception):
    """Base exception for linkmirror errors."""


class SourceRootMissingError(MirrorError):
    """Raised when the source root of a run does not exist."""


class DestinationRootError(MirrorError):
    """Raised when the destination root cannot be created."""


class ConfigError(MirrorError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when a configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed."""
