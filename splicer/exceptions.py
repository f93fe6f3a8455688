"""
splicer.exceptions - Custom exception classes.

All Splicer-specific exceptions inherit from SplicerError. Timeline conflicts
(overlaps, gaps, order mismatches) are reported as data and never raised.
"""


class SplicerError(Exception):
    """Base exception for all Splicer errors."""

    pass


class ConfigError(SplicerError):
    """Configuration loading or validation error."""

    pass


class ProjectError(SplicerError):
    """Project directory, timeline document or version store error."""

    pass


class ValidationError(SplicerError):
    """Input would break a timeline invariant (NaN, negative or infinite time)."""

    pass


class NotFoundError(SplicerError):
    """A clip, track, transition or version id is not present in the model."""

    def __init__(self, kind: str, item_id: str | int):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} not found: {item_id}")


class ConflictResolutionError(SplicerError):
    """Conflict cannot be resolved automatically."""

    pass


class ExportError(SplicerError):
    """Project file export error."""

    pass
