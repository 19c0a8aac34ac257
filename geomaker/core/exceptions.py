"""
Exception Hierarchy.

Every recoverable failure raised by the orchestration layer derives from
``GeomakerError`` so callers can surface it to the user without catching
unrelated programming errors.
"""


class GeomakerError(Exception):
    """Base class for all session orchestration errors."""


# ARCHIVE INGESTION
class ArchiveError(GeomakerError):
    """Raised when an uploaded archive cannot be turned into a manifest."""


class ArchiveReadError(ArchiveError):
    """The archive is corrupt, truncated or not a ZIP file."""


class EmptyDatasetError(ArchiveError):
    """The archive contains no class folder with a qualifying image."""


class TooManyClassesError(ArchiveError):
    """The archive holds more class folders than a session supports."""


# INSPECTION
class ImageReadError(GeomakerError):
    """An image to inspect could not be read from disk."""


# TRAINING
class InvalidConfigurationError(GeomakerError):
    """A training run cannot start with the current session state."""


# CONVERSATIONAL ASSISTANT
class AssistantError(GeomakerError):
    """Base class for failures of the external conversational assistant."""


class AssistantUnavailableError(AssistantError):
    """The assistant cannot be initialized (e.g. missing API key)."""


class AssistantRequestError(AssistantError):
    """The assistant backend rejected or failed a request."""


# EXPORTS
class ResultsUnavailableError(GeomakerError):
    """An export needs results but no run has completed yet."""
