class GtfsError(Exception):
    """Base exception for static GTFS ingestion failures."""


class ArchiveFormatError(GtfsError):
    """Raised when a downloaded payload is not a usable ZIP archive."""
