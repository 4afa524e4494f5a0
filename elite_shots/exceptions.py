"""
Exception hierarchy for Elite Screenshots.

Every failure is raised for a single file and caught at the per-file
boundary (event handler or batch loop), so none of these ever stops the
watcher or a batch run.
"""


class EliteScreenshotsError(Exception):
    """Base exception for all Elite Screenshots errors."""
    pass


class ClassificationError(EliteScreenshotsError):
    """Raised when a file name matches neither screenshot naming pattern."""
    pass


class ConversionError(EliteScreenshotsError):
    """Raised when reading, decoding or writing an image fails."""
    pass


class ResolutionExhaustedError(EliteScreenshotsError):
    """Raised when every numbered variant of an output name is taken."""
    pass
