"""Custom Exceptions for the captionfmt package."""

class CaptionFmtError(Exception):
    """Base class for exceptions in this package."""
    pass

class ConfigurationError(CaptionFmtError):
    """Exception raised for errors in configuration loading."""
    pass

class ExtractionError(CaptionFmtError):
    """Exception raised when cues cannot be pulled out of an upstream payload."""
    pass

class InvalidCueError(CaptionFmtError):
    """Exception raised for a cue with negative, reversed or out-of-order timing."""
    pass

class UnsupportedFormatError(CaptionFmtError):
    """Exception raised for an output format identifier that has no formatter."""
    pass

class EmptyInputError(CaptionFmtError):
    """Exception raised when asked to render an empty cue list."""
    pass

class FileSystemError(CaptionFmtError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
