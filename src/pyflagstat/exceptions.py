"""Custom exceptions for pyflagstat."""


class FlagstatError(Exception):
    """Base exception for all pyflagstat errors."""

    pass


class InvalidInput(FlagstatError):
    """Raised when the run is misconfigured before any record is read."""

    pass


class SourceReadError(FlagstatError):
    """Raised when the alignment record stream fails to open or decode."""

    def __init__(self, message="", path=None):
        """Initialize SourceReadError.

        Args:
            message: Error message
            path: Alignment file that failed, if known
        """
        super().__init__(message)
        self.path = path
