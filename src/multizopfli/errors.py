"""Exception types raised by multizopfli."""


class MultizopfliError(Exception):
    """Base class for all multizopfli errors."""


class EnumerationError(MultizopfliError):
    """Listing candidate files failed. Fatal for the whole run."""


class CompressorNotFound(MultizopfliError):
    """The zopflipng executable could not be located."""


class CompressionError(MultizopfliError):
    """A single file's compression failed.

    Attributes:
        path: File the compressor was invoked on
        cause: Underlying process or filesystem error
    """

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(str(cause))
