"""Exception classes for log streaming and decoding."""


class BaglensError(Exception):
    """Base error for baglens."""


class SourceInitializationError(BaglensError):
    """Raised when a log source cannot be initialized at all."""


class SourceNotInitializedError(BaglensError):
    """Raised when a source is used before ``initialize()`` succeeded."""


class SegmentError(BaglensError):
    """Raised when a single segment file cannot be opened or read."""

    def __init__(self, path: str, reason: str):
        """Initialize SegmentError with the offending segment path.

        Args:
            path: Path of the segment file.
            reason: Human readable failure description.
        """
        super().__init__(f"Failed to read segment '{path}': {reason}")
        self.path = path
        self.reason = reason


class MessageDefinitionError(BaglensError):
    """Raised when message definition text cannot be parsed."""


class ResolutionError(BaglensError):
    """Raised when a referenced complex type is missing from the registry."""

    def __init__(self, missing_type: str, referenced_by: str | None = None):
        """Initialize ResolutionError.

        Args:
            missing_type: Name of the type that could not be found.
            referenced_by: Name of the type whose field referenced it, if any.
        """
        if referenced_by is None:
            message = f"Type {missing_type} not found."
        else:
            message = f"Subtype {missing_type} of type {referenced_by} not found."
        super().__init__(message)
        self.missing_type = missing_type
        self.referenced_by = referenced_by


class ImageDecodeError(BaglensError):
    """Raised when an image payload cannot be decoded."""


class UnsupportedEncodingError(ImageDecodeError):
    """Raised for raw image encodings with no decoder."""

    def __init__(self, encoding: str):
        """Initialize UnsupportedEncodingError with the rejected encoding."""
        super().__init__(f"Unsupported encoding {encoding}")
        self.encoding = encoding


class VideoDecodeError(BaglensError):
    """Raised when the video decoder rejects a configuration or frame."""
