"""Custom exceptions for record store."""


class RecordStoreError(Exception):
    """Base exception for record store errors."""
    pass


class ValidationError(RecordStoreError):
    """Raised when input has the wrong shape or an out-of-range value."""
    pass


class InvalidReferenceError(ValidationError):
    """Raised when an identifier is not well-formed."""

    def __init__(self, kind: str, reference: object):
        self.kind = kind
        self.reference = reference
        super().__init__(f"Invalid {kind} ID: {reference}")


class NotFoundError(RecordStoreError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, kind: str, reference: str):
        self.kind = kind
        self.reference = reference
        super().__init__(f"{kind.capitalize()} not found: {reference}")


class InsufficientStockError(RecordStoreError):
    """Raised when an order asks for more units than are on hand."""

    def __init__(self, artist: str, album: str, available: int, requested: int):
        self.artist = artist
        self.album = album
        self.available = available
        self.requested = requested
        super().__init__(
            f'Insufficient stock for record "{album}" by {artist}. '
            f"Available: {available}, Requested: {requested}"
        )


class ConflictError(RecordStoreError):
    """Raised when a write would violate a uniqueness constraint."""
    pass


class StorageError(RecordStoreError):
    """Raised when the backing store cannot be read or written."""
    pass


class ConfigurationError(RecordStoreError):
    """Raised when there's an error in configuration."""
    pass
