"""Named failure conditions raised by the service layer.

Every error aborts the single operation that raised it before any write.
They subclass ValueError so callers that only care about "bad request"
can catch that.
"""


class DirectoryError(ValueError):
    """Base class for service-layer failures."""


class AuthenticationRequired(DirectoryError):
    """Raised when an operation needs a verified caller and none was given."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class NotFound(DirectoryError):
    """Raised when a referenced document does not exist."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} '{key}' not found.")


class InvalidArgument(DirectoryError):
    """Raised for argument values the operation cannot accept."""


class DuplicateKey(DirectoryError):
    """Raised when an insert or rename would violate a uniqueness constraint."""


class DuplicateSlug(DuplicateKey):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"A blog with slug '{slug}' already exists.")
