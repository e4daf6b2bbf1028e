class PatchworkError(Exception):
    """Base class for errors reported to callers of the patchwork service."""


class ValidationError(PatchworkError):
    """Input was rejected before any state was touched."""


class NotFoundError(PatchworkError):
    """The referenced piece or purchase does not exist."""


class PersistenceError(PatchworkError):
    """Loading or saving the state blob failed."""
