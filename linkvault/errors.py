"""Exceptions raised by the link store and its collaborators.

Every error carries the HTTP status the web layer maps it to. PersistenceError
never reaches a client: the persistence writer logs it and moves on.
"""


class LinkVaultError(Exception):
    """Base class for LinkVault errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LinkVaultError):
    """Bad user input (missing or malformed URL, malformed PIN)."""

    status_code = 400


class NotFoundError(LinkVaultError):
    """Short code is absent or no longer live."""

    status_code = 404


class LinkNotFoundError(NotFoundError):
    """No record exists for the short code."""

    def __init__(self, short_code: str, message: str = "Link not found."):
        super().__init__(message)
        self.short_code = short_code


class LinkExpiredError(NotFoundError):
    """The record existed but its expiry has passed; it has been removed."""

    def __init__(self, short_code: str, message: str = "This link has expired."):
        super().__init__(message)
        self.short_code = short_code


class PinError(LinkVaultError):
    """PIN check failed."""

    status_code = 400


class PinRequiredError(PinError):
    def __init__(self, message: str = "PIN is required."):
        super().__init__(message)


class IncorrectPinError(PinError):
    def __init__(self, message: str = "Incorrect PIN."):
        super().__init__(message)


class RateLimitError(LinkVaultError):
    """Client exceeded its request budget for the current window."""

    status_code = 429

    def __init__(self, message: str = "Too many requests. Please slow down."):
        super().__init__(message)


class PersistenceError(LinkVaultError):
    """Reading or writing the backing file failed."""
