"""Custom exceptions for the Street Reach service."""


class StreetReachError(Exception):
    """Base exception for Street Reach errors."""

    pass


class ValidationError(StreetReachError):
    """Error during input validation."""

    pass


class StoreError(StreetReachError):
    """Error talking to the record store."""

    pass


class NotFoundError(StoreError):
    """Requested record does not exist in the store."""

    pass
