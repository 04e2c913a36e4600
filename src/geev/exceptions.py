"""Domain exceptions."""


class GeevError(Exception):
    """Base class for errors raised by the geev package."""


class NotAuthenticatedError(GeevError):
    """An operation needed a logged-in user and there was none."""


class EventPayloadTooLargeError(GeevError):
    """Analytics event data exceeded the configured size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Event data too large ({size} > {limit} bytes)")
        self.size = size
        self.limit = limit
