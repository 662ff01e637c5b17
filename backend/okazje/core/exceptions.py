"""Custom exception classes for the application."""


class OkazjeException(Exception):
    """Base exception for all Okazje+ errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(OkazjeException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ValidationError(OkazjeException):
    """Raised when caller input is rejected before touching any store."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class UpstreamUnavailableError(OkazjeException):
    """Raised when a backing store cannot be reached or fails a query."""

    def __init__(self, store: str, message: str):
        self.store = store
        super().__init__(f"{store} unavailable: {message}")


class ItemResolutionError(OkazjeException):
    """Raised when a single catalog item cannot be looked up.

    Never crosses the scoring boundary: the item resolver logs it and drops
    the item from the aggregates.
    """

    def __init__(self, item_type: str, item_id: str, message: str):
        self.item_type = item_type
        self.item_id = item_id
        super().__init__(f"Could not resolve {item_type} '{item_id}': {message}")
