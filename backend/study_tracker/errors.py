"""Store error types raised by the repositories.

Every failure of a store operation is a `StoreError`. The HTTP layer maps
them all to a 500 response carrying the message, except where a route
checks for `NotFoundError` explicitly.
"""


class StoreError(Exception):
    """A backing-store operation failed (connectivity, constraint, cast)."""


class ValidationError(StoreError):
    """A required field is missing or a value failed type coercion."""


class NotFoundError(StoreError):
    """No document with the given id exists under the requesting owner."""


class MissingOwnerError(Exception):
    """The request carries no `user-id` header."""
