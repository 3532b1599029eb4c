"""Domain error taxonomy.

Services raise these; ``backend.app.main`` translates them into HTTP
responses in one place so routes stay free of status-code bookkeeping.
"""


class DocShareError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or "Error"
        super().__init__(self.detail)


class NotFoundError(DocShareError):
    """Referenced record does not exist."""

    status_code = 404


class UnauthorizedError(DocShareError):
    """Not authenticated."""

    status_code = 401


class ForbiddenError(DocShareError):
    """Access denied."""

    status_code = 403


class ConflictError(DocShareError):
    """Request conflicts with current state."""

    status_code = 409


class DocumentNameConflictError(ConflictError):
    """Document with this name already exists."""

    pass


class InvalidTransitionError(ConflictError):
    """Access request is no longer pending."""

    pass


class InvalidInputError(DocShareError):
    """Missing or malformed input."""

    status_code = 400


class StoreUnavailableError(DocShareError):
    """Storage backend unavailable, retry later."""

    status_code = 503


class RateLimitedError(DocShareError):
    """Too many attempts."""

    status_code = 429

    def __init__(self, retry_after: int, detail: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(detail)
