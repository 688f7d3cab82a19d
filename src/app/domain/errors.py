from __future__ import annotations


INVALID_LINK_MESSAGE = "Invalid or expired link"


class CookbookError(Exception):
    pass


class UnauthenticatedError(CookbookError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class UnauthorizedError(CookbookError):
    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFoundError(CookbookError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InvalidOrExpiredTokenError(CookbookError):
    # Unknown, expired and exhausted tokens must be indistinguishable.
    def __init__(self) -> None:
        super().__init__(INVALID_LINK_MESSAGE)


class ValidationFailureError(CookbookError):
    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class CopyFailedError(CookbookError):
    def __init__(self, source_cookbook_id: str, reason: str, rolled_back: bool = True):
        super().__init__(f"Failed to copy cookbook {source_cookbook_id}: {reason}")
        self.source_cookbook_id = source_cookbook_id
        self.reason = reason
        self.rolled_back = rolled_back


class RepositoryError(CookbookError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason
