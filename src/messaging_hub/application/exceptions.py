from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class AccessDeniedError(AppError):
    pass


class ValidationError(AppError):
    pass


class PersistenceError(AppError):
    """The data collaborator failed; nothing was broadcast."""


class AuthenticationError(AppError):
    pass
