"""Ошибки протокола. Возвращаются вызывающему как {ok: false, error, message}."""
from .constants import ErrorCode


class RelayError(Exception):
    code: ErrorCode = ErrorCode.BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RelayError):
    code = ErrorCode.NOT_FOUND


class NameCollisionError(RelayError):
    code = ErrorCode.NAME_COLLISION


class ForbiddenError(RelayError):
    code = ErrorCode.FORBIDDEN


class BadRequestError(RelayError):
    code = ErrorCode.BAD_REQUEST


class RegistryFullError(RelayError):
    code = ErrorCode.UNAVAILABLE
