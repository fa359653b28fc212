"""
Domain Errors

A single exception type tagged with an ErrorKind. Transport layers map
the kind to their own status codes; nothing downstream should branch on
the exception class or parse the message.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    AUTHORIZATION = 'authorization'


class DomainError(Exception):
    """
    Expected failure of a domain operation

    Attributes:
        kind: machine-checkable category
        message: human readable explanation, safe to show to clients
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = ErrorKind(kind)
        self.message = message

    @classmethod
    def validation(cls, message: str) -> 'DomainError':
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> 'DomainError':
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> 'DomainError':
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def authorization(cls, message: str) -> 'DomainError':
        return cls(ErrorKind.AUTHORIZATION, message)

    def to_dict(self) -> dict:
        return {'kind': self.kind.value, 'message': self.message}

    def __repr__(self):
        return f"DomainError({self.kind.value!r}, {self.message!r})"
