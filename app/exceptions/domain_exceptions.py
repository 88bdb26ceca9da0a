# app/exceptions/domain_exceptions.py

from typing import Any, Dict, Optional


class DomainException(Exception):
    """
    Base class for errors raised by the services.

    Each subclass carries the HTTP status the API answers with; the handler in
    api/exception_handlers.py turns any of them into a JSON error body.
    """

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self):
        return f"{self.__class__.__name__}(status_code={self.status_code}, message={self.message!r})"


class BadRequestException(DomainException):
    """The request cannot be applied to the current state (400)"""
    status_code = 400


class ForbiddenException(DomainException):
    """The user may not act on this resource (403)"""
    status_code = 403


class NotFoundException(DomainException):
    """A game, user or statistics entry does not exist (404)"""
    status_code = 404


class ConflictException(DomainException):
    """A unique value such as an email is already taken (409)"""
    status_code = 409


class PlayerNotFoundException(NotFoundException):
    """Raised when the matchmaking player lookup cannot resolve a player"""

    def __init__(self, player_id: int):
        super().__init__("User not found", {"player_id": player_id})


class NotInQueueException(BadRequestException):
    """Raised when cancelling matchmaking for a player who is not queued"""

    def __init__(self, player_id: int):
        super().__init__("Not in matchmaking queue", {"player_id": player_id})
