# app/exceptions/__init__.py

from exceptions.domain_exceptions import (
    DomainException,
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    PlayerNotFoundException,
    NotInQueueException
)

__all__ = [
    'DomainException',
    'BadRequestException',
    'ForbiddenException',
    'NotFoundException',
    'ConflictException',
    'PlayerNotFoundException',
    'NotInQueueException'
]
