"""
Domain Exceptions

Base classes the room and booking contexts raise from. The API layer maps
them onto HTTP status codes without knowing the concrete subclasses:
- DomainValidationError: request rejected before any state was read (400)
- NotFoundError: referenced entity does not exist (404)
- ConflictError: request is valid but clashes with stored state (409)
"""

from typing import Any, Dict


class DomainError(Exception):
    """Base exception for all domain-specific errors."""


class DomainValidationError(DomainError, ValueError):
    pass


class NotFoundError(DomainError, LookupError):
    pass


class ConflictError(DomainError):
    """
    Raised when stored state makes the request impossible

    Subclasses describe the clash in details(); the API returns it next
    to the message.
    """
    reason = 'conflict'

    def details(self) -> Dict[str, Any]:
        return {'reason': self.reason}
