from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class UnsupportedChainError(DomainError):
    """No configuration is registered for the chain."""


class EntityNotFoundError(DomainError):
    """Requested entity does not exist in the store."""


class InvalidEventError(DomainError):
    """Event parameters cannot be applied to the current state."""
