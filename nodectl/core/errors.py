"""Domain-specific errors for nodectl."""

from __future__ import annotations


class NodectlError(Exception):
    """Base error for nodectl."""


class ConfigError(NodectlError):
    """Raised when the server configuration cannot be read or is invalid."""


class SchemaError(NodectlError):
    """Raised when a request payload does not conform to its command schema."""


class ValidationFailure(NodectlError):
    """Raised when hardware info carries none of the configured match keys."""

    def __init__(self, message: str, *, match_keys: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.match_keys = match_keys


class AuthorizationError(NodectlError):
    """Raised when the caller may not run a command against a node."""


class StoreError(NodectlError):
    """Base persistence error."""


class NodeNotFoundError(StoreError):
    """Raised when a node name does not resolve to a registered node."""


class NodeExistsError(StoreError):
    """Raised when registering a node name that is already taken."""
