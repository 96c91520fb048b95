"""Exception taxonomy for nonce encoding and validation."""

from __future__ import annotations


class NonceError(Exception):
    """Base exception for the stateless_nonce package."""


class FormatError(NonceError, ValueError):
    """Raised when a timestamp or time field cannot be encoded or decoded."""


class LengthError(NonceError, ValueError):
    """Raised when a token field does not have its fixed width."""


class ConfigurationError(NonceError, ValueError):
    """Raised when nonce configuration is invalid."""
