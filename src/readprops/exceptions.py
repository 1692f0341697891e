"""
readprops exception hierarchy.

All domain-specific exceptions inherit from ReadPropsError, so a caller can
catch any loading or resolution failure with a single base class while still
being able to handle individual failures.

Hierarchy::

    ReadPropsError
    ├── ConfigurationError          - conflicting sources, bad URL, bad options file
    ├── ResourceError               - property resource failures
    │   ├── ResourceUnavailableError  - resource cannot be opened (non-quiet)
    │   └── ResourceReadError         - opened resource cannot be fully read
    └── ResolutionError             - placeholder resolution failures
        ├── UnresolvedReferenceError  - ${name} defined nowhere
        └── CircularReferenceError    - key references itself, directly or not
"""

from __future__ import annotations

from collections.abc import Sequence


class ReadPropsError(Exception):
    """Base exception for all readprops errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(ReadPropsError):
    """Raised when load options or the options file are invalid."""


# --- Resources ---------------------------------------------------------------


class ResourceError(ReadPropsError):
    """Raised when a property resource cannot be used."""

    def __init__(self, message: str, *, resource: str) -> None:
        super().__init__(message, details={"resource": resource})
        self.resource = resource


class ResourceUnavailableError(ResourceError):
    """Raised when a declared resource cannot be opened and quiet mode is off."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"Properties could not be loaded from {resource}", resource=resource)


class ResourceReadError(ResourceError):
    """Raised when an opened resource cannot be read or parsed."""

    def __init__(self, resource: str, *, cause: Exception | None = None) -> None:
        message = f"Error reading properties from {resource}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, resource=resource)
        if cause is not None:
            self.__cause__ = cause


# --- Resolution --------------------------------------------------------------


class ResolutionError(ReadPropsError):
    """Raised when placeholder resolution fails."""


class UnresolvedReferenceError(ResolutionError):
    """Raised when a ${name} token names neither a property nor the environment."""

    def __init__(self, key: str, reference: str) -> None:
        super().__init__(
            f"Property '{key}' references undefined property '${{{reference}}}'",
            details={"key": key, "reference": reference},
        )
        self.key = key
        self.reference = reference


class CircularReferenceError(ResolutionError):
    """Raised when a property transitively references itself."""

    def __init__(self, key: str, chain: Sequence[str]) -> None:
        cycle = " -> ".join([*chain, key])
        super().__init__(
            f"Circular property definition for '{key}': {cycle}",
            details={"key": key, "chain": list(chain)},
        )
        self.key = key
        self.chain = list(chain)
