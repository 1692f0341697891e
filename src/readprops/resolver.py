"""
Placeholder resolution.

Replaces ``${name}`` tokens in property values with the (recursively
resolved) value of property ``name``, and ``${env.NAME}`` tokens with
environment variable ``NAME``. Each key moves through
UNVISITED -> IN_PROGRESS -> RESOLVED; meeting a key that is still
IN_PROGRESS on the current chain is a circular reference.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from readprops.exceptions import CircularReferenceError, UnresolvedReferenceError
from readprops.utils.logging import get_logger

logger = get_logger("readprops.resolver")

ENV_PREFIX = "env."
ENV_MARKER = "${" + ENV_PREFIX
TOKEN_START = "${"
TOKEN_END = "}"


def uses_environment(properties: Mapping[str, str]) -> bool:
    """Return True if any value contains an ``${env.`` placeholder."""
    return any(ENV_MARKER in value for value in properties.values() if isinstance(value, str))


def capture_environment() -> dict[str, str]:
    """
    Snapshot the process environment.

    Keys are upper-cased on Windows, where variable names are case-insensitive.
    """
    if os.name == "nt":
        environment = {k.upper(): v for k, v in os.environ.items()}
    else:
        environment = dict(os.environ)
    logger.debug(f"Captured {len(environment)} environment variables")
    return environment


class PropertyResolver:
    """Resolves ``${...}`` placeholders across a property mapping."""

    def resolve_value(
        self,
        key: str,
        properties: Mapping[str, str],
        environment: Mapping[str, str] | None = None,
        expand: bool = True,
    ) -> str:
        """
        Resolve the value of a single property.

        Args:
            key: Property to resolve
            properties: Raw property mapping (not modified)
            environment: Environment mapping for ``${env.NAME}`` tokens
            expand: If False, return the raw value without substitution

        Returns:
            The resolved value

        Raises:
            KeyError: If key is not in properties
            CircularReferenceError: If the value references itself, directly or transitively
            UnresolvedReferenceError: If a token names an undefined property
        """
        if not expand:
            return properties[key]
        return self._resolve(key, properties, environment if environment is not None else {}, {})

    def resolve_all(
        self,
        properties: Mapping[str, str],
        environment: Mapping[str, str] | None = None,
        expand: bool = True,
    ) -> dict[str, str]:
        """
        Resolve every property and return a new mapping.

        Resolved values are memoized for the duration of the pass, so each key
        is expanded once no matter how often it is referenced. One failure
        aborts the whole pass.
        """
        if not expand:
            return dict(properties)
        env = environment if environment is not None else {}
        resolved: dict[str, str] = {}
        return {key: self._resolve(key, properties, env, resolved) for key in properties}

    def _resolve(
        self,
        key: str,
        properties: Mapping[str, str],
        environment: Mapping[str, str],
        resolved: dict[str, str],
    ) -> str:
        if key in resolved:
            return resolved[key]

        # Work stack of keys IN_PROGRESS; the innermost key is on top
        stack = [_Frame(key, properties[key])]
        in_progress = {key}
        while stack:
            frame = stack[-1]
            start = frame.value.find(TOKEN_START, frame.pos)
            end = frame.value.find(TOKEN_END, start + len(TOKEN_START)) if start >= 0 else -1
            if end < 0:
                # No more tokens; an unterminated one stays literal
                frame.parts.append(frame.value[frame.pos :])
                resolved[frame.key] = "".join(frame.parts)
                in_progress.discard(frame.key)
                stack.pop()
                continue

            name = frame.value[start + len(TOKEN_START) : end]
            if name.startswith(ENV_PREFIX):
                replacement = self._lookup_environment(name[len(ENV_PREFIX) :], environment)
            elif name in resolved:
                replacement = resolved[name]
            elif name in in_progress:
                raise CircularReferenceError(name, [f.key for f in stack])
            elif name not in properties:
                raise UnresolvedReferenceError(frame.key, name)
            else:
                # Resolve the dependency first; this token is revisited afterwards
                stack.append(_Frame(name, properties[name]))
                in_progress.add(name)
                continue

            frame.parts.append(frame.value[frame.pos : start])
            frame.parts.append(replacement)
            frame.pos = end + len(TOKEN_END)

        return resolved[key]

    @staticmethod
    def _lookup_environment(variable: str, environment: Mapping[str, str]) -> str:
        if os.name == "nt":
            variable = variable.upper()
        return environment.get(variable, "")


@dataclass
class _Frame:
    """A key whose value is being scanned for tokens."""

    key: str
    value: str
    pos: int = 0
    parts: list[str] = field(default_factory=list)
