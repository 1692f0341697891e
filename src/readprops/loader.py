"""
Property loading pipeline.

Validates the load options, merges every declared resource into one working
map in precedence order, captures the environment if any value needs it,
and resolves placeholders in a single pass.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from readprops.exceptions import ConfigurationError, ResourceReadError, ResourceUnavailableError
from readprops.properties import DEFAULT_ENCODING, load_properties
from readprops.resolver import PropertyResolver, capture_environment, uses_environment
from readprops.resources import FileResource, Resource, UrlResource
from readprops.utils.logging import get_logger

logger = get_logger("readprops.loader")


@dataclass
class LoadOptions:
    """Where to read properties from and how to treat missing resources."""

    files: list[Path] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)
    quiet: bool = False
    classpath: list[Path] | None = None
    encoding: str = DEFAULT_ENCODING

    def validate(self) -> None:
        if self.files and self.urls:
            raise ConfigurationError(
                "Set files or URLs but not both - otherwise no order of precedence can be guaranteed",
                details={"files": [str(f) for f in self.files], "urls": list(self.urls)},
            )


class PropertiesLoader:
    """
    Loads and resolves properties for one invocation.

    Args:
        options: Sources and missing-resource policy
        resolver: Placeholder resolver (default: a new PropertyResolver)
        environment_provider: Callable returning the environment mapping; only
            called when a value contains an ``${env.`` placeholder
    """

    def __init__(
        self,
        options: LoadOptions,
        resolver: PropertyResolver | None = None,
        environment_provider: Callable[[], Mapping[str, str]] = capture_environment,
    ):
        self.options = options
        self.resolver = resolver or PropertyResolver()
        self.environment_provider = environment_provider

    def resources(self) -> list[Resource]:
        """Build the declared resources in load order (files first, then URLs)."""
        resources: list[Resource] = [FileResource(Path(f)) for f in self.options.files]
        resources.extend(UrlResource(url, self.options.classpath) for url in self.options.urls)
        return resources

    def load(self, target: dict[str, str]) -> dict[str, str]:
        """
        Merge every declared resource into target, later resources winning.

        Raises:
            ConfigurationError: If both files and URLs are declared, or a URL is malformed
            ResourceUnavailableError: If a resource cannot be opened and quiet is off
            ResourceReadError: If an opened resource cannot be read
        """
        self.options.validate()
        for resource in self.resources():
            if resource.can_be_opened():
                self._load_resource(resource, target)
            else:
                self._missing(resource)
        return target

    def _load_resource(self, resource: Resource, target: dict[str, str]) -> None:
        logger.debug(f"Loading properties from {resource}")
        try:
            with resource.open_stream() as stream:
                load_properties(stream, target, self.options.encoding)
        except (OSError, ValueError) as e:
            raise ResourceReadError(str(resource), cause=e) from e

    def _missing(self, resource: Resource) -> None:
        if self.options.quiet:
            logger.info(f"Quiet processing - ignoring properties cannot be loaded from {resource}")
        else:
            raise ResourceUnavailableError(str(resource))

    def load_and_resolve(self, base: Mapping[str, object] | None = None, expand: bool = True) -> dict[str, str]:
        """
        Load all resources on top of base and resolve the merged map.

        Args:
            base: Existing properties to seed the working map with; only
                string values are used and base itself is never modified
            expand: Whether to substitute ``${...}`` placeholders

        Returns:
            New mapping of resolved properties
        """
        working = {k: v for k, v in (base or {}).items() if isinstance(k, str) and isinstance(v, str)}
        self.load(working)

        environment = None
        if uses_environment(working):
            environment = self.environment_provider()

        return self.resolver.resolve_all(working, environment, expand)
