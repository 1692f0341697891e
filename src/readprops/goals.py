"""
Entry points that apply loaded properties to a host property store.

read_project_properties merges resolved properties into the store.
read_properties_as_command_line stores all properties as a single string of
``-Dkey=value`` arguments under one key.
"""

from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

from readprops.exceptions import ConfigurationError
from readprops.loader import LoadOptions, PropertiesLoader
from readprops.resolver import capture_environment
from readprops.utils.logging import get_logger

logger = get_logger("readprops.goals")


def to_command_line(properties: Mapping[str, str]) -> str:
    """
    Serialize properties as `` -Dkey=value`` tokens.

    Values containing a space are left out, since they would split into
    several command-line arguments.
    """
    return "".join(f" -D{key}={value}" for key, value in properties.items() if " " not in value)


def read_project_properties(
    project_properties: MutableMapping[str, Any],
    options: LoadOptions,
    environment_provider: Callable[[], Mapping[str, str]] = capture_environment,
) -> dict[str, str]:
    """
    Load, resolve and merge properties into the host property store.

    Nothing is written to project_properties unless loading and resolution
    both succeed.

    Args:
        project_properties: Host property store, updated in place
        options: Load options
        environment_provider: Source of environment variables for ``${env.NAME}``

    Returns:
        The resolved properties that were merged
    """
    loader = PropertiesLoader(options, environment_provider=environment_provider)
    resolved = loader.load_and_resolve(project_properties, expand=True)
    project_properties.update(resolved)
    logger.debug(f"Merged {len(resolved)} properties into project properties")
    return resolved


def read_properties_as_command_line(
    project_properties: MutableMapping[str, Any],
    options: LoadOptions,
    command_line_property_name: str | None,
    environment_provider: Callable[[], Mapping[str, str]] = capture_environment,
) -> str:
    """
    Load properties and store them as one command-line string.

    Values are used as written, without placeholder substitution.

    Args:
        project_properties: Host property store, updated in place
        options: Load options
        command_line_property_name: Key to store the command-line string under
        environment_provider: Source of environment variables

    Returns:
        The command-line string that was stored
    """
    if not command_line_property_name:
        raise ConfigurationError("A command-line property name is required")

    loader = PropertiesLoader(options, environment_provider=environment_provider)
    properties = loader.load_and_resolve(project_properties, expand=False)
    command_line = to_command_line(properties)
    project_properties[command_line_property_name] = command_line
    return command_line
