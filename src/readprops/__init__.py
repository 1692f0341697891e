"""
readprops - load flat key=value properties from files, URLs and classpath
resources, and resolve ${key} / ${env.NAME} placeholders.
"""

__version__ = "0.1.0"

from readprops.exceptions import (
    CircularReferenceError,
    ConfigurationError,
    ReadPropsError,
    ResolutionError,
    ResourceError,
    ResourceReadError,
    ResourceUnavailableError,
    UnresolvedReferenceError,
)
from readprops.goals import read_project_properties, read_properties_as_command_line, to_command_line
from readprops.loader import LoadOptions, PropertiesLoader
from readprops.properties import dump_properties, load_properties, parse_properties
from readprops.resolver import PropertyResolver, capture_environment, uses_environment
from readprops.resources import FileResource, Resource, UrlResource
from readprops.utils.logging import get_logger, setup_logging, setup_logging_from_config

__all__ = [
    # Entry points
    "read_project_properties",
    "read_properties_as_command_line",
    "to_command_line",
    # Loading
    "LoadOptions",
    "PropertiesLoader",
    "FileResource",
    "UrlResource",
    "Resource",
    "load_properties",
    "parse_properties",
    "dump_properties",
    # Resolution
    "PropertyResolver",
    "capture_environment",
    "uses_environment",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    # Exceptions
    "ReadPropsError",
    "ConfigurationError",
    "ResourceError",
    "ResourceUnavailableError",
    "ResourceReadError",
    "ResolutionError",
    "UnresolvedReferenceError",
    "CircularReferenceError",
]
