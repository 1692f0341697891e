"""
Option handling shared by the CLI commands.
"""

from pathlib import Path

import typer

from readprops.config.loader import ReadPropsConfig, load_config
from readprops.loader import LoadOptions
from readprops.utils.logging import setup_logging, setup_logging_from_config


def parse_defines(defines: list[str] | None) -> dict[str, str]:
    """Turn ``key=value`` strings from --define into a property mapping."""
    properties: dict[str, str] = {}
    for define in defines or []:
        key, sep, value = define.partition("=")
        if not key or not sep:
            raise typer.BadParameter(f"Expected key=value, got '{define}'", param_hint="--define")
        properties[key] = value
    return properties


def build_options(
    files: list[Path] | None,
    urls: list[str] | None,
    quiet: bool | None,
    config_path: Path | None,
    log_level: str,
) -> LoadOptions:
    """
    Build load options from CLI arguments and an optional options file.

    Command-line sources and flags take precedence over the options file.
    Logging is configured from the options file when it has a 'logging'
    section, otherwise at log_level.
    """
    config = load_config(config_path) if config_path is not None else ReadPropsConfig({})

    if "logging" in config:
        setup_logging_from_config(config.data, project_dir=config.base_dir)
    else:
        setup_logging(level=log_level)

    return config.to_options(files=files, urls=urls, quiet=quiet)
