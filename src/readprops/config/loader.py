"""
Options file loading.

An options file is YAML with top-level ``files``, ``urls``, ``quiet``,
``classpath``, ``encoding`` and ``logging`` keys. String values may
reference environment variables as ``${VAR}``.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from readprops.exceptions import ConfigurationError
from readprops.loader import LoadOptions
from readprops.properties import DEFAULT_ENCODING
from readprops.utils.logging import get_logger

logger = get_logger("readprops.config")

_LIST_KEYS = ("files", "urls", "classpath")
_ENV_REFERENCE = re.compile(r"\$\{([^}]+)\}")


def substitute_environment(data: Any, path: str = "") -> Any:
    """
    Replace ``${VAR}`` in every string of an options value with the environment.

    A variable that is not set stays as written and is reported with the
    option it appears in, e.g. ``urls[1]`` or ``logging.file``.

    Args:
        data: Options mapping, list or scalar
        path: Option path of data within the file

    Returns:
        A copy of data with references substituted
    """
    if isinstance(data, dict):
        return {key: substitute_environment(value, f"{path}.{key}" if path else str(key)) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute_environment(item, f"{path}[{index}]") for index, item in enumerate(data)]
    if not isinstance(data, str):
        return data

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = os.environ.get(name)
        if value is None:
            logger.warning(f"Option '{path}': environment variable {name} is not set, keeping '{match.group(0)}'")
            return match.group(0)
        return value

    return _ENV_REFERENCE.sub(replace, data)


class ReadPropsConfig:
    """Options file contents with paths relative to the file's directory."""

    def __init__(self, data: dict[str, Any], base_dir: Path | None = None):
        self.data = data
        self.base_dir = base_dir or Path.cwd()

    def get(self, key: str, default: Any = None) -> Any:
        """Get an option value using dot notation."""
        value: Any = self.data
        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default
        return value

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def validate(self) -> None:
        """Validate option types, collecting every problem into one error."""
        errors = []

        for key in _LIST_KEYS:
            value = self.data.get(key)
            if value is not None and not (
                isinstance(value, list) and all(isinstance(item, str) for item in value)
            ):
                errors.append(f"'{key}' must be a list of strings, got {type(value).__name__}")

        quiet = self.data.get("quiet")
        if quiet is not None and not isinstance(quiet, bool):
            errors.append(f"'quiet' must be true or false, got {type(quiet).__name__}")

        encoding = self.data.get("encoding")
        if encoding is not None and not isinstance(encoding, str):
            errors.append(f"'encoding' must be a string, got {type(encoding).__name__}")

        logging_config = self.data.get("logging")
        if logging_config is not None and not isinstance(logging_config, dict):
            errors.append(f"'logging' must be a mapping, got {type(logging_config).__name__}")

        if errors:
            raise ConfigurationError("Invalid options file:\n  " + "\n  ".join(errors))

    def _path(self, value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self.base_dir / path

    def to_options(
        self,
        files: list[Path] | None = None,
        urls: list[str] | None = None,
        quiet: bool | None = None,
    ) -> LoadOptions:
        """
        Build LoadOptions, with any non-empty argument overriding the file.

        Args:
            files: Property files that replace the configured ones
            urls: URLs that replace the configured ones
            quiet: Quiet flag that replaces the configured one
        """
        classpath = self.data.get("classpath")
        return LoadOptions(
            files=list(files) if files else [self._path(f) for f in self.data.get("files") or []],
            urls=list(urls) if urls else list(self.data.get("urls") or []),
            quiet=quiet if quiet is not None else bool(self.data.get("quiet", False)),
            classpath=[self._path(p) for p in classpath] if classpath is not None else None,
            encoding=self.data.get("encoding") or DEFAULT_ENCODING,
        )


def load_config(path: Path) -> ReadPropsConfig:
    """
    Load a readprops options file.

    Args:
        path: Path to the YAML options file

    Returns:
        ReadPropsConfig with ${VAR} references substituted from the environment

    Raises:
        ConfigurationError: If the file is missing, unparseable or invalid
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(
            f"Options file not found: {path}",
            details={"path": str(path)},
        )

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            raise ConfigurationError(
                f"Error parsing {path.name} at line {mark.line + 1}, column {mark.column + 1}:\n"
                f"  {e}\n"
                f"  Suggestion: Check YAML syntax, ensure proper indentation and quotes",
                details={"path": str(path)},
            ) from e
        raise ConfigurationError(f"Error parsing {path.name}: {e}", details={"path": str(path)}) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read options file {path}: {e}", details={"path": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Options file must be a mapping, got {type(data).__name__}",
            details={"path": str(path)},
        )

    config = ReadPropsConfig(substitute_environment(data), base_dir=path.parent.resolve())
    config.validate()
    return config
