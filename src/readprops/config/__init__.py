"""
Options file handling: YAML loading and environment substitution.
"""

from readprops.config.loader import ReadPropsConfig, load_config, substitute_environment

__all__ = [
    "load_config",
    "ReadPropsConfig",
    "substitute_environment",
]
