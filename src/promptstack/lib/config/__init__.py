"""Configuration discovery and parsing helpers."""

from promptstack.lib.config._paths import resolve_repo_root
from promptstack.lib.config.settings import PromptstackConfig, config_path, load_config

__all__ = ["PromptstackConfig", "config_path", "load_config", "resolve_repo_root"]
