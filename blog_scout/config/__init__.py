"""Configuration helpers: YAML loading and pipeline settings."""

from .loader import load_config, load_settings, provider_options
from .settings import CollectionSettings

__all__ = ["CollectionSettings", "load_config", "load_settings", "provider_options"]
