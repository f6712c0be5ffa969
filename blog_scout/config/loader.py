"""Configuration loading for blog_scout.

``config.yaml`` has two sections:

``collection``
    Pipeline thresholds and targets, validated into
    :class:`~blog_scout.config.settings.CollectionSettings`.
``providers``
    One mapping per adapter (``blog_search``, ``video_search``, ``llm``,
    ``crawler``, ``subtitles``) naming the ``provider`` plus its options.

Any string in the file may contain ``${VAR}`` or ``${VAR:default}``
placeholders; they are replaced from the environment when the file is read,
so credentials never have to be written into the YAML itself.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .settings import CollectionSettings


PLACEHOLDER = re.compile(r"\$\{(?P<name>[^:}]+)(?::(?P<default>[^}]*))?\}")


def _expand(node: Any) -> Any:
    if isinstance(node, str):
        return PLACEHOLDER.sub(lambda m: os.environ.get(m["name"], m["default"] or ""), node)
    if isinstance(node, list):
        return [_expand(item) for item in node]
    if isinstance(node, dict):
        return {key: _expand(value) for key, value in node.items()}
    return node


def load_config(path: str) -> Dict[str, Any]:
    """Read ``path`` and return the configuration with placeholders expanded.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    document = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    return _expand(document or {})


def load_settings(config: Dict[str, Any]) -> CollectionSettings:
    """Build :class:`CollectionSettings` from the ``collection`` section."""
    return CollectionSettings.model_validate(config.get("collection") or {})


def provider_options(config: Dict[str, Any], name: str) -> Tuple[str, Dict[str, Any]]:
    """Split ``providers.<name>`` into the provider id and its remaining options.

    A missing section selects the ``mock`` provider.
    """
    section = dict((config.get("providers") or {}).get(name) or {})
    provider = str(section.pop("provider", None) or "mock")
    return provider, section
