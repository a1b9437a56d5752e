"""Locate, read and validate mermaid-png.yaml."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import MermaidPngConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG = Path("mermaid-png.yaml")
USER_CONFIG = Path(".mermaid-png") / "config.yaml"

# ${NAME} or ${NAME:-fallback}; unset names without a fallback become "".
_ENV_REF = re.compile(r"\$\{(?P<name>\w+)(?::-(?P<fallback>[^}]*))?\}")


def config_search_paths(cli_path: str | None = None) -> list[Path]:
    """Candidate files in priority order: ``--config``, project, user."""
    paths = [PROJECT_CONFIG, Path.home() / USER_CONFIG]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return paths


def load_config(cli_path: str | None = None) -> MermaidPngConfig:
    """Return the config from the first non-empty file found, or the defaults.

    A ``--config`` path that does not exist is an error rather than a
    silent fall-through. Every problem is raised as ValueError naming the
    offending file.
    """
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_search_paths(cli_path):
        if not path.is_file():
            continue
        settings = _read_config_file(path)
        if not settings:
            logger.debug("ignoring empty config %s", path)
            continue
        try:
            config = MermaidPngConfig.model_validate(expand_env_refs(settings))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("loaded config from %s", path)
        return config

    return MermaidPngConfig()


def _read_config_file(path: Path) -> dict[str, Any] | None:
    try:
        settings = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read config {path}: {e}") from e
    if settings is not None and not isinstance(settings, dict):
        raise ValueError(
            f"Invalid config in {path}: expected a mapping at the top level, "
            f"got {type(settings).__name__}"
        )
    return settings


def expand_env_refs(value: Any) -> Any:
    """Substitute environment references in every string inside *value*."""
    if isinstance(value, str):
        return _ENV_REF.sub(_lookup_env, value)
    if isinstance(value, dict):
        return {key: expand_env_refs(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_refs(item) for item in value]
    return value


def _lookup_env(match: re.Match[str]) -> str:
    return os.environ.get(match["name"], match["fallback"] or "")


# Default YAML template for `mermaid-png config init`
DEFAULT_CONFIG_TEMPLATE = """\
# mermaid-png.yaml

# Browser rendering
render:
  viewport_width: 2400
  viewport_height: 1600
  page_timeout_ms: 60000
  render_timeout_ms: 45000     # wait for mermaid.run() to finish
  settle_timeout_ms: 15000     # wait for data-processed marker
  clip_margin: 10              # pixels around the diagram
  # mermaid_url: "${MERMAID_URL:-https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js}"
  theme: "default"
  security_level: "loose"      # strict | loose | antiscript | sandbox
  headless: true

# Output defaults (CLI flags override)
output:
  directory: "./images"
  format: "png"                # png | jpeg
  quality: 85                  # jpeg only, 1-100
  scale: 2                     # device scale factor, 1-5
  converted_suffix: "-converted"
  fixed_suffix: "-fixed"

# Logging
log_level: "info"              # debug | info | warn | error
"""
