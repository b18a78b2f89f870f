"""
Settings loading: defaults, then YAML file, then IMGALLOC_* environment.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import structlog
import yaml
from pydantic import ValidationError

from imgalloc.errors import ConfigurationError
from imgalloc.models import Settings

log = structlog.get_logger(__name__)

IMGALLOC_CONFIG_FILE = ".imgalloc.yaml"
ENV_PREFIX = "IMGALLOC_"


def load_config_file(config_file: Path) -> Dict[str, Any]:
    """Load raw settings from a YAML file."""
    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"cannot read {config_file}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file}: expected a mapping at top level")
    return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect IMGALLOC_<FIELD> variables that name a settings field."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for name in Settings.model_fields:
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return overrides


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """
    Build Settings from every source, lowest precedence first.

    Without an explicit ``config_file`` a ``.imgalloc.yaml`` in the working
    directory is used when present. ``None`` overrides are ignored so that
    unset CLI flags do not mask file or environment values.
    """
    data: Dict[str, Any] = {}

    if config_file is None:
        default_file = Path.cwd() / IMGALLOC_CONFIG_FILE
        if default_file.exists():
            config_file = default_file
    if config_file is not None:
        data.update(load_config_file(Path(config_file)))
        log.debug("config.loaded", path=str(config_file))

    data.update(env_overrides(environ))
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"invalid settings: {problems}") from e
