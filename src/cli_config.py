"""Configuration file loading and runtime overrides for tunables on ``Constants``.

Config is YAML (or JSON by extension) and is looked up, first match wins:
``--config``, ``$SRCPIN_CONFIG``, ``./srcpin.yml``, ``~/.config/srcpin/srcpin.yml``.

Example::

    http:
      timeout: 10
      user_agent: my-tool/1.0
    registries:
      npm:
        url: https://registry.npmjs.org/
    hosts:
      allowed: [github.com, gitlab.com, bitbucket.org, codeberg.org]
    github:
      api_base: https://api.github.com
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    "srcpin.yml",
    os.path.join("~", ".config", "srcpin", "srcpin.yml"),
]

REGISTRY_URL_KEYS = {
    "npm": "REGISTRY_URL_NPM",
    "pypi": "REGISTRY_URL_PYPI",
    "crates": "REGISTRY_URL_CRATES",
    "maven": "REGISTRY_URL_MAVEN",
    "maven_repo": "REGISTRY_URL_MAVEN_REPO",
    "nuget": "REGISTRY_URL_NUGET_V3",
    "packagist": "REGISTRY_URL_PACKAGIST",
}

API_BASE_KEYS = {
    "github": "GITHUB_API_BASE",
    "gitlab": "GITLAB_API_BASE",
    "bitbucket": "BITBUCKET_API_BASE",
}


def find_config_path(explicit: Optional[str] = None) -> Optional[str]:
    """Return the first config path that applies, or None."""
    if explicit:
        return explicit
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path and env_path.strip():
        return env_path.strip()
    for candidate in DEFAULT_CONFIG_PATHS:
        path = os.path.expanduser(candidate)
        if os.path.isfile(path):
            return path
    return None


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML/JSON mapping from ``path``.

    A missing or unreadable file yields an empty mapping with a logged
    message; the CLI keeps running on built-in defaults.
    """
    if not path:
        return {}
    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error("Failed to load config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a mapping; ignoring it", path)
        return {}
    return data


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name)
    return value if isinstance(value, dict) else {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply recognised keys from a loaded config onto ``Constants``."""
    http = _section(cfg, "http")
    if http.get("timeout") is not None:
        try:
            Constants.REQUEST_TIMEOUT = float(http["timeout"])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid http.timeout: %r", http["timeout"])
    if isinstance(http.get("user_agent"), str) and http["user_agent"].strip():
        Constants.USER_AGENT = http["user_agent"].strip()

    for name, section in _section(cfg, "registries").items():
        attr = REGISTRY_URL_KEYS.get(str(name).lower())
        url = section.get("url") if isinstance(section, dict) else None
        if attr and isinstance(url, str) and url.strip():
            setattr(Constants, attr, url.strip())
        else:
            logger.debug("Ignoring unknown registry config key: %s", name)

    allowed = _section(cfg, "hosts").get("allowed")
    if isinstance(allowed, list) and allowed:
        Constants.ALLOWED_GIT_HOSTS = [str(h).strip().lower() for h in allowed if str(h).strip()]

    for name, attr in API_BASE_KEYS.items():
        base = _section(cfg, name).get("api_base")
        if isinstance(base, str) and base.strip():
            setattr(Constants, attr, base.strip())

    known = {"http", "registries", "hosts"} | set(API_BASE_KEYS)
    for key in cfg:
        if key not in known:
            logger.debug("Ignoring unknown config key: %s", key)


def apply_cli_overrides(args) -> None:
    """Apply CLI flags last so they win over file values."""
    timeout = getattr(args, "TIMEOUT", None)
    if timeout is not None:
        Constants.REQUEST_TIMEOUT = float(timeout)


def configure_from_args(args) -> Dict[str, Any]:
    """Load the applicable config file, apply it, then apply CLI overrides."""
    cfg = load_config(find_config_path(getattr(args, "CONFIG", None)))
    apply_config(cfg)
    apply_cli_overrides(args)
    return cfg
