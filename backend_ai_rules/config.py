"""Configuration loading for the AGENTS.md provisioner.

A consuming project may place ``.ai-rules.yml`` (or ``.ai-rules.json``) in its
root to pick the package layout, the file names, and whether the rules
directory is provisioned alongside ``AGENTS.md``. Missing files yield the
defaults below.
"""
from __future__ import annotations

import copy
import json
from pathlib import Path, PurePath
from typing import Dict

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

CONFIG_FILE = ".ai-rules.yml"
LAYOUTS = ("namespaced", "flat")

DEFAULTS: Dict = {
    "agents_file": "AGENTS.md",
    "layout": "namespaced",
    "package_directory": "backend_ai_rules",
    "rules": {
        "copy": False,
        "source": "rules",
        "target": ".ai-rules",
    },
}

_SCHEMA: Dict = {
    "agents_file": str,
    "layout": str,
    "package_directory": str,
    "rules": dict,
}
_RULES_SCHEMA: Dict = {"copy": bool, "source": str, "target": str}


def default_config() -> Dict:
    return copy.deepcopy(DEFAULTS)


def _parse(cfg_path: Path, text: str):
    if cfg_path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in {cfg_path}: {exc}", cfg_path) from exc
    try:
        return YAML(typ="safe").load(text)
    except YAMLError as exc:
        raise ConfigError(f"invalid YAML in {cfg_path}: {exc}", cfg_path) from exc


def load_config(path: str | Path | None = None) -> Dict:
    """Load configuration from *path* or from ``.ai-rules.yml`` in the cwd.

    When the YAML file is absent its ``.json`` sibling is tried as well.
    Top-level keys replace the defaults; the nested ``rules`` mapping is
    merged key by key.
    """
    merged = default_config()
    cfg_path = Path(path or CONFIG_FILE)
    if not cfg_path.exists():
        cfg_path_json = cfg_path.with_suffix(".json")
        if not cfg_path_json.exists():
            return merged
        cfg_path = cfg_path_json
    try:
        text = cfg_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read {cfg_path}: {exc}", cfg_path) from exc

    data = _parse(cfg_path, text) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a mapping", cfg_path)

    rules = data.pop("rules", None) or {}
    if not isinstance(rules, dict):
        raise ConfigError(f"'rules' in {cfg_path} must be a mapping", cfg_path)
    merged.update(data)
    merged["rules"].update(rules)
    validate_config(merged, cfg_path)
    return merged


def _check_keys(values: Dict, expected: Dict, where: str, origin: Path | None) -> None:
    unknown = sorted(str(key) for key in values if key not in expected)
    if unknown:
        raise ConfigError(f"unknown key(s) {', '.join(unknown)} in {where}", origin)
    for key, kind in expected.items():
        if key not in values:
            raise ConfigError(f"missing key '{key}' in {where}", origin)
        value = values[key]
        if kind is str and not (isinstance(value, str) and value.strip()):
            raise ConfigError(f"'{key}' in {where} must be a non-empty string, got {value!r}", origin)
        if kind is bool and not isinstance(value, bool):
            raise ConfigError(f"'{key}' in {where} must be true or false, got {value!r}", origin)
        if kind is dict and not isinstance(value, dict):
            raise ConfigError(f"'{key}' in {where} must be a mapping", origin)


def validate_config(cfg: Dict, origin: Path | None = None) -> None:
    """Raise :class:`ConfigError` unless *cfg* has the expected keys and types."""
    where = str(origin) if origin is not None else "configuration"
    _check_keys(cfg, _SCHEMA, where, origin)
    _check_keys(cfg["rules"], _RULES_SCHEMA, f"'rules' of {where}", origin)

    if cfg["layout"] not in LAYOUTS:
        raise ConfigError(
            f"unknown layout {cfg['layout']!r} in {where}; expected one of {', '.join(LAYOUTS)}",
            origin,
        )
    target = PurePath(cfg["rules"]["target"])
    if target.is_absolute() or target.anchor or ".." in target.parts or target.parts in ((), (".",)):
        raise ConfigError(
            f"rules.target {cfg['rules']['target']!r} in {where} must be a directory inside the project root",
            origin,
        )
