"""Configuration loading and validation for lightsync YAML config files."""

from __future__ import annotations

import functools
import json
import logging
import os
from collections.abc import Hashable
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator, ValidationError

from lightsync.core.errors import ConfigLoadError, ConfigValidationError
from lightsync.core.model import FailurePolicy

LOGGER = logging.getLogger(__name__)
LOCAL_CONFIG_NAME = "lightsync.yaml"


class _StrictLoader(yaml.SafeLoader):
    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    None, None, f"duplicate key '{key}'", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True)
class LightsyncConfig:
    prefix: str
    num_lights: int
    light_wait_millis: int
    capture_wait_millis: int
    connect_timeout_s: float = 10.0
    write_timeout_s: float = 2.0
    failure_policy: FailurePolicy = FailurePolicy.STRICT
    brightness: int | None = None
    capture_downscale: int | None = None
    source: Path | None = None


@functools.lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema = json.loads(resources.files("lightsync.schemas").joinpath("config.schema.json").read_text("utf-8"))
    return Draft202012Validator(schema)


def _config_candidates() -> list[Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return [Path.cwd() / LOCAL_CONFIG_NAME, xdg_config / "lightsync/config.yaml"]


def build_config(doc: dict[str, Any], source: Path | None = None) -> LightsyncConfig:
    try:
        _validator().validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    return LightsyncConfig(
        prefix=doc["prefix"],
        num_lights=int(doc["num_lights"]),
        light_wait_millis=int(doc["light_wait_millis"]),
        capture_wait_millis=int(doc["capture_wait_millis"]),
        connect_timeout_s=float(doc.get("connect_timeout_s", 10.0)),
        write_timeout_s=float(doc.get("write_timeout_s", 2.0)),
        failure_policy=FailurePolicy(doc.get("failure_policy", "strict")),
        brightness=doc.get("brightness"),
        capture_downscale=doc.get("capture_downscale"),
        source=source,
    )


def find_config() -> Path | None:
    for candidate in _config_candidates():
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> LightsyncConfig:
    if path is None:
        path = find_config()
        if path is None:
            searched = ", ".join(str(p) for p in _config_candidates())
            raise ConfigLoadError(f"No config file found. Searched: {searched}")

    try:
        doc = yaml.load(path.read_text(encoding="utf-8"), Loader=_StrictLoader)
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(doc, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")

    config = build_config(doc, source=path)
    LOGGER.info(
        "Loaded %s: prefix=%s num_lights=%d light_wait_millis=%d capture_wait_millis=%d",
        path,
        config.prefix,
        config.num_lights,
        config.light_wait_millis,
        config.capture_wait_millis,
    )
    return config
