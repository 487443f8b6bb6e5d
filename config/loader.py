"""Environment-based settings loader.

Configuration priority (highest to lowest):
1. Explicit overrides passed to ``load_settings``
2. ``KEEPER_*`` environment variables
3. Schema defaults (config/schema.py)

Nested groups use a double underscore: ``KEEPER_CALLBACK__MAX_ATTEMPTS=5``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

from config.schema import KeeperSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "KEEPER_"
NESTED_DELIMITER = "__"


def _env_to_dict(env: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for raw_key, value in env.items():
        if not raw_key.startswith(ENV_PREFIX) or value == "":
            continue
        path = raw_key[len(ENV_PREFIX):].lower().split(NESTED_DELIMITER)
        node = data
        for part in path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ValueError(f"Conflicting environment keys for {raw_key}")
        node[path[-1]] = value
    return data


def _deep_merge(*dicts: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for d in dicts:
        for key, value in d.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = _deep_merge(result[key], value)
            else:
                result[key] = value
    return result


def load_settings(
    env: Mapping[str, str] | None = None,
    overrides: dict[str, Any] | None = None,
) -> KeeperSettings:
    """Build validated settings from the environment plus explicit overrides.

    Raises pydantic.ValidationError on invalid values.
    """
    env_data = _env_to_dict(os.environ if env is None else env)
    merged = _deep_merge(env_data, overrides or {})
    settings = KeeperSettings.model_validate(merged)
    logger.debug("Loaded settings: %s", settings.model_dump(mode="json"))
    return settings
