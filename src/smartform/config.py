"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class EngineConfig:
    """Template engine configuration.

    Attributes:
        cache_max_entries: Cap on cached parsed templates (0 = unbounded)
        sort_map_iteration: Iterate objects in forEach by sorted key
        register_standard_functions: Register the standard library on new registries
        log_level: Logging level used by the CLI
    """

    cache_max_entries: int = 0
    sort_map_iteration: bool = False
    register_standard_functions: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Create config from environment variables.

        Variables:
            SMARTFORM_CACHE_MAX_ENTRIES: int, default 0
            SMARTFORM_SORT_MAP_ITERATION: bool, default false
            SMARTFORM_REGISTER_STANDARD_FUNCTIONS: bool, default true
            SMARTFORM_LOG_LEVEL: default WARNING

        Raises:
            ValueError: If a variable holds an unparseable value
        """
        defaults = cls()

        max_entries = os.environ.get("SMARTFORM_CACHE_MAX_ENTRIES")
        if max_entries:
            try:
                cache_max_entries = int(max_entries)
            except ValueError:
                raise ValueError(
                    f"SMARTFORM_CACHE_MAX_ENTRIES must be an integer, got {max_entries!r}"
                ) from None
            if cache_max_entries < 0:
                raise ValueError("SMARTFORM_CACHE_MAX_ENTRIES must be >= 0")
        else:
            cache_max_entries = defaults.cache_max_entries

        return cls(
            cache_max_entries=cache_max_entries,
            sort_map_iteration=_env_bool(
                "SMARTFORM_SORT_MAP_ITERATION", defaults.sort_map_iteration
            ),
            register_standard_functions=_env_bool(
                "SMARTFORM_REGISTER_STANDARD_FUNCTIONS",
                defaults.register_standard_functions,
            ),
            log_level=os.environ.get("SMARTFORM_LOG_LEVEL", defaults.log_level).upper(),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
