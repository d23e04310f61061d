"""YAML configuration for pgswitchover.

Values read here are only defaults: CLI options override them. Each key is
type-checked on load so that a bad value is reported before the switchover
touches the primary.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from pgswitchover.errors import SwitchoverError


def _is_port(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


def _is_flag(value: Any) -> bool:
    return isinstance(value, bool)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class ConfigLoader:
    """Loads and validates the switchover's YAML configuration file."""

    KEY_CHECKS: Dict[str, Callable[[Any], bool]] = {
        "port": _is_port,
        "verbose": _is_flag,
        "log_file": _is_text,
        "local_conninfo": _is_text,
        "admin_user": _is_text,
        "admin_database": _is_text,
        "stop_command": _is_text,
        "mark_command": _is_text,
        "start_command": _is_text,
    }

    EXPECTED_TYPES = {
        _is_port: "an integer port",
        _is_flag: "true or false",
        _is_text: "a non-empty string",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise SwitchoverError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise SwitchoverError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise SwitchoverError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(str(key) for key in set(parsed.keys()) - set(self.KEY_CHECKS))
        if unknown:
            raise SwitchoverError(f"Unknown configuration keys: {', '.join(unknown)}")

        for key, value in parsed.items():
            check = self.KEY_CHECKS[key]
            if not check(value):
                raise SwitchoverError(
                    f"Configuration key '{key}' must be {self.EXPECTED_TYPES[check]}, got {value!r}."
                )

        return parsed
