"""Connection string and command line builders."""

import shlex
import string
from typing import Dict, Iterable, List, Set

from pgswitchover.errors import SwitchoverError

COMMAND_PLACEHOLDERS = ("data_directory", "sentinel_path", "port")

_FORMATTER = string.Formatter()


def _quote_conninfo_value(value: str) -> str:
    if value and not any(char in value for char in " '\\\t\n"):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_conninfo(host: str, port: str, user: str) -> str:
    """Builds a libpq key/value connection string.

    Values are quoted following libpq rules when they contain whitespace,
    quotes or backslashes; nothing is truncated.
    """
    values = {"host": host, "port": port, "user": user}
    for key, value in values.items():
        if value is None or not str(value).strip():
            raise SwitchoverError(f"Cannot build connection string: '{key}' is empty.")
    return " ".join(f"{key}={_quote_conninfo_value(str(value))}" for key, value in values.items())


def _placeholders(argument: str, template: str) -> Set[str]:
    try:
        parsed = list(_FORMATTER.parse(argument))
    except ValueError as exc:
        raise SwitchoverError(f"Invalid command template '{template}': {exc}") from exc
    return {field_name for _, field_name, _, _ in parsed if field_name is not None}


def split_command_template(
    template: str, allowed: Iterable[str] = COMMAND_PLACEHOLDERS
) -> List[str]:
    """Splits a shell-style template, rejecting placeholders outside ``allowed``."""
    if not isinstance(template, str):
        raise SwitchoverError(
            f"Command template must be a string, got {type(template).__name__}: {template!r}"
        )

    try:
        arguments = shlex.split(template)
    except ValueError as exc:
        raise SwitchoverError(f"Invalid command template '{template}': {exc}") from exc

    if not arguments:
        raise SwitchoverError("Command template is empty.")

    allowed_names = set(allowed)
    for argument in arguments:
        for field_name in _placeholders(argument, template):
            if field_name not in allowed_names:
                raise SwitchoverError(
                    f"Unknown placeholder '{{{field_name}}}' in command template '{template}'."
                )
    return arguments


def build_command(template: str, **values: str) -> List[str]:
    """Splits a shell-style template and fills placeholders in each argument."""
    arguments = split_command_template(template, allowed=values.keys())

    substitutions: Dict[str, str] = {}
    for argument in arguments:
        for field_name in _placeholders(argument, template):
            value = values[field_name]
            if value is None or not str(value).strip():
                raise SwitchoverError(
                    f"Cannot build command '{template}': '{field_name}' is empty."
                )
            substitutions[field_name] = str(value)

    return [argument.format(**substitutions) for argument in arguments]
