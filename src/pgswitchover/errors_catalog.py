"""Actionable error catalog for pgswitchover."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "standby_not_found": {
        "what": "Cannot find standby: no streaming replication client is connected to the primary.",
        "next": "Check `pg_stat_replication` on the primary and make sure the standby is streaming.",
    },
    "connection_failed": {
        "what": "Could not connect to {target}.",
        "next": "Verify the server is running and accepts connections for this role.",
    },
    "process_failed": {
        "what": "Command exited with status {returncode}: {command}",
        "next": "Run the command by hand to inspect its output before retrying.",
    },
    "partial_switchover": {
        "what": "Switchover stopped after these steps changed durable state: {steps}.",
        "next": (
            "Inspect the primary's postgresql.auto.conf, its process status and "
            "`standby.signal` in {data_directory}, then finish or revert by hand."
        ),
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
