"""Shared domain models for pgswitchover."""

import enum
import posixpath
from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_PORT, STANDBY_SIGNAL_FILE
from .errors import SwitchoverError


class SwitchoverStep(enum.Enum):
    """Position in the switchover sequence. Only ever advances."""

    START = 1
    DISCOVER_DATA_DIRECTORY = 2
    DISCOVER_STANDBY = 3
    FLUSH_WAL = 4
    CHECKPOINT = 5
    RECONFIGURE_PRIMARY = 6
    STOP_PRIMARY = 7
    MARK_AS_STANDBY = 8
    RESTART_AS_STANDBY = 9
    PROMOTE_REMOTE = 10
    DONE = 11

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def is_durable(self) -> bool:
        return self.value >= SwitchoverStep.RECONFIGURE_PRIMARY.value and self is not SwitchoverStep.DONE


@dataclass
class SwitchoverParameters:
    """Values discovered on the primary and consumed by later steps."""

    port: str = DEFAULT_PORT
    data_directory: Optional[str] = None
    standby_user: Optional[str] = None
    standby_address: Optional[str] = None

    def require(self, name: str) -> str:
        value = getattr(self, name)
        if value is None or not str(value).strip():
            raise SwitchoverError(f"Switchover parameter '{name}' is not available.")
        return str(value)

    @property
    def sentinel_path(self) -> str:
        return posixpath.join(self.require("data_directory"), STANDBY_SIGNAL_FILE)
