"""
pgswitchover - planned PostgreSQL primary/standby switchover
"""

__version__ = "0.1.0"

from .core import PgSwitchover
from .errors import SwitchoverError

__all__ = ["PgSwitchover", "SwitchoverError"]
