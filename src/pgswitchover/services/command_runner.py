"""Subprocess execution service for pgswitchover."""

import subprocess
from typing import List

COMMAND_NOT_FOUND = 127
COMMAND_NOT_EXECUTABLE = 126


class CommandRunner:
    """Runs external commands and reports their exit status.

    Output streams are inherited from the parent process. The runner never
    raises on a failed command; callers decide whether a status is fatal.
    """

    def __init__(self, logger):
        self.logger = logger

    def run(self, cmd: List[str]) -> int:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(cmd, check=False)
        except FileNotFoundError:
            self.logger.error("Required command not found: %s", cmd[0])
            return COMMAND_NOT_FOUND
        except OSError as exc:
            self.logger.error("Failed to execute command: %s. %s", cmd_str, exc)
            return COMMAND_NOT_EXECUTABLE

        if result.returncode != 0:
            self.logger.warning("Command failed (%s): %s", result.returncode, cmd_str)
        return result.returncode
