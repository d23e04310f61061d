"""Domain errors for pgswitchover."""


class SwitchoverError(RuntimeError):
    """Raised when the switchover cannot continue safely."""


class DatabaseConnectionError(SwitchoverError):
    """Raised when a database endpoint rejects or drops the connection."""


class QueryError(SwitchoverError):
    """Raised when the server rejects a statement."""


class NotFoundError(SwitchoverError):
    """Raised when a query that must return a row returns none."""


class NoRowsError(NotFoundError):
    pass


class StandbyNotFoundError(NotFoundError):
    """Raised when no streaming replication client is connected to the primary."""


class ProcessError(SwitchoverError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode
