"""PostgreSQL session service for pgswitchover."""

from typing import Any, Optional, Sequence, Tuple

import psycopg2

from pgswitchover.constants import (
    DEFAULT_ADMIN_DATABASE,
    DEFAULT_ADMIN_USER,
    DEFAULT_LOCAL_CONNINFO,
)
from pgswitchover.errors import DatabaseConnectionError, NoRowsError, QueryError
from pgswitchover.errors_catalog import actionable_error


class DatabaseSession:
    """Owns a single connection to one PostgreSQL endpoint.

    A session is opened either against the local server (``open_local``) or a
    remote node (``open_remote``), and must be closed exactly once. Used as a
    context manager the connection is released on every exit path.
    """

    def __init__(
        self,
        logger,
        local_conninfo: str = DEFAULT_LOCAL_CONNINFO,
        admin_user: str = DEFAULT_ADMIN_USER,
        admin_database: str = DEFAULT_ADMIN_DATABASE,
        connect=psycopg2.connect,
    ):
        self.logger = logger
        self.local_conninfo = local_conninfo
        self.admin_user = admin_user
        self.admin_database = admin_database
        self._connect = connect
        self.connection = None
        self.target: Optional[str] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_open(self) -> bool:
        return self.connection is not None

    def open_local(self):
        self._open("local server", dsn=self.local_conninfo)
        return self.connection

    def open_remote(self, host: str, port: str):
        self._open(
            f"{host}:{port}",
            host=host,
            port=port,
            user=self.admin_user,
            dbname=self.admin_database,
        )
        return self.connection

    def _open(self, target: str, dsn: Optional[str] = None, **kwargs):
        if self.connection is not None:
            raise DatabaseConnectionError(f"Session already connected to {self.target}.")

        self.logger.debug("Connecting to %s", target)
        try:
            if dsn is not None:
                connection = self._connect(dsn, **kwargs)
            else:
                connection = self._connect(**kwargs)
        except psycopg2.Error as exc:
            message = actionable_error("connection_failed", target=target)
            raise DatabaseConnectionError(f"{message}\n{str(exc).strip()}") from exc

        self.connection = connection
        self.target = target
        try:
            connection.autocommit = True
            with connection.cursor() as cursor:
                cursor.execute("SET search_path = pg_catalog")
        except psycopg2.Error as exc:
            self.close()
            raise DatabaseConnectionError(
                f"Could not prepare session on {target}: {str(exc).strip()}"
            ) from exc

    def _execute(self, sql: str, params: Optional[Sequence[Any]] = None, fetch: bool = False):
        if self.connection is None:
            raise QueryError(f"No open connection for statement: {sql}")

        self.logger.debug("Executing on %s: %s", self.target, sql)
        try:
            with self.connection.cursor() as cursor:
                cursor.execute(sql, params)
                if fetch:
                    return cursor.fetchall()
                return None
        except psycopg2.Error as exc:
            raise QueryError(f"Statement failed: {sql}\n{str(exc).strip()}") from exc

    def query_row(
        self, sql: str, param: Optional[str] = None, columns: int = 2
    ) -> Tuple[str, ...]:
        params = None if param is None else (param,)
        rows = self._execute(sql, params, fetch=True)
        if not rows:
            raise NoRowsError(f"Statement returned no rows: {sql} [{param}]")

        first_row = rows[0]
        if len(first_row) < columns:
            raise QueryError(
                f"Statement returned {len(first_row)} column(s), expected {columns}: {sql}"
            )

        values = []
        for value in first_row[:columns]:
            if value is None or not str(value).strip():
                raise QueryError(f"Statement returned an empty value: {sql} [{param}]")
            values.append(str(value))
        return tuple(values)

    def query_scalar(self, sql: str, param: Optional[str] = None) -> str:
        return self.query_row(sql, param, columns=1)[0]

    def exec_command(self, sql: str, params: Optional[Sequence[Any]] = None):
        self._execute(sql, params)

    def close(self):
        if self.connection is None:
            return

        connection, target = self.connection, self.target
        self.connection = None
        self.target = None
        try:
            connection.close()
        except psycopg2.Error as exc:
            self.logger.warning("Error while closing connection to %s: %s", target, exc)
        else:
            self.logger.debug("Closed connection to %s", target)
