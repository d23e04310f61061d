"""Defaults shared by the CLI and the orchestrator."""

DEFAULT_PORT = "5432"
DEFAULT_LOCAL_CONNINFO = "dbname=postgres"
DEFAULT_ADMIN_USER = "postgres"
DEFAULT_ADMIN_DATABASE = "postgres"

STANDBY_SIGNAL_FILE = "standby.signal"
WALSENDER_BACKEND_TYPE = "walsender"

DEFAULT_STOP_COMMAND = "pg_ctl stop -D {data_directory} -m fast"
DEFAULT_MARK_COMMAND = "touch {sentinel_path}"
DEFAULT_START_COMMAND = "pg_ctl start -D {data_directory}"

DEFAULT_CONFIG_FILE = ".pgswitchover.yml"
