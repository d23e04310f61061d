import logging
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape

from .constants import (
    DEFAULT_ADMIN_DATABASE,
    DEFAULT_ADMIN_USER,
    DEFAULT_LOCAL_CONNINFO,
    DEFAULT_MARK_COMMAND,
    DEFAULT_PORT,
    DEFAULT_START_COMMAND,
    DEFAULT_STOP_COMMAND,
    WALSENDER_BACKEND_TYPE,
)
from .errors import NoRowsError, ProcessError, StandbyNotFoundError, SwitchoverError
from .errors_catalog import actionable_error
from .models import SwitchoverParameters, SwitchoverStep
from .services.builder import build_command, build_conninfo, split_command_template
from .services.command_runner import CommandRunner
from .services.database import DatabaseSession

console = Console()
error_console = Console(stderr=True)
logger = logging.getLogger("pgswitchover")

DATA_DIRECTORY_QUERY = "SELECT setting FROM pg_settings WHERE name = %s"
STANDBY_QUERY = (
    "SELECT usename, client_addr FROM pg_stat_activity "
    "WHERE backend_type = %s AND client_addr IS NOT NULL"
)
SWITCH_WAL_STATEMENT = "SELECT pg_switch_wal()"
CHECKPOINT_STATEMENT = "CHECKPOINT"
PRIMARY_CONNINFO_STATEMENT = "ALTER SYSTEM SET primary_conninfo = %s"
PROMOTE_STATEMENT = "SELECT pg_promote()"


class PgSwitchover:
    """Swaps the roles of the local primary and its connected standby.

    Steps run strictly in ``SwitchoverStep`` order. Any failure aborts the run;
    nothing already applied is rolled back.
    """

    def __init__(
        self,
        port: Union[str, int] = DEFAULT_PORT,
        verbose: bool = False,
        local_conninfo: str = DEFAULT_LOCAL_CONNINFO,
        admin_user: str = DEFAULT_ADMIN_USER,
        admin_database: str = DEFAULT_ADMIN_DATABASE,
        stop_command: str = DEFAULT_STOP_COMMAND,
        mark_command: str = DEFAULT_MARK_COMMAND,
        start_command: str = DEFAULT_START_COMMAND,
        session_factory: Optional[Callable[[], DatabaseSession]] = None,
        command_runner: Optional[CommandRunner] = None,
    ):
        self.verbose = verbose
        self.local_conninfo = local_conninfo
        self.admin_user = admin_user
        self.admin_database = admin_database
        self.stop_command = self._validate_command("stop_command", stop_command)
        self.mark_command = self._validate_command("mark_command", mark_command)
        self.start_command = self._validate_command("start_command", start_command)

        self.parameters = SwitchoverParameters(port=self._normalize_port(port))
        self.session_factory = session_factory or self._build_session
        self.command_runner = command_runner or CommandRunner(logger=logger)

        self.step: Optional[SwitchoverStep] = None
        self.current_step: Optional[SwitchoverStep] = None
        self.completed_steps: List[SwitchoverStep] = []
        self.primary_session: Optional[DatabaseSession] = None

    @staticmethod
    def _normalize_port(value: Union[str, int]) -> str:
        try:
            port = int(str(value).strip())
        except (TypeError, ValueError) as exc:
            raise SwitchoverError(f"--port must be an integer, got '{value}'.") from exc

        if not 1 <= port <= 65535:
            raise SwitchoverError(f"--port must be between 1 and 65535, got {port}.")
        return str(port)

    @staticmethod
    def _validate_command(name: str, template: str) -> str:
        try:
            split_command_template(template)
        except SwitchoverError as exc:
            raise SwitchoverError(f"Invalid {name}: {exc}") from exc
        return template

    def _build_session(self) -> DatabaseSession:
        return DatabaseSession(
            logger=logger,
            local_conninfo=self.local_conninfo,
            admin_user=self.admin_user,
            admin_database=self.admin_database,
        )

    def _next_step(self) -> SwitchoverStep:
        if self.step is None:
            return SwitchoverStep.START
        return SwitchoverStep(self.step.value + 1)

    def _run_step(self, step: SwitchoverStep, callback, *args, **kwargs):
        expected = self._next_step()
        if step is not expected:
            raise SwitchoverError(
                f"Step '{step.label}' cannot run before '{expected.label}'."
            )

        self.current_step = step
        if self.verbose:
            console.print(f"[blue]Step {step.value}: {step.label}...[/blue]")
        else:
            logger.debug("Starting step %s: %s", step.value, step.label)

        result = callback(*args, **kwargs)

        self.step = step
        self.current_step = None
        self.completed_steps.append(step)
        if self.verbose:
            console.print(f"[green]Step {step.value}: {step.label} done.[/green]")
        return result

    def _require_primary_session(self) -> DatabaseSession:
        if self.primary_session is None or not self.primary_session.is_open:
            raise SwitchoverError("The primary session is not open.")
        return self.primary_session

    def _run_process(self, template: str):
        cmd = build_command(
            template,
            data_directory=self.parameters.require("data_directory"),
            sentinel_path=self.parameters.sentinel_path,
            port=self.parameters.port,
        )
        returncode = self.command_runner.run(cmd)
        if returncode != 0:
            raise ProcessError(
                actionable_error("process_failed", returncode=str(returncode), command=" ".join(cmd)),
                returncode,
            )

    def open_primary_session(self):
        self.primary_session = self.session_factory()
        self.primary_session.open_local()

    def discover_data_directory(self) -> str:
        session = self._require_primary_session()
        data_directory = session.query_scalar(DATA_DIRECTORY_QUERY, "data_directory")
        self.parameters.data_directory = data_directory
        logger.info("Primary data directory: %s", data_directory)
        return data_directory

    def discover_standby(self):
        session = self._require_primary_session()
        try:
            standby_user, standby_address = session.query_row(
                STANDBY_QUERY, WALSENDER_BACKEND_TYPE
            )
        except NoRowsError as exc:
            raise StandbyNotFoundError(actionable_error("standby_not_found")) from exc

        self.parameters.standby_user = standby_user
        self.parameters.standby_address = standby_address
        logger.info("Found standby %s connected as %s", standby_address, standby_user)
        return standby_user, standby_address

    def flush_wal(self):
        self._require_primary_session().exec_command(SWITCH_WAL_STATEMENT)

    def checkpoint(self):
        self._require_primary_session().exec_command(CHECKPOINT_STATEMENT)

    def reconfigure_primary(self) -> str:
        session = self._require_primary_session()
        conninfo = build_conninfo(
            self.parameters.require("standby_address"),
            self.parameters.require("port"),
            self.parameters.require("standby_user"),
        )
        session.exec_command(PRIMARY_CONNINFO_STATEMENT, (conninfo,))
        logger.info("Primary will follow: %s", conninfo)
        return conninfo

    def stop_primary(self):
        self._require_primary_session().close()
        self._run_process(self.stop_command)

    def mark_as_standby(self):
        self._run_process(self.mark_command)

    def restart_as_standby(self):
        # The restarted server is not polled for readiness before promotion.
        self._run_process(self.start_command)

    def promote_remote(self):
        host = self.parameters.require("standby_address")
        port = self.parameters.require("port")
        with self.session_factory() as session:
            session.open_remote(host, port)
            promoted = session.query_scalar(PROMOTE_STATEMENT)
        if promoted.strip().lower() not in ("t", "true"):
            raise SwitchoverError(
                f"{host}:{port} did not finish promotion in time (pg_promote returned {promoted})."
            )
        logger.info("Promoted %s:%s to primary.", host, port)

    def close_sessions(self):
        if self.primary_session is not None:
            self.primary_session.close()

    def _report_partial_switchover(self):
        durable = [step.label for step in self.completed_steps if step.is_durable]
        if not durable:
            return
        logger.warning(
            actionable_error(
                "partial_switchover",
                steps=", ".join(durable),
                data_directory=self.parameters.data_directory or "<unknown>",
            )
        )

    def run(self) -> int:
        exit_code = 1

        try:
            logger.info("Starting switchover (target port %s)...", self.parameters.port)

            self._run_step(SwitchoverStep.START, self.open_primary_session)
            self._run_step(SwitchoverStep.DISCOVER_DATA_DIRECTORY, self.discover_data_directory)
            self._run_step(SwitchoverStep.DISCOVER_STANDBY, self.discover_standby)
            self._run_step(SwitchoverStep.FLUSH_WAL, self.flush_wal)
            self._run_step(SwitchoverStep.CHECKPOINT, self.checkpoint)
            self._run_step(SwitchoverStep.RECONFIGURE_PRIMARY, self.reconfigure_primary)
            self._run_step(SwitchoverStep.STOP_PRIMARY, self.stop_primary)
            self._run_step(SwitchoverStep.MARK_AS_STANDBY, self.mark_as_standby)
            self._run_step(SwitchoverStep.RESTART_AS_STANDBY, self.restart_as_standby)
            self._run_step(SwitchoverStep.PROMOTE_REMOTE, self.promote_remote)
            self.step = SwitchoverStep.DONE

            console.print(
                f"[bold green]Switchover complete: {self.parameters.standby_address} "
                "is now primary.[/bold green]"
            )
            exit_code = 0
            return exit_code

        except SwitchoverError as exc:
            failed_step = self.current_step.label if self.current_step else "run"
            error_console.print(f"[bold red]Error in {failed_step}:[/bold red] {escape(str(exc))}")
            logger.error(str(exc))
            self._report_partial_switchover()
            return exit_code
        except Exception as exc:
            error_console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            self._report_partial_switchover()
            return exit_code
        finally:
            self.close_sessions()
