import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    DEFAULT_ADMIN_DATABASE,
    DEFAULT_ADMIN_USER,
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOCAL_CONNINFO,
    DEFAULT_MARK_COMMAND,
    DEFAULT_PORT,
    DEFAULT_START_COMMAND,
    DEFAULT_STOP_COMMAND,
)
from .core import PgSwitchover, SwitchoverError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command(context_settings={"help_option_names": ["-?", "--help"]})
@click.option(
    "-p",
    "--port",
    required=False,
    type=click.IntRange(1, 65535),
    default=None,
    help=f"Port the former primary uses to reach the new primary (default: {DEFAULT_PORT}).",
)
@click.option("-v", "--verbose", is_flag=True, default=None, help="Print each step as it runs.")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(port, verbose, config, log_file):
    """Demote the local PostgreSQL primary and promote its connected standby."""
    logger = logging.getLogger("pgswitchover")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except SwitchoverError as exc:
        raise click.ClickException(str(exc)) from exc

    port = _resolve_option(port, config_values, "port", default=DEFAULT_PORT)
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        switchover = PgSwitchover(
            port=port,
            verbose=verbose,
            local_conninfo=config_values.get("local_conninfo", DEFAULT_LOCAL_CONNINFO),
            admin_user=config_values.get("admin_user", DEFAULT_ADMIN_USER),
            admin_database=config_values.get("admin_database", DEFAULT_ADMIN_DATABASE),
            stop_command=config_values.get("stop_command", DEFAULT_STOP_COMMAND),
            mark_command=config_values.get("mark_command", DEFAULT_MARK_COMMAND),
            start_command=config_values.get("start_command", DEFAULT_START_COMMAND),
        )
    except SwitchoverError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(switchover.run())


if __name__ == "__main__":
    main()
