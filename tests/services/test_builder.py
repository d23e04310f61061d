import pytest

from pgswitchover.errors import SwitchoverError
from pgswitchover.services.builder import build_command, build_conninfo, split_command_template


def test_build_conninfo_contains_host_port_and_user():
    assert build_conninfo("10.0.0.5", "5433", "repl_user") == "host=10.0.0.5 port=5433 user=repl_user"


def test_build_conninfo_quotes_values_with_special_characters():
    conninfo = build_conninfo("10.0.0.5", "5432", "o'brien admin")

    assert conninfo == "host=10.0.0.5 port=5432 user='o\\'brien admin'"


def test_build_conninfo_rejects_empty_values():
    with pytest.raises(SwitchoverError, match="'user' is empty"):
        build_conninfo("10.0.0.5", "5432", " ")


def test_build_command_substitutes_each_argument():
    cmd = build_command(
        "pg_ctl stop -D {data_directory} -m fast",
        data_directory="/var/lib/pgsql/data",
        sentinel_path="/var/lib/pgsql/data/standby.signal",
    )

    assert cmd == ["pg_ctl", "stop", "-D", "/var/lib/pgsql/data", "-m", "fast"]


def test_build_command_keeps_paths_with_spaces_as_one_argument():
    cmd = build_command("touch {sentinel_path}", sentinel_path="/srv/pg data/standby.signal")

    assert cmd == ["touch", "/srv/pg data/standby.signal"]


def test_build_command_rejects_unknown_placeholder():
    with pytest.raises(SwitchoverError, match="Unknown placeholder"):
        build_command("pg_ctl start -D {pgdata}", data_directory="/data")


def test_build_command_rejects_empty_template():
    with pytest.raises(SwitchoverError, match="empty"):
        build_command("   ")


def test_split_command_template_accepts_known_placeholders():
    arguments = split_command_template("pg_ctl start -D {data_directory} -o '-p {port}'")

    assert arguments == ["pg_ctl", "start", "-D", "{data_directory}", "-o", "-p {port}"]


def test_split_command_template_rejects_non_string():
    with pytest.raises(SwitchoverError, match="must be a string"):
        split_command_template(["pg_ctl", "stop"])
