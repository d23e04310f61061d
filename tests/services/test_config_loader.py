import pytest

from pgswitchover.errors import SwitchoverError
from pgswitchover.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".pgswitchover.yml"
    config_file.write_text(
        "port: 5433\nadmin_user: dba\nstop_command: systemctl stop postgresql\n",
        encoding="utf-8",
    )

    loader = ConfigLoader()
    loaded = loader.load(str(config_file))

    assert loaded["port"] == 5433
    assert loaded["admin_user"] == "dba"
    assert loaded["stop_command"] == "systemctl stop postgresql"


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".pgswitchover.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    loader = ConfigLoader()

    with pytest.raises(SwitchoverError, match="Unknown configuration keys"):
        loader.load(str(config_file))


def test_config_loader_reports_missing_file(tmp_path):
    loader = ConfigLoader()

    with pytest.raises(SwitchoverError, match="Config file not found"):
        loader.load(str(tmp_path / "missing.yml"))


def test_config_loader_accepts_numeric_string_port(tmp_path):
    config_file = tmp_path / ".pgswitchover.yml"
    config_file.write_text("port: '5433'\nverbose: true\n", encoding="utf-8")

    loaded = ConfigLoader().load(str(config_file))

    assert loaded == {"port": "5433", "verbose": True}


@pytest.mark.parametrize(
    "content, key",
    [
        ("stop_command: [pg_ctl, stop]\n", "stop_command"),
        ("start_command: ''\n", "start_command"),
        ("port: fifty\n", "port"),
        ("port: true\n", "port"),
        ("verbose: 'yes please'\n", "verbose"),
        ("admin_user: 42\n", "admin_user"),
        ("local_conninfo: null\n", "local_conninfo"),
    ],
)
def test_config_loader_rejects_mistyped_values(tmp_path, content, key):
    config_file = tmp_path / ".pgswitchover.yml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(SwitchoverError, match=f"Configuration key '{key}'"):
        ConfigLoader().load(str(config_file))
