import pytest

from pgswitchover.errors import NoRowsError


class FakeSession:
    def __init__(self, harness):
        self.harness = harness
        self.target = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_open(self):
        return self.target is not None

    def open_local(self):
        self.harness.record("open_local")
        if self.harness.fail_on == "open_local":
            raise self.harness.error
        self.target = "local"

    def open_remote(self, host, port):
        self.harness.record("open_remote", host, port)
        if self.harness.fail_on == "open_remote":
            raise self.harness.error
        self.target = f"{host}:{port}"

    def query_scalar(self, sql, param=None):
        if param is None:
            self.harness.record("query_scalar", self.target, sql)
            return self.harness.promoted
        self.harness.record("query_scalar", param)
        return self.harness.data_directory

    def query_row(self, sql, param, columns=2):
        self.harness.record("query_row", param)
        if self.harness.standby is None:
            raise NoRowsError(f"Statement returned no rows: {sql} [{param}]")
        return self.harness.standby

    def exec_command(self, sql, params=None):
        self.harness.record("exec_command", self.target, sql, params)
        if self.harness.fail_on == sql:
            raise self.harness.error

    def close(self):
        if self.target is None:
            return
        self.harness.record("close", self.target)
        self.target = None


class FakeRunner:
    def __init__(self, harness):
        self.harness = harness

    def run(self, cmd):
        self.harness.record("run", *cmd)
        return self.harness.returncodes.pop(0) if self.harness.returncodes else 0


class SwitchoverHarness:
    """Records database and process calls in the order they happen."""

    def __init__(self):
        self.calls = []
        self.sessions = []
        self.data_directory = "/var/lib/pgsql/data"
        self.standby = ("repl_user", "10.0.0.5")
        self.promoted = "True"
        self.returncodes = []
        self.fail_on = None
        self.error = None
        self.runner = FakeRunner(self)

    def record(self, *call):
        self.calls.append(call)

    def session_factory(self):
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    def names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def harness():
    return SwitchoverHarness()
