import subprocess

from xtbuild.models import Credentials
from xtbuild.services.query import QueryService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


class FakeRunner:
    def __init__(self, stdout):
        self.stdout = stdout
        self.calls = []

    def run(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout=self.stdout, stderr="")


def _credentials():
    return Credentials(host="db.local", port=5432, username="admin", password="secret", database="dev")


def test_query_parses_csv_rows():
    runner = FakeRunner("ext_name,ext_location,ext_load_order\ncrm,/core-extensions,0\nfoo,npm,1\n")
    service = QueryService(logger=DummyLogger(), command_runner=runner)

    result = service.query("select * from xt.ext", _credentials())

    assert result.row_count == 2
    assert result.rows[1] == {"ext_name": "foo", "ext_location": "npm", "ext_load_order": "1"}


def test_query_with_no_output_has_no_rows():
    service = QueryService(logger=DummyLogger(), command_runner=FakeRunner(""))

    assert service.query("select 1", _credentials()).row_count == 0


def test_batch_runs_in_single_transaction_with_password_in_env():
    runner = FakeRunner("")
    service = QueryService(logger=DummyLogger(), command_runner=runner)

    service.query(["update t set a = 1", "select * from t"], _credentials())

    cmd, kwargs = runner.calls[0]
    assert "--single-transaction" in cmd
    assert cmd[-8:] == [
        "-c",
        "\\echo --xtbuild-result--",
        "-c",
        "update t set a = 1",
        "-c",
        "\\echo --xtbuild-result--",
        "-c",
        "select * from t",
    ]
    assert cmd[cmd.index("-d") + 1] == "dev"
    assert cmd[cmd.index("-h") + 1] == "db.local"
    assert kwargs["env"] == {"PGPASSWORD": "secret"}
    assert "secret" not in cmd


def test_query_keeps_only_the_last_result_set():
    runner = FakeRunner(
        "--xtbuild-result--\n"
        "js_init\n"
        "\n"
        "--xtbuild-result--\n"
        "--xtbuild-result--\n"
        "ext_name,ext_location,ext_load_order\n"
        "crm,/core-extensions,0\n"
    )
    service = QueryService(logger=DummyLogger(), command_runner=runner)

    result = service.query(
        ["select xt.js_init()", "update xt.ext set ext_name = ext_name", "select * from xt.ext"],
        _credentials(),
    )

    assert result.rows == [{"ext_name": "crm", "ext_location": "/core-extensions", "ext_load_order": "0"}]


def test_query_with_empty_last_result_set_has_no_rows():
    service = QueryService(
        logger=DummyLogger(),
        command_runner=FakeRunner("--xtbuild-result--\nrelname\next\n--xtbuild-result--\n"),
    )

    assert service.query(["select relname from pg_class", "update t set a = 1"], _credentials()).rows == []
