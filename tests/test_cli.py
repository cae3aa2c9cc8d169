from click.testing import CliRunner

import xtbuild.cli as cli_module
from xtbuild.errors import BuildValidationError


def _fake_builder(captured, result="Build succeeded.\n", error=None):
    class FakeBuilder:
        def __init__(self, root=None):
            captured["root"] = root

        def build(self, options):
            captured["options"] = options
            if error:
                raise error
            return result

    return FakeBuilder


def test_cli_maps_flags_to_build_options(monkeypatch):
    captured = {}
    monkeypatch.setattr(cli_module, "Builder", _fake_builder(captured))

    result = CliRunner().invoke(
        cli_module.main,
        [
            "-d",
            "dev",
            "-e",
            "../private-extensions/source/secret",
            "--keep-sql",
            "--wipe-views",
            "--frozen",
            "--config",
            "conf/local.yml",
            "--root",
            "/opt/xtuple",
        ],
    )

    assert result.exit_code == 0
    options = captured["options"]
    assert options.database == "dev"
    assert options.extension == "../private-extensions/source/secret"
    assert options.keep_sql is True
    assert options.wipe_views is True
    assert options.frozen is True
    assert options.populate_data is False
    assert options.config == "conf/local.yml"
    assert captured["root"] == "/opt/xtuple"
    assert "Build succeeded." in result.output


def test_cli_reports_build_errors(monkeypatch):
    captured = {}
    error = BuildValidationError("Make up your mind.")
    monkeypatch.setattr(cli_module, "Builder", _fake_builder(captured, error=error))

    result = CliRunner().invoke(cli_module.main, ["--client-only", "--database-only"])

    assert result.exit_code == 1
    assert "Make up your mind." in result.output
    assert captured["options"].client_only is True
    assert captured["options"].database_only is True
