import pytest

from xtbuild.errors_catalog import actionable_error


def test_actionable_error_includes_suggested_action():
    message = actionable_error("config_not_found", path="/tmp/config.yml")
    assert "Config file not found: /tmp/config.yml" in message
    assert "Suggested action:" in message


def test_actionable_error_rejects_unknown_code():
    with pytest.raises(KeyError, match="Unknown error catalog key"):
        actionable_error("does_not_exist")
