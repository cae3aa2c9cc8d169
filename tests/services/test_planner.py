import os

import pytest

from xtbuild.errors import BuildValidationError
from xtbuild.models import BuildConfig, BuildOptions, Credentials, RepositoryLayout
from xtbuild.services.planner import (
    BuildPlanner,
    ConflictingSources,
    ContradictoryModes,
    ExplicitExtensionRequest,
    InitializeRequest,
    MalformedInitialize,
    RegisteredExtensionsRequest,
    classify,
    resolve_path,
    validate,
)


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class FakeDiscovery:
    def __init__(self):
        self.calls = []

    def discover_all(self, databases, credentials, options):
        self.calls.append(list(databases))
        return ["spec-for-" + database for database in databases]


LAYOUT = RepositoryLayout(root="/opt/xtuple")
CONFIG = BuildConfig(database_server={}, databases=["dev", "demo"])
CREDENTIALS = Credentials(host="localhost", port=5432, username="admin", password="admin")


def _planner(discovery=None):
    return BuildPlanner(DummyLogger(), LAYOUT, discovery or FakeDiscovery())


def _plan(options, discovery=None):
    request = validate(classify(options))
    return _planner(discovery).plan(request, options, CONFIG, CREDENTIALS)


@pytest.mark.parametrize(
    "options,expected",
    [
        (BuildOptions(client_only=True, database_only=True, backup="a", source="b"), ContradictoryModes),
        (BuildOptions(backup="a", source="b", initialize=True, database="dev"), ConflictingSources),
        (BuildOptions(initialize=True, database="dev", source="src"), InitializeRequest),
        (
            BuildOptions(initialize=True, database="dev", backup="x", extension="foundation-database"),
            InitializeRequest,
        ),
        (BuildOptions(initialize=True, database="dev"), MalformedInitialize),
        (BuildOptions(initialize=True, backup="x"), MalformedInitialize),
        (BuildOptions(initialize=True, database="dev", backup="x", extension="crm"), MalformedInitialize),
        (BuildOptions(source="src", extension="crm"), MalformedInitialize),
        (BuildOptions(extension="crm", unregister=True), ExplicitExtensionRequest),
        (BuildOptions(database="dev"), RegisteredExtensionsRequest),
        (BuildOptions(), RegisteredExtensionsRequest),
    ],
)
def test_classify_checks_in_priority_order(options, expected):
    assert isinstance(classify(options), expected)


@pytest.mark.parametrize(
    "options,match",
    [
        (BuildOptions(client_only=True, database_only=True), "Make up your mind"),
        (BuildOptions(backup="a.backup", source="src"), "backup or from a source tree but not both"),
        (BuildOptions(initialize=True), "single database"),
    ],
)
def test_invalid_requests_raise_validation_errors(options, match):
    discovery = FakeDiscovery()

    with pytest.raises(BuildValidationError, match=match):
        _plan(options, discovery)

    assert discovery.calls == []


def test_initialize_from_absolute_source_uses_full_extension_list():
    specs = _plan(BuildOptions(initialize=True, database="acme", source="/tmp/src", populate_data=True))

    assert len(specs) == 1
    spec = specs[0]
    assert spec.database == "acme"
    assert spec.initialize is True
    assert spec.source == "/tmp/src"
    assert spec.backup is None
    assert spec.populate_data is True
    core = os.path.join("/opt/xtuple", "enyo-client", "extensions", "source")
    assert spec.extensions == [
        os.path.join("/opt/xtuple", "foundation-database"),
        os.path.join("/opt/xtuple", "lib", "orm"),
        os.path.join("/opt/xtuple", "enyo-client"),
        os.path.join(core, "crm"),
        os.path.join(core, "project"),
        os.path.join(core, "sales"),
        os.path.join(core, "billing"),
        os.path.join(core, "purchasing"),
        os.path.join(core, "oauth2"),
    ]


def test_initialize_resolves_relative_backup(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    spec = _plan(BuildOptions(initialize=True, database="acme", backup="rel/path.sql"))[0]

    assert spec.backup == os.path.join(os.getcwd(), "rel/path.sql")
    assert spec.source is None


def test_initialize_with_foundation_only():
    spec = _plan(
        BuildOptions(initialize=True, database="acme", backup="/b.backup", extension="foundation-database")
    )[0]

    assert spec.extensions == ["foundation-database"]


def test_explicit_extension_targets_every_configured_database(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    specs = _plan(BuildOptions(extension="source/inventory", frozen=True, keep_sql=True))

    assert [spec.database for spec in specs] == ["dev", "demo"]
    for spec in specs:
        assert spec.extensions == [os.path.join(os.getcwd(), "source/inventory")]
        assert spec.frozen is True
        assert spec.keep_sql is True
        assert spec.initialize is False


def test_explicit_extension_for_single_database():
    specs = _plan(BuildOptions(extension="/abs/ext", database="dev"))

    assert len(specs) == 1
    assert specs[0].database == "dev"
    assert specs[0].extensions == ["/abs/ext"]


def test_registered_extensions_are_discovered_per_database():
    discovery = FakeDiscovery()

    assert _plan(BuildOptions(), discovery) == ["spec-for-dev", "spec-for-demo"]
    assert _plan(BuildOptions(database="other"), discovery) == ["spec-for-other"]
    assert discovery.calls == [["dev", "demo"], ["other"]]


def test_resolve_path_keeps_absolute_paths(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert resolve_path("/abs/ext") == "/abs/ext"
    assert resolve_path("ext") == os.path.join(os.getcwd(), "ext")
