"""Shared domain models for xtbuild."""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .constants import (
    CORE_EXTENSIONS_LOCATION,
    NPM_LOCATION,
    PRIVATE_EXTENSIONS_LOCATION,
    XTUPLE_EXTENSIONS_LOCATION,
)


@dataclass(frozen=True)
class BuildOptions:
    """Flags describing what a single build invocation should target."""

    database: Optional[str] = None
    extension: Optional[str] = None
    backup: Optional[str] = None
    source: Optional[str] = None
    config: Optional[str] = None
    initialize: bool = False
    keep_sql: bool = False
    populate_data: bool = False
    wipe_views: bool = False
    client_only: bool = False
    database_only: bool = False
    frozen: bool = False
    unregister: bool = False


@dataclass(frozen=True)
class BuildConfig:
    database_server: Dict[str, Any]
    databases: List[str]
    encryption_key_file: Optional[str] = None
    builders: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Credentials:
    """Database connection settings, copied per target database."""

    host: Optional[str]
    port: Optional[int]
    username: Optional[str]
    password: Optional[str]
    database: Optional[str] = None
    encryption_key_file: Optional[str] = None
    # remaining databaseServer settings, e.g. ssl options
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    # the database builder and the query service disagree on naming
    @property
    def hostname(self) -> Optional[str]:
        return self.host

    @property
    def user(self) -> Optional[str]:
        return self.username

    def for_database(self, database: str) -> "Credentials":
        return replace(self, database=database)

    def to_env(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self.host:
            env["PGHOST"] = str(self.host)
        if self.port:
            env["PGPORT"] = str(self.port)
        if self.username:
            env["PGUSER"] = str(self.username)
        if self.password is not None:
            env["PGPASSWORD"] = str(self.password)
        if self.database:
            env["PGDATABASE"] = self.database
        if self.encryption_key_file:
            env["XTBUILD_ENCRYPTION_KEY_FILE"] = self.encryption_key_file
        return env


@dataclass
class BuildSpecification:
    """One build job: a database, its ordered extension paths and mode flags."""

    database: str
    extensions: List[str]
    keep_sql: bool = False
    populate_data: bool = False
    wipe_views: bool = False
    client_only: bool = False
    database_only: bool = False
    frozen: bool = False
    initialize: bool = False
    backup: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "database": self.database,
            "extensions": list(self.extensions),
            "keepSql": self.keep_sql,
            "populateData": self.populate_data,
            "wipeViews": self.wipe_views,
            "clientOnly": self.client_only,
            "databaseOnly": self.database_only,
            "frozen": self.frozen,
        }
        if self.initialize:
            data["initialize"] = True
        if self.backup:
            data["backup"] = self.backup
        if self.source:
            data["source"] = self.source
        return data


@dataclass(frozen=True)
class ExtensionRow:
    ext_location: str
    ext_name: str
    ext_load_order: int = 0


@dataclass(frozen=True)
class QueryResult:
    rows: List[Dict[str, str]]

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class RepositoryLayout:
    """Filesystem locations of the checked-out application tree."""

    root: str

    @property
    def foundation_dir(self) -> str:
        return os.path.join(self.root, "foundation-database")

    @property
    def orm_dir(self) -> str:
        return os.path.join(self.root, "lib", "orm")

    @property
    def client_dir(self) -> str:
        return os.path.join(self.root, "enyo-client")

    @property
    def node_modules_dir(self) -> str:
        return os.path.join(self.root, "node_modules")

    @property
    def default_config_path(self) -> str:
        return os.path.join(self.root, "node-datasource", "config.yml")

    def core_extension_dir(self, name: str) -> str:
        return os.path.join(self.client_dir, "extensions", "source", name)

    def extension_path(self, location: str, name: str) -> Optional[str]:
        """Maps a registry location to a directory, or None when unknown."""
        parent = os.path.dirname(os.path.normpath(self.root))
        if location == CORE_EXTENSIONS_LOCATION:
            return self.core_extension_dir(name)
        if location == XTUPLE_EXTENSIONS_LOCATION:
            return os.path.join(parent, "xtuple-extensions", "source", name)
        if location == PRIVATE_EXTENSIONS_LOCATION:
            return os.path.join(parent, "private-extensions", "source", name)
        if location == NPM_LOCATION:
            return os.path.join(self.node_modules_dir, name)
        return None
