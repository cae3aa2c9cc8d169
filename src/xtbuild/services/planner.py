"""Turns build options into an ordered list of build specifications.

Options are classified once into a request kind. Contradictory and malformed
requests are rejected before any configuration is read or any database is
queried.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Union

from xtbuild.constants import DEFAULT_EXTENSION_NAMES, FOUNDATION_EXTENSION
from xtbuild.errors import BuildValidationError
from xtbuild.errors_catalog import actionable_error
from xtbuild.models import (
    BuildConfig,
    BuildOptions,
    BuildSpecification,
    Credentials,
    RepositoryLayout,
)


@dataclass(frozen=True)
class ContradictoryModes:
    error_code: str = "contradictory_modes"


@dataclass(frozen=True)
class ConflictingSources:
    error_code: str = "conflicting_sources"


@dataclass(frozen=True)
class MalformedInitialize:
    error_code: str = "malformed_initialize"


@dataclass(frozen=True)
class InitializeRequest:
    database: str
    backup: Optional[str] = None
    source: Optional[str] = None
    extension: Optional[str] = None


@dataclass(frozen=True)
class ExplicitExtensionRequest:
    extension: str
    database: Optional[str] = None
    unregister: bool = False


@dataclass(frozen=True)
class RegisteredExtensionsRequest:
    database: Optional[str] = None


InvalidRequest = Union[ContradictoryModes, ConflictingSources, MalformedInitialize]
BuildRequest = Union[InitializeRequest, ExplicitExtensionRequest, RegisteredExtensionsRequest]
RequestKind = Union[InvalidRequest, BuildRequest]


def resolve_path(path: str) -> str:
    """Leaves paths starting with a separator alone, joins the rest to the cwd."""
    if path.startswith(os.sep):
        return path
    return os.path.join(os.getcwd(), path)


def classify(options: BuildOptions) -> RequestKind:
    if options.client_only and options.database_only:
        return ContradictoryModes()

    if options.backup and options.source:
        return ConflictingSources()

    if (
        options.initialize
        and (options.backup or options.source)
        and options.database
        and (not options.extension or options.extension == FOUNDATION_EXTENSION)
    ):
        return InitializeRequest(
            database=options.database,
            backup=options.backup,
            source=options.source,
            extension=options.extension,
        )

    if options.initialize or options.backup or options.source:
        return MalformedInitialize()

    if options.extension:
        return ExplicitExtensionRequest(
            extension=options.extension,
            database=options.database,
            unregister=options.unregister,
        )

    return RegisteredExtensionsRequest(database=options.database)


def validate(request: RequestKind) -> BuildRequest:
    if isinstance(request, (ContradictoryModes, ConflictingSources, MalformedInitialize)):
        raise BuildValidationError(actionable_error(request.error_code))
    return request


class BuildPlanner:
    """Produces build specifications for a validated request."""

    def __init__(self, logger, layout: RepositoryLayout, discovery_service):
        self.logger = logger
        self.layout = layout
        self.discovery_service = discovery_service

    @staticmethod
    def target_databases(database: Optional[str], config: BuildConfig) -> List[str]:
        if database:
            return [database]
        return list(config.databases)

    def initialize_extensions(self) -> List[str]:
        return [
            self.layout.foundation_dir,
            self.layout.orm_dir,
            self.layout.client_dir,
        ] + [self.layout.core_extension_dir(name) for name in DEFAULT_EXTENSION_NAMES]

    def plan_initialize(self, request: InitializeRequest, options: BuildOptions) -> List[BuildSpecification]:
        # a bare foundation build skips the ORM and client layers
        extensions = [request.extension] if request.extension else self.initialize_extensions()
        spec = BuildSpecification(
            database=request.database,
            extensions=extensions,
            keep_sql=options.keep_sql,
            populate_data=options.populate_data,
            wipe_views=options.wipe_views,
            client_only=options.client_only,
            database_only=options.database_only,
            initialize=True,
            backup=resolve_path(request.backup) if request.backup else None,
            source=resolve_path(request.source) if request.source else None,
        )
        return [spec]

    def plan_extension(
        self,
        request: ExplicitExtensionRequest,
        options: BuildOptions,
        config: BuildConfig,
    ) -> List[BuildSpecification]:
        extension = resolve_path(request.extension)
        return [
            BuildSpecification(
                database=database,
                extensions=[extension],
                keep_sql=options.keep_sql,
                populate_data=options.populate_data,
                wipe_views=options.wipe_views,
                client_only=options.client_only,
                database_only=options.database_only,
                frozen=options.frozen,
            )
            for database in self.target_databases(request.database, config)
        ]

    def plan_registered(
        self,
        request: RegisteredExtensionsRequest,
        options: BuildOptions,
        config: BuildConfig,
        credentials: Credentials,
    ) -> List[BuildSpecification]:
        databases = self.target_databases(request.database, config)
        self.logger.info("Discovering registered extensions for: %s", ", ".join(databases))
        return self.discovery_service.discover_all(databases, credentials, options)

    def plan(
        self,
        request: BuildRequest,
        options: BuildOptions,
        config: BuildConfig,
        credentials: Credentials,
    ) -> List[BuildSpecification]:
        if isinstance(request, InitializeRequest):
            return self.plan_initialize(request, options)
        if isinstance(request, ExplicitExtensionRequest):
            return self.plan_extension(request, options, config)
        if isinstance(request, RegisteredExtensionsRequest):
            return self.plan_registered(request, options, config, credentials)
        raise TypeError(f"Unsupported build request: {request!r}")
