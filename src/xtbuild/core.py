import logging
import os
from typing import List, Optional

from rich.console import Console

from .errors import BuildError
from .models import BuildConfig, BuildOptions, BuildSpecification, Credentials, RepositoryLayout
from .services.command_runner import CommandRunner
from .services.config_loader import ConfigLoader
from .services.credentials import CredentialResolver
from .services.delegates import ClientBuilder, DatabaseBuilder, UnregisterService
from .services.discovery import ExtensionDiscoveryService
from .services.package_installer import PackageInstaller
from .services.pipeline import PipelineExecutor
from .services.planner import BuildPlanner, ExplicitExtensionRequest, classify, validate
from .services.query import QueryService

console = Console()
logger = logging.getLogger("xtbuild")


class Builder:
    """Entry point: plans build specifications and runs them through the pipeline.

    Collaborators can be injected; anything left out is built from the layout
    and, for the external builders, from the ``builders`` configuration block.
    """

    def __init__(
        self,
        root: Optional[str] = None,
        config_loader: Optional[ConfigLoader] = None,
        command_runner: Optional[CommandRunner] = None,
        query_service=None,
        package_installer=None,
        client_builder=None,
        database_builder=None,
        unregister_service=None,
    ):
        self.layout = RepositoryLayout(root=os.path.abspath(root or os.getcwd()))
        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.credential_resolver = CredentialResolver(self.layout, config_loader=config_loader)
        self.query_service = query_service or QueryService(
            logger=logger,
            command_runner=self.command_runner,
        )
        self.package_installer = package_installer
        self.client_builder = client_builder
        self.database_builder = database_builder
        self.unregister_service = unregister_service
        self.discovery_service = ExtensionDiscoveryService(
            logger=logger,
            query_service=self.query_service,
            layout=self.layout,
        )
        self.planner = BuildPlanner(
            logger=logger,
            layout=self.layout,
            discovery_service=self.discovery_service,
        )

    def _delegate(self, cls, config: BuildConfig):
        return cls(
            logger=logger,
            command_runner=self.command_runner,
            command=config.builders.get(cls.name),
            cwd=self.layout.root,
        )

    def _pipeline(self, config: BuildConfig) -> PipelineExecutor:
        return PipelineExecutor(
            logger=logger,
            console=console,
            package_installer=self.package_installer
            or PackageInstaller(logger=logger, command_runner=self.command_runner, cwd=self.layout.root),
            client_builder=self.client_builder or self._delegate(ClientBuilder, config),
            database_builder=self.database_builder or self._delegate(DatabaseBuilder, config),
        )

    def _unregister(self, specs: List[BuildSpecification], credentials: Credentials, config: BuildConfig) -> str:
        service = self.unregister_service or self._delegate(UnregisterService, config)
        service.unregister(specs, credentials)
        databases = ", ".join(spec.database for spec in specs)
        extensions = ", ".join(specs[0].extensions) if specs else ""
        return f"Unregistered {extensions} from: {databases}\n"

    def build(self, options: BuildOptions) -> str:
        """Builds what ``options`` asks for and returns a summary message.

        Raises:
            BuildValidationError: when the options contradict each other.
            BuildError: when a collaborator fails; later steps are skipped.
        """
        request = validate(classify(options))

        credentials, config = self.credential_resolver.resolve(options)
        specs = self.planner.plan(request, options, config, credentials)
        if not specs:
            raise BuildError("No databases to build. Pass --database or configure datasource.databases.")

        if isinstance(request, ExplicitExtensionRequest) and request.unregister:
            return self._unregister(specs, credentials, config)

        return self._pipeline(config).run(specs, credentials)


def build(options: BuildOptions, root: Optional[str] = None) -> str:
    return Builder(root=root).build(options)
