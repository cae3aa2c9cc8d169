"""Sequential install, client build and database build pipeline."""

import os
from typing import Callable, List, Sequence

from xtbuild.constants import NPM_PATH_MARKER
from xtbuild.models import BuildSpecification, Credentials


class PipelineExecutor:
    """Runs the three build steps in order, stopping at the first failure."""

    def __init__(self, logger, console, package_installer, client_builder, database_builder):
        self.logger = logger
        self.console = console
        self.package_installer = package_installer
        self.client_builder = client_builder
        self.database_builder = database_builder

    def _run_step(self, name: str, callback: Callable, *args):
        self.logger.debug("Step started: %s", name)
        try:
            result = callback(*args)
        except Exception as exc:
            self.logger.debug("Step failed: %s (%s)", name, exc)
            raise
        self.logger.debug("Step finished: %s", name)
        return result

    @staticmethod
    def npm_packages(specs: Sequence[BuildSpecification]) -> List[str]:
        names: List[str] = []
        for spec in specs:
            for extension in spec.extensions:
                if NPM_PATH_MARKER not in extension:
                    continue
                name = os.path.basename(os.path.normpath(extension))
                if name not in names:
                    names.append(name)
        return names

    def _forward_log(self, message: str):
        self.logger.debug(message)
        self.console.print(message, style="dim", markup=False)

    def install_packages(self, specs: Sequence[BuildSpecification]):
        names = self.npm_packages(specs)
        if not names:
            return

        self.console.print(f"[blue]Installing npm extensions: {', '.join(names)}[/blue]")
        self.package_installer.load()
        self.package_installer.on("log", self._forward_log)
        try:
            self.package_installer.install_all(names)
        finally:
            self.package_installer.off("log", self._forward_log)

    def build_client(self, specs: Sequence[BuildSpecification]):
        self.console.print("[blue]Building client...[/blue]")
        self.client_builder.build_client(specs)

    def build_database(self, specs: Sequence[BuildSpecification], credentials: Credentials) -> str:
        self.console.print("[blue]Building database...[/blue]")
        self.database_builder.build_database(specs, credentials)
        return self.summary(specs)

    @staticmethod
    def summary(specs: Sequence[BuildSpecification]) -> str:
        lines = ["Build succeeded."]
        for spec in specs:
            lines.append(f"Database: {spec.database}")
            lines.append("Directories:")
            lines.extend(f"  {extension}" for extension in spec.extensions)
        return "\n".join(lines) + "\n"

    def run(self, specs: Sequence[BuildSpecification], credentials: Credentials) -> str:
        specs = list(specs)
        self._run_step("install_packages", self.install_packages, specs)
        self._run_step("build_client", self.build_client, specs)
        return self._run_step("build_database", self.build_database, specs, credentials)
