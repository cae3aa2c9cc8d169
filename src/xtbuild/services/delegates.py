"""External client, database and unregister builders.

Bundling the client and migrating the database are done by the application's
own tooling. Each delegate runs the command configured under ``builders`` and
appends the path of a JSON file holding the build specifications.
"""

import json
import os
import tempfile
from typing import List, Optional, Sequence

from xtbuild.errors import BuildError
from xtbuild.errors_catalog import actionable_error
from xtbuild.models import BuildSpecification, Credentials


class ExternalCommandDelegate:
    name = "builder"

    def __init__(self, logger, command_runner, command: Optional[List[str]], cwd: Optional[str] = None):
        self.logger = logger
        self.command_runner = command_runner
        self.command = list(command or [])
        self.cwd = cwd

    def _write_specs(self, specs: Sequence[BuildSpecification]) -> str:
        fd, temp_path = tempfile.mkstemp(prefix=f"xtbuild-{self.name}-", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
            json.dump([spec.to_dict() for spec in specs], file_obj, indent=2)
            file_obj.write("\n")
        return temp_path

    def invoke(self, specs: Sequence[BuildSpecification], credentials: Optional[Credentials] = None):
        if not self.command:
            raise BuildError(actionable_error("missing_builder", name=self.name))

        specs_path = self._write_specs(specs)
        try:
            self.logger.info("Running %s for %s database(s)", self.name, len(specs))
            return self.command_runner.run(
                self.command + [specs_path],
                check=True,
                capture_output=True,
                env=credentials.to_env() if credentials else None,
                cwd=self.cwd,
            )
        finally:
            try:
                os.remove(specs_path)
            except OSError:
                pass


class ClientBuilder(ExternalCommandDelegate):
    name = "client"

    def build_client(self, specs: Sequence[BuildSpecification]):
        self.invoke(specs)


class DatabaseBuilder(ExternalCommandDelegate):
    name = "database"

    def build_database(self, specs: Sequence[BuildSpecification], credentials: Credentials):
        result = self.invoke(specs, credentials)
        return (result.stdout or "").strip()


class UnregisterService(ExternalCommandDelegate):
    name = "unregister"

    def unregister(self, specs: Sequence[BuildSpecification], credentials: Credentials):
        self.invoke(specs, credentials)
