"""Configuration loader for xtbuild."""

from pathlib import Path
from typing import Any, Dict, List

import yaml

from xtbuild.errors import BuildError
from xtbuild.errors_catalog import actionable_error
from xtbuild.models import BuildConfig


class ConfigLoader:
    """Loads the YAML datasource configuration."""

    SUPPORTED_KEYS = {
        "databaseServer",
        "datasource",
        "builders",
    }

    def load(self, config_path: str) -> BuildConfig:
        path = Path(config_path)
        if not path.exists():
            raise BuildError(actionable_error("config_not_found", path=config_path))

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise BuildError(f"Invalid config file '{config_path}': {exc}") from exc

        if not isinstance(parsed, dict):
            raise BuildError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise BuildError(f"Unknown configuration keys: {unknown_list}")

        database_server = self._mapping(parsed, "databaseServer")
        datasource = self._mapping(parsed, "datasource")
        builders = self._mapping(parsed, "builders")

        databases = datasource.get("databases") or []
        if not isinstance(databases, list):
            raise BuildError("`datasource.databases` must be a list of database names.")

        return BuildConfig(
            database_server=database_server,
            databases=[str(name) for name in databases],
            encryption_key_file=datasource.get("encryptionKeyFile"),
            builders=self._builders(builders),
        )

    @staticmethod
    def _mapping(parsed: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = parsed.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise BuildError(f"`{key}` must be a YAML mapping.")
        return value

    @staticmethod
    def _builders(builders: Dict[str, Any]) -> Dict[str, List[str]]:
        commands: Dict[str, List[str]] = {}
        for name, command in builders.items():
            if isinstance(command, str):
                command = command.split()
            if not isinstance(command, list) or not command:
                raise BuildError(f"`builders.{name}` must be a command string or list.")
            commands[name] = [str(part) for part in command]
        return commands
