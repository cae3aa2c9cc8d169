"""Credential resolution for xtbuild."""

import os
from typing import Optional, Tuple

from xtbuild.models import BuildConfig, BuildOptions, Credentials, RepositoryLayout
from xtbuild.services.config_loader import ConfigLoader


class CredentialResolver:
    """Finds the configuration file and normalizes its database credentials."""

    KNOWN_KEYS = {"hostname", "host", "port", "user", "username", "password", "database"}

    def __init__(self, layout: RepositoryLayout, config_loader: Optional[ConfigLoader] = None):
        self.layout = layout
        self.config_loader = config_loader or ConfigLoader()

    def config_path(self, options: BuildOptions) -> str:
        if options.config and options.config.startswith(os.sep):
            return options.config
        if options.config:
            return os.path.join(os.getcwd(), options.config)
        return self.layout.default_config_path

    def resolve(self, options: BuildOptions) -> Tuple[Credentials, BuildConfig]:
        config = self.config_loader.load(self.config_path(options))
        server = config.database_server
        port = server.get("port")
        credentials = Credentials(
            host=server.get("hostname", server.get("host")),
            port=int(port) if port is not None else None,
            username=server.get("user", server.get("username")),
            password=server.get("password"),
            database=server.get("database"),
            encryption_key_file=config.encryption_key_file,
            extra={key: value for key, value in server.items() if key not in self.KNOWN_KEYS},
        )
        return credentials, config
