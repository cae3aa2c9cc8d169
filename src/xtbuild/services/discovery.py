"""Registered extension discovery for xtbuild."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from xtbuild.constants import (
    CORE_EXTENSIONS_LOCATION,
    DEFAULT_EXTENSION_NAMES,
    REGISTRY_EXISTS_SQL,
    REGISTRY_INIT_SQL,
    REGISTRY_PATCH_SQL,
    REGISTRY_SELECT_SQL,
)
from xtbuild.errors import BuildError
from xtbuild.models import (
    BuildOptions,
    BuildSpecification,
    Credentials,
    ExtensionRow,
    RepositoryLayout,
)


class ExtensionDiscoveryService:
    """Works out which extensions a database has registered, in load order.

    A database without the ``xt.ext`` registry is treated as brand new and gets
    the default core extensions. The ORM library and the core client always
    come first in the resulting path list so that extensions override them.
    """

    def __init__(self, logger, query_service, layout: RepositoryLayout, max_workers: Optional[int] = None):
        self.logger = logger
        self.query_service = query_service
        self.layout = layout
        self.max_workers = max_workers

    @staticmethod
    def default_rows() -> List[ExtensionRow]:
        return [
            ExtensionRow(ext_location=CORE_EXTENSIONS_LOCATION, ext_name=name, ext_load_order=order)
            for order, name in enumerate(DEFAULT_EXTENSION_NAMES)
        ]

    @staticmethod
    def _row_from_record(record: Dict[str, str]) -> ExtensionRow:
        try:
            load_order = int(record.get("ext_load_order") or 0)
        except ValueError as exc:
            raise BuildError(f"Invalid ext_load_order in registry row: {record}") from exc
        return ExtensionRow(
            ext_location=record.get("ext_location") or "",
            ext_name=record.get("ext_name") or "",
            ext_load_order=load_order,
        )

    def registered_rows(self, credentials: Credentials) -> List[ExtensionRow]:
        exists = self.query_service.query(REGISTRY_EXISTS_SQL, credentials)
        if exists.row_count == 0:
            self.logger.info(
                "No extension registry in %s, using default extensions.", credentials.database
            )
            return self.default_rows()

        result = self.query_service.query(
            [REGISTRY_INIT_SQL, REGISTRY_PATCH_SQL, REGISTRY_SELECT_SQL],
            credentials,
        )
        rows = [self._row_from_record(record) for record in result.rows if record]
        return sorted(rows, key=lambda row: row.ext_load_order)

    def extension_paths(self, rows: Sequence[ExtensionRow]) -> List[str]:
        paths = [self.layout.orm_dir, self.layout.client_dir]
        for row in rows:
            path = self.layout.extension_path(row.ext_location, row.ext_name)
            if path is None:
                self.logger.debug(
                    "Skipping extension %s with unknown location %s", row.ext_name, row.ext_location
                )
                continue
            paths.append(path)
        return paths

    def discover(
        self,
        database: str,
        credentials: Credentials,
        options: BuildOptions,
    ) -> BuildSpecification:
        rows = self.registered_rows(credentials.for_database(database))
        return BuildSpecification(
            database=database,
            extensions=self.extension_paths(rows),
            keep_sql=options.keep_sql,
            populate_data=options.populate_data,
            wipe_views=options.wipe_views,
            client_only=options.client_only,
            database_only=options.database_only,
        )

    def discover_all(
        self,
        databases: Sequence[str],
        credentials: Credentials,
        options: BuildOptions,
    ) -> List[BuildSpecification]:
        """Discovers every database concurrently, failing on the first error."""
        if not databases:
            return []

        results: List[Optional[BuildSpecification]] = [None] * len(databases)
        executor = ThreadPoolExecutor(max_workers=self.max_workers or len(databases))
        try:
            futures = {
                executor.submit(self.discover, database, credentials, options): index
                for index, database in enumerate(databases)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        return [spec for spec in results if spec is not None]
