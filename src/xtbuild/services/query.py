"""PostgreSQL query service backed by the psql client."""

import csv
import io
from typing import List, Sequence, Union

from xtbuild.errors import BuildError
from xtbuild.models import Credentials, QueryResult


class QueryService:
    """Runs SQL through psql and returns the last result set as rows."""

    RESULT_MARKER = "--xtbuild-result--"

    def __init__(self, logger, command_runner, psql_binary: str = "psql"):
        self.logger = logger
        self.command_runner = command_runner
        self.psql_binary = psql_binary

    def build_command(self, statements: Sequence[str], credentials: Credentials) -> List[str]:
        cmd = [self.psql_binary, "-X", "-q", "--csv", "-v", "ON_ERROR_STOP=1"]
        if len(statements) > 1:
            cmd.append("--single-transaction")
        if credentials.host:
            cmd.extend(["-h", str(credentials.host)])
        if credentials.port:
            cmd.extend(["-p", str(credentials.port)])
        if credentials.username:
            cmd.extend(["-U", str(credentials.username)])
        if credentials.database:
            cmd.extend(["-d", credentials.database])
        for statement in statements:
            cmd.extend(["-c", f"\\echo {self.RESULT_MARKER}", "-c", statement])
        return cmd

    def query(self, sql: Union[str, Sequence[str]], credentials: Credentials) -> QueryResult:
        statements = [sql] if isinstance(sql, str) else list(sql)
        if not statements:
            raise BuildError("No SQL statements given.")

        env = {}
        if credentials.password is not None:
            env["PGPASSWORD"] = str(credentials.password)

        self.logger.debug("Querying %s: %s", credentials.database, "; ".join(statements))
        result = self.command_runner.run(
            self.build_command(statements, credentials),
            check=True,
            capture_output=True,
            env=env,
        )
        return QueryResult(rows=self.parse_rows(result.stdout or ""))

    @classmethod
    def parse_rows(cls, output: str) -> List[dict]:
        # each statement is preceded by a marker line; keep the last block
        marker = f"\n{cls.RESULT_MARKER}\n"
        text = ("\n" + output).rsplit(marker, 1)[-1].strip()
        if not text:
            return []
        reader = csv.DictReader(io.StringIO(text))
        return [dict(row) for row in reader]
